"""Ranking and network-wide statistics for one uptime pass."""

from collections import Counter
from collections.abc import Iterable

from src.uptime.models import (
    BlockRange,
    NetworkStats,
    UptimeMethod,
    UptimeRecord,
    UptimeStatus,
)


def rank_records(records: Iterable[UptimeRecord]) -> list[UptimeRecord]:
    """Sort by uptime percentage descending and assign 1-based ``uptime_rank``.

    The sort is stable, so ties keep their incoming order and re-ranking an
    already ranked list is a no-op.
    """
    ordered = sorted(records, key=lambda r: r.uptime_percentage, reverse=True)
    return [
        record.model_copy(update={"uptime_rank": position})
        for position, record in enumerate(ordered, start=1)
    ]


def average_uptime(records: list[UptimeRecord]) -> str:
    """Mean uptime percentage formatted to one decimal place."""
    if not records:
        return "0.0"
    mean = sum(r.uptime_percentage for r in records) / len(records)
    return f"{mean:.1f}"


def compute_network_stats(
    records: list[UptimeRecord], from_height: int, to_height: int
) -> NetworkStats:
    """Summarize a pass: averages plus status and method distributions."""
    statuses = Counter(r.status for r in records)
    methods = Counter(r.method for r in records)
    return NetworkStats(
        total_validators=len(records),
        average_uptime=average_uptime(records),
        block_range=BlockRange(
            from_height=from_height,
            to_height=to_height,
            total=max(0, to_height - from_height + 1),
        ),
        status_distribution={s.value: statuses.get(s, 0) for s in UptimeStatus},
        method_distribution={m.value: methods.get(m, 0) for m in UptimeMethod},
    )


__all__ = [
    "average_uptime",
    "compute_network_stats",
    "rank_records",
]
