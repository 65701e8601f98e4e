"""In-memory result store read by the query surface."""

from __future__ import annotations

from datetime import UTC, datetime
from types import MappingProxyType

from typing import TYPE_CHECKING, Any

from src.helpers.constants import ALL_VALIDATORS_KEY, NETWORK_STATS_KEY


if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from src.uptime.models import NetworkStats, UptimeRecord


class UptimeSnapshot:
    """Immutable result of one completed pass."""

    __slots__ = ("_by_address", "network_stats", "records", "updated_at")

    def __init__(
        self,
        records: Iterable[UptimeRecord],
        network_stats: NetworkStats,
        updated_at: datetime | None = None,
    ) -> None:
        self.records: tuple[UptimeRecord, ...] = tuple(records)
        self.network_stats = network_stats
        self.updated_at = updated_at or datetime.now(UTC)
        self._by_address: Mapping[str, UptimeRecord] = MappingProxyType(
            {record.key: record for record in self.records}
        )

    def get(self, address: str) -> UptimeRecord | None:
        return self._by_address.get(address.strip().lower())

    def __len__(self) -> int:
        return len(self.records)


class UptimeStore:
    """Single-writer, multi-reader store of the latest snapshot.

    Writers replace the whole snapshot in one assignment, so a reader sees
    either the previous pass or the new one, never a mix. There is no
    eviction; entries live until the next successful pass.
    """

    def __init__(self) -> None:
        self._snapshot: UptimeSnapshot | None = None

    @property
    def snapshot(self) -> UptimeSnapshot | None:
        return self._snapshot

    @property
    def is_ready(self) -> bool:
        return self._snapshot is not None

    @property
    def last_updated(self) -> datetime | None:
        snapshot = self._snapshot
        return snapshot.updated_at if snapshot else None

    def replace(self, snapshot: UptimeSnapshot) -> None:
        self._snapshot = snapshot

    def reset(self) -> None:
        self._snapshot = None

    def all_validators(self) -> list[UptimeRecord] | None:
        snapshot = self._snapshot
        return list(snapshot.records) if snapshot else None

    def network_stats(self) -> NetworkStats | None:
        snapshot = self._snapshot
        return snapshot.network_stats if snapshot else None

    def get_validator(self, address: str) -> UptimeRecord | None:
        snapshot = self._snapshot
        return snapshot.get(address) if snapshot else None

    def get(self, key: str) -> Any:
        """Key-value lookup: the two aggregate keys or a validator address."""
        if key == NETWORK_STATS_KEY:
            return self.network_stats()
        if key == ALL_VALIDATORS_KEY:
            return self.all_validators()
        return self.get_validator(key)


__all__ = [
    "UptimeSnapshot",
    "UptimeStore",
]
