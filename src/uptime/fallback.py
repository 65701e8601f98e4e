"""Statistical uptime records for validators with no usable live data."""

from datetime import UTC, datetime
import math
import time

from src.helpers.constants import BLOCK_DETAIL_LIMIT, BLOCK_TIME_SECONDS, UPTIME_BLOCKS
from src.helpers.logging import get_logger
from src.uptime.estimator import Estimator
from src.uptime.models import BlockDetail, UptimeMethod, UptimeRecord, Validator

logger = get_logger(__name__)


class StatisticalFallbackGenerator:
    """Builds a complete, internally consistent record without the data source.

    The record has the same shape as a block-analysis record; only ``method``
    tells them apart.
    """

    def __init__(
        self,
        estimator: Estimator,
        *,
        window_size: int = UPTIME_BLOCKS,
        block_time: int = BLOCK_TIME_SECONDS,
        detail_limit: int = BLOCK_DETAIL_LIMIT,
    ) -> None:
        self.estimator = estimator
        self.window_size = window_size
        self.block_time = block_time
        self.detail_limit = detail_limit

    def generate_for(
        self, validator: Validator, latest_height: int | None = None
    ) -> UptimeRecord:
        """Synthesize an uptime record for one validator.

        Args:
            validator: Validator to estimate
            latest_height: Last block of the window; defaults to the window size.
                The window never starts below block 1, so a short chain gives
                a shorter window.

        Returns:
            Record with method ``statistical_fallback``
        """
        if latest_height is None:
            latest_height = self.window_size
        end_height = max(1, latest_height)
        start_height = max(1, end_height - self.window_size + 1)
        total = end_height - start_height + 1
        target = self.estimator.fallback_uptime(validator.rank)
        signed = min(total, math.floor(target / 100 * total))
        proposed = min(signed, self.estimator.draw_proposed_count())

        now = datetime.now(UTC)
        base_timestamp = int(time.time()) - total * self.block_time

        # Signed blocks first, proposals among the earliest signed ones
        details = [
            BlockDetail(
                height=start_height + i,
                signed=i < signed,
                proposer=i < proposed,
                timestamp=base_timestamp + i * self.block_time,
                tx_count=self.estimator.draw_tx_count(),
            )
            for i in range(total)
        ]

        logger.info(
            "Statistical fallback for %s: %.1f%% (%s/%s)",
            validator.moniker or validator.address,
            100 * signed / total,
            signed,
            total,
        )

        return UptimeRecord(
            address=validator.address,
            moniker=validator.moniker,
            identity=validator.identity or "",
            rank=validator.rank,
            signed_blocks=signed,
            total_blocks=total,
            proposed_blocks=proposed,
            block_data=details[-self.detail_limit :],
            last_seen=now,
            calculated_at=now,
            method=UptimeMethod.STATISTICAL_FALLBACK,
        )


__all__ = ["StatisticalFallbackGenerator"]
