"""Per-validator uptime over a bounded window of recent blocks."""

from __future__ import annotations

from datetime import UTC, datetime
import time

from typing import TYPE_CHECKING

from src.helpers.constants import BLOCK_DETAIL_LIMIT, BLOCK_TIME_SECONDS, UPTIME_BLOCKS
from src.helpers.logging import get_logger
from src.helpers.parsers import unix_to_datetime
from src.uptime.errors import BlockMissing, ChainUnavailable
from src.uptime.models import (
    BlockDetail,
    BlockSample,
    UptimeMethod,
    UptimeRecord,
    Validator,
)
from src.uptime.outcome import Degraded, Live, Outcome
from src.uptime.throttle import FixedIntervalThrottle


if TYPE_CHECKING:
    from src.uptime.chain import BlockCache, ChainDataClient
    from src.uptime.classifier import BlockActivityClassifier
    from src.uptime.estimator import Estimator
    from src.uptime.fallback import StatisticalFallbackGenerator

logger = get_logger(__name__)


class UptimeCalculator:
    """Drives the activity classifier across a validator's block window."""

    def __init__(
        self,
        chain: ChainDataClient,
        classifier: BlockActivityClassifier,
        estimator: Estimator,
        fallback: StatisticalFallbackGenerator,
        *,
        throttle: FixedIntervalThrottle | None = None,
        window_size: int = UPTIME_BLOCKS,
        detail_limit: int = BLOCK_DETAIL_LIMIT,
        block_time: int = BLOCK_TIME_SECONDS,
    ) -> None:
        """Initialize the calculator.

        Args:
            chain: Block data source
            classifier: Per-block activity classifier
            estimator: Estimator used for blocks that could not be fetched
            fallback: Generator used when the whole window fails
            throttle: Pacing applied after every network fetch
            window_size: Maximum number of blocks evaluated
            detail_limit: Number of trailing blocks kept on the record
            block_time: Seconds per block, for synthesized timestamps
        """
        self.chain = chain
        self.classifier = classifier
        self.estimator = estimator
        self.fallback = fallback
        self.throttle = throttle or FixedIntervalThrottle()
        self.window_size = window_size
        self.detail_limit = detail_limit
        self.block_time = block_time

    def window_start(self, from_height: int, to_height: int) -> int:
        return max(from_height, to_height - self.window_size + 1)

    async def _fetch(self, height: int, cache: BlockCache | None) -> BlockSample:
        """Fetch one block, consulting the pass cache first.

        Raises:
            BlockMissing: If the block is absent or the data source failed
        """
        if cache is not None and height in cache:
            block = cache.get(height)
            if block is None:
                raise BlockMissing(height, "missing earlier in this pass")
            return block

        try:
            block = await self.chain.get_block(height)
        except ChainUnavailable as e:
            block = None
            reason = str(e)
        else:
            reason = "not found"
        finally:
            await self.throttle.tick()

        if cache is not None:
            cache.put(height, block)
        if block is None:
            raise BlockMissing(height, reason)
        return block

    def _synthesize(
        self, validator: Validator, height: int, to_height: int
    ) -> BlockDetail:
        return BlockDetail(
            height=height,
            signed=self.estimator.draw_signed(validator.rank),
            proposer=False,
            timestamp=int(time.time()) - (to_height - height) * self.block_time,
            tx_count=0,
        )

    async def compute_for(
        self,
        validator: Validator,
        from_height: int,
        to_height: int,
        *,
        cache: BlockCache | None = None,
    ) -> UptimeRecord:
        """Compute a block-analysis uptime record for one validator.

        Blocks that cannot be fetched are replaced by a statistical sample for
        that height only.

        Raises:
            ChainUnavailable: If not a single block in the window was available
        """
        start = self.window_start(from_height, to_height)
        logger.info(
            "Analyzing activity for %s (blocks %s-%s)",
            validator.moniker or validator.address,
            start,
            to_height,
        )

        signed = 0
        proposed = 0
        fetched = 0
        details: list[BlockDetail] = []

        for height in range(start, to_height + 1):
            try:
                block = await self._fetch(height, cache)
            except BlockMissing as e:
                logger.debug("%s, using statistical sample", e)
                detail = self._synthesize(validator, height, to_height)
            else:
                fetched += 1
                verdict = self.classifier.classify(validator, block)
                detail = BlockDetail(
                    height=height,
                    signed=verdict.signed,
                    proposer=verdict.proposed,
                    timestamp=block.timestamp,
                    tx_count=block.tx_count,
                )

            signed += detail.signed
            proposed += detail.proposer
            details.append(detail)

        if details and fetched == 0:
            msg = f"No block in {start}-{to_height} could be fetched"
            raise ChainUnavailable(msg)

        record = UptimeRecord(
            address=validator.address,
            moniker=validator.moniker,
            identity=validator.identity or "",
            rank=validator.rank,
            signed_blocks=signed,
            total_blocks=len(details),
            proposed_blocks=proposed,
            block_data=details[-self.detail_limit :],
            last_seen=unix_to_datetime(details[-1].timestamp) if details else None,
            calculated_at=datetime.now(UTC),
            method=UptimeMethod.BLOCK_ANALYSIS,
        )
        logger.info(
            "Activity analysis for %s: %.1f%% (%s/%s), proposed %s",
            validator.moniker or validator.address,
            record.uptime_percentage,
            signed,
            len(details),
            proposed,
        )
        return record

    async def evaluate(
        self,
        validator: Validator,
        from_height: int,
        to_height: int,
        *,
        cache: BlockCache | None = None,
    ) -> Outcome[UptimeRecord]:
        """Compute a record, degrading to the statistical fallback on failure.

        Returns:
            Live record, or Degraded carrying the fallback record and the reason
        """
        try:
            record = await self.compute_for(
                validator, from_height, to_height, cache=cache
            )
        except Exception as e:
            logger.warning(
                "Uptime calculation failed for %s, using statistical fallback: %s",
                validator.moniker or validator.address,
                e,
            )
            return Degraded(
                value=self.fallback.generate_for(validator, to_height),
                reason=str(e),
            )
        return Live(value=record)


__all__ = ["UptimeCalculator"]
