"""Network aggregator and scheduler for periodic uptime passes.

One pass: latest height → roster refresh → every validator sequentially
through the calculator (with statistical fallback) → ranking and network
stats → one atomic store replacement.

Passes never overlap. A scheduled tick or manual refresh that arrives while
a pass is running is skipped, not queued.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from src.helpers.constants import (
    FALLBACK_BLOCK_HEIGHT,
    INITIAL_DELAY,
    UPDATE_INTERVAL,
)
from src.helpers.logging import get_logger
from src.uptime.aggregator import compute_network_stats, rank_records
from src.uptime.chain import BlockCache
from src.uptime.errors import ChainUnavailable, PassFailed
from src.uptime.models import NetworkStats, SchedulerState, UptimeRecord
from src.uptime.outcome import Degraded, Outcome
from src.uptime.store import UptimeSnapshot
from src.uptime.throttle import FixedIntervalThrottle


if TYPE_CHECKING:
    from src.uptime.calculator import UptimeCalculator
    from src.uptime.chain import ChainDataClient
    from src.uptime.fallback import StatisticalFallbackGenerator
    from src.uptime.models import Validator
    from src.uptime.roster import ValidatorRosterCache
    from src.uptime.store import UptimeStore

logger = get_logger(__name__)


class PassResult(BaseModel):
    """Outcome of one uptime pass."""

    success: bool
    skipped: bool = False
    validators_processed: int = 0
    degraded_validators: int = 0
    network_average: str = "0.0"
    method_distribution: dict[str, int] = Field(default_factory=dict)
    error: str | None = None
    records: list[UptimeRecord] = Field(default_factory=list)
    stats: NetworkStats | None = None


class UptimeScheduler:
    """Runs uptime passes on a fixed interval and publishes them to the store."""

    def __init__(
        self,
        chain: ChainDataClient,
        roster: ValidatorRosterCache,
        calculator: UptimeCalculator,
        fallback: StatisticalFallbackGenerator,
        store: UptimeStore,
        *,
        window_size: int,
        validator_throttle: FixedIntervalThrottle | None = None,
        update_interval: float = UPDATE_INTERVAL,
        initial_delay: float = INITIAL_DELAY,
        fallback_block_height: int = FALLBACK_BLOCK_HEIGHT,
    ) -> None:
        self.chain = chain
        self.roster = roster
        self.calculator = calculator
        self.fallback = fallback
        self.store = store
        self.window_size = window_size
        self.validator_throttle = validator_throttle or FixedIntervalThrottle()
        self.update_interval = update_interval
        self.initial_delay = initial_delay
        self.fallback_block_height = fallback_block_height

        self.state = SchedulerState.IDLE
        self.last_update: datetime | None = None
        self.last_error: str | None = None
        self.last_result: PassResult | None = None

        self._lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None
        self._tick_tasks: set[asyncio.Task[PassResult]] = set()

    @property
    def is_running_pass(self) -> bool:
        return self._lock.locked()

    async def _latest_height(self) -> tuple[int, bool]:
        """Resolve the window end; the flag is False when no height is known."""
        try:
            return await self.chain.get_latest_height(), True
        except ChainUnavailable as e:
            if self.chain.last_height:
                logger.warning(
                    "Block height unavailable, reusing %s: %s",
                    self.chain.last_height,
                    e,
                )
                return self.chain.last_height, True
            logger.warning(
                "Block height unavailable and none known yet, assuming %s: %s",
                self.fallback_block_height,
                e,
            )
            return self.fallback_block_height, False

    async def _evaluate(
        self,
        validator: Validator,
        from_height: int,
        to_height: int,
        cache: BlockCache,
    ) -> Outcome[UptimeRecord]:
        try:
            return await self.calculator.evaluate(
                validator, from_height, to_height, cache=cache
            )
        except Exception as e:
            logger.exception(
                "Validator %s analysis error", validator.moniker or validator.address
            )
            return Degraded(
                value=self.fallback.generate_for(validator, to_height), reason=str(e)
            )

    async def _execute_pass(self) -> PassResult:
        latest, height_known = await self._latest_height()
        from_height = max(1, latest - self.window_size + 1)
        logger.info(
            "Analyzing blocks %s to %s (%s blocks)",
            from_height,
            latest,
            latest - from_height + 1,
        )

        validators = await self.roster.refresh()
        if not validators:
            if not self.roster.has_succeeded:
                msg = "No validators found: roster has never been fetched"
            else:
                msg = "No validators found"
            raise PassFailed(msg)

        cache = BlockCache()
        records: list[UptimeRecord] = []
        degraded = 0
        for index, validator in enumerate(validators):
            if index:
                await self.validator_throttle.tick()
            if height_known:
                outcome = await self._evaluate(validator, from_height, latest, cache)
            else:
                outcome = Degraded(
                    value=self.fallback.generate_for(validator, latest),
                    reason="Block height unavailable",
                )
            if outcome.degraded:
                degraded += 1
            records.append(outcome.value)

        ranked = rank_records(records)
        stats = compute_network_stats(ranked, from_height, latest)
        snapshot = UptimeSnapshot(ranked, stats)
        self.store.replace(snapshot)
        self.last_update = snapshot.updated_at

        logger.info(
            "Uptime analysis completed: %s validators, %s degraded",
            len(ranked),
            degraded,
        )
        logger.info("Average network uptime: %s%%", stats.average_uptime)
        logger.info("Method distribution: %s", stats.method_distribution)

        return PassResult(
            success=True,
            validators_processed=len(ranked),
            degraded_validators=degraded,
            network_average=stats.average_uptime,
            method_distribution=stats.method_distribution,
            records=ranked,
            stats=stats,
        )

    async def run_pass(self) -> PassResult:
        """Run one full pass unless another one is in flight.

        Returns:
            PassResult; ``skipped`` is set when a pass was already running
        """
        if self._lock.locked():
            logger.info("Uptime pass already in progress, skipping")
            return PassResult(
                success=False, skipped=True, error="Uptime pass already in progress"
            )

        async with self._lock:
            logger.info("Starting uptime analysis pass")
            self.state = SchedulerState.UPDATING
            try:
                result = await self._execute_pass()
            except PassFailed as e:
                result = self._fail(str(e))
            except Exception as e:
                logger.exception("Unexpected error during uptime pass")
                result = self._fail(f"Unexpected error: {e}")
            else:
                self.state = SchedulerState.SUCCESS
                self.last_error = None

            self.last_result = result
            return result

    def _fail(self, error: str) -> PassResult:
        logger.error("Uptime analysis failed: %s", error)
        self.state = SchedulerState.ERROR
        self.last_error = error
        return PassResult(success=False, error=error)

    async def refresh(self) -> PassResult:
        """Manual, out-of-band pass."""
        logger.info("Manual uptime refresh requested")
        return await self.run_pass()

    def _spawn_pass(self) -> None:
        task = asyncio.create_task(self.run_pass())
        self._tick_tasks.add(task)
        task.add_done_callback(self._tick_tasks.discard)

    async def _run_forever(self) -> None:
        await asyncio.sleep(self.initial_delay)
        self._spawn_pass()
        while True:
            await asyncio.sleep(self.update_interval)
            self._spawn_pass()

    def start(self) -> asyncio.Task[None]:
        """Start the background loop: first pass after ``initial_delay``."""
        if self._task is not None and not self._task.done():
            return self._task
        logger.info(
            "Starting background uptime service (%ss interval)", self.update_interval
        )
        self._task = asyncio.create_task(self._run_forever())
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and any pass it started."""
        tasks = [t for t in (self._task, *self._tick_tasks) if t is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        self._tick_tasks.clear()

    def cache_age_seconds(self, now: datetime | None = None) -> int | None:
        if self.last_update is None:
            return None
        now = now or datetime.now(UTC)
        return int((now - self.last_update).total_seconds())


__all__ = [
    "PassResult",
    "UptimeScheduler",
]
