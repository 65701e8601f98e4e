"""Long-running validator uptime service.

Wires settings, HTTP clients, the roster cache, the chain client, and the
scheduler together, then runs passes on a fixed interval until SIGINT or
SIGTERM. The query surface (``UptimeService.api``) reads from the same
in-memory store and can be mounted by any HTTP layer.

Usage:
    python -m src.uptime.live
"""

import asyncio
import signal
import sys

from src.helpers.config import UptimeSettings, load_settings
from src.helpers.http import create_http_client
from src.helpers.logging import get_logger
from src.uptime.api import UptimeQueryService
from src.uptime.calculator import UptimeCalculator
from src.uptime.chain import ChainDataClient
from src.uptime.classifier import BlockActivityClassifier
from src.uptime.estimator import Estimator, RankWeightedEstimator
from src.uptime.fallback import StatisticalFallbackGenerator
from src.uptime.roster import ValidatorRosterCache
from src.uptime.scheduler import UptimeScheduler
from src.uptime.store import UptimeStore
from src.uptime.throttle import FixedIntervalThrottle

logger = get_logger(__name__)


class UptimeService:
    """Composition root for the uptime engine."""

    def __init__(
        self,
        settings: UptimeSettings,
        *,
        estimator: Estimator | None = None,
        store: UptimeStore | None = None,
    ) -> None:
        """Build every component from settings.

        Args:
            settings: Runtime settings
            estimator: Optional estimator override (e.g. a seeded one in tests)
            store: Optional store to publish into
        """
        self.settings = settings
        self.rpc_http_client = create_http_client(timeout=settings.rpc_timeout)
        self.roster_http_client = create_http_client(timeout=settings.roster_timeout)

        self.estimator = estimator or RankWeightedEstimator.from_settings(settings)
        self.store = store or UptimeStore()
        self.chain = ChainDataClient.from_settings(settings, self.rpc_http_client)
        self.roster = ValidatorRosterCache.from_settings(
            settings, self.roster_http_client
        )
        self.fallback = StatisticalFallbackGenerator(
            self.estimator,
            window_size=settings.uptime_blocks,
            block_time=settings.block_time_seconds,
            detail_limit=settings.block_detail_limit,
        )
        self.calculator = UptimeCalculator(
            self.chain,
            BlockActivityClassifier(self.estimator, settings.tx_sample_size),
            self.estimator,
            self.fallback,
            throttle=FixedIntervalThrottle(
                every=settings.rate_limit_every, delay=settings.rate_limit_delay
            ),
            window_size=settings.uptime_blocks,
            detail_limit=settings.block_detail_limit,
            block_time=settings.block_time_seconds,
        )
        self.scheduler = UptimeScheduler(
            self.chain,
            self.roster,
            self.calculator,
            self.fallback,
            self.store,
            window_size=settings.uptime_blocks,
            validator_throttle=FixedIntervalThrottle(
                every=1, delay=settings.validator_delay
            ),
            update_interval=settings.update_interval,
            initial_delay=settings.initial_delay,
            fallback_block_height=settings.fallback_block_height,
        )
        self.api = UptimeQueryService(self.store, self.scheduler, settings)

        self.should_shutdown = False
        self._stopped = asyncio.Event()

    def shutdown(self) -> None:
        """Gracefully shutdown the service."""
        logger.info("Shutdown signal received, stopping...")
        self.should_shutdown = True
        self._stopped.set()

    async def cleanup(self) -> None:
        """Clean up resources."""
        await self.scheduler.stop()
        await self.rpc_http_client.aclose()
        await self.roster_http_client.aclose()

    async def run(self) -> None:
        """Run the background scheduler until shutdown."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.shutdown)

        logger.info("Validator API: %s", self.settings.validator_api_url)
        logger.info("EVM RPC: %s", self.settings.rpc_url)
        logger.info("Analyzing last %s blocks", self.settings.uptime_blocks)

        try:
            await self.roster.refresh()
            self.scheduler.start()
            await self._stopped.wait()
        finally:
            await self.cleanup()

        logger.info("Uptime service stopped")


async def main() -> None:
    """Main entry point."""
    try:
        service = UptimeService(load_settings())
        await service.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, exiting...")
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
