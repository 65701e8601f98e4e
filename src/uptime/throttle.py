"""Fixed-interval throttles that pace calls to the chain data source."""

from __future__ import annotations

import asyncio

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class FixedIntervalThrottle:
    """Sleep for ``delay`` seconds after every ``every`` ticks.

    With ``every=10, delay=0.2`` the 10th, 20th, ... tick pauses for 200ms;
    with ``every=1`` each tick pauses.

    Example:
        ```python
        throttle = FixedIntervalThrottle(every=10, delay=0.2)
        for height in heights:
            await fetch(height)
            await throttle.tick()
        ```
    """

    def __init__(
        self,
        every: int = 1,
        delay: float = 0.0,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if every < 1:
            msg = "every must be at least 1"
            raise ValueError(msg)
        if delay < 0:
            msg = "delay cannot be negative"
            raise ValueError(msg)

        self.every = every
        self.delay = delay
        self._sleep = sleep
        self.ticks = 0
        self.pauses = 0

    async def tick(self) -> bool:
        """Count one call, pausing if it completes an interval.

        Returns:
            True if this tick paused
        """
        self.ticks += 1
        if self.ticks % self.every != 0 or self.delay <= 0:
            return False
        self.pauses += 1
        await self._sleep(self.delay)
        return True

    def reset(self) -> None:
        self.ticks = 0
        self.pauses = 0


__all__ = ["FixedIntervalThrottle"]
