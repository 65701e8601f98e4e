"""Exceptions raised by the uptime engine."""


class UptimeError(Exception):
    """Base class for uptime engine errors."""


class ChainUnavailable(UptimeError):
    """The chain data source is unreachable or kept answering with errors."""


class RosterUnavailable(UptimeError):
    """The validator roster service could not be reached or returned bad data."""


class BlockMissing(UptimeError):
    """A specific block height could not be retrieved."""

    def __init__(self, height: int, reason: str = "not available") -> None:
        self.height = height
        super().__init__(f"Block {height} {reason}")


class PassFailed(UptimeError):
    """No validator could be processed in an uptime pass."""


__all__ = [
    "BlockMissing",
    "ChainUnavailable",
    "PassFailed",
    "RosterUnavailable",
    "UptimeError",
]
