"""Pytest configuration and shared fixtures for uptime engine tests."""

from collections.abc import Callable

import pytest

from typing import Any

from src.uptime.models import BlockSample, Validator


class ScriptedEstimator:
    """Deterministic estimator with fixed answers.

    Records every rank it is asked about so tests can assert which
    degradation path was taken.
    """

    def __init__(
        self,
        *,
        signed: bool = True,
        default: tuple[bool, bool] = (True, False),
        uptime: float = 95.0,
        proposed_count: int = 1,
        tx_count: int = 7,
        probability: float = 0.9,
    ) -> None:
        self.signed = signed
        self.default = default
        self.uptime = uptime
        self.proposed_count = proposed_count
        self.tx_count = tx_count
        self.probability = probability
        self.signed_draws: list[int] = []
        self.default_draws = 0
        self.fallback_ranks: list[int] = []

    def sign_probability(self, rank: int) -> float:
        return self.probability

    def draw_signed(self, rank: int) -> bool:
        self.signed_draws.append(rank)
        return self.signed

    def draw_default(self) -> tuple[bool, bool]:
        self.default_draws += 1
        return self.default

    def fallback_uptime(self, rank: int) -> float:
        self.fallback_ranks.append(rank)
        return self.uptime

    def draw_proposed_count(self) -> int:
        return self.proposed_count

    def draw_tx_count(self) -> int:
        return self.tx_count


class FakeChain:
    """In-memory chain data client.

    ``blocks`` maps height to a BlockSample, None (missing) or an exception
    to raise. Heights not in the map are generated from ``proposer``.
    """

    def __init__(
        self,
        latest: int | Exception = 100,
        blocks: dict[int, Any] | None = None,
        *,
        proposer: str | None = "0x" + "f" * 40,
        fail_all: Exception | None = None,
    ) -> None:
        self.latest = latest
        self.blocks = blocks or {}
        self.proposer = proposer
        self.fail_all = fail_all
        self.last_height: int | None = None
        self.block_calls: list[int] = []
        self.height_calls = 0

    async def get_latest_height(self) -> int:
        self.height_calls += 1
        if isinstance(self.latest, Exception):
            raise self.latest
        self.last_height = self.latest
        return self.latest

    async def get_block(self, height: int) -> BlockSample | None:
        self.block_calls.append(height)
        if self.fail_all is not None:
            raise self.fail_all
        if height in self.blocks:
            value = self.blocks[height]
            if isinstance(value, Exception):
                raise value
            return value
        return BlockSample(
            height=height,
            proposer=self.proposer,
            tx_senders=[],
            timestamp=1_700_000_000 + height * 6,
            tx_count=3,
        )


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def make_validator() -> Callable[..., Validator]:
    """Factory for validators with sensible defaults."""

    def _make(
        address: str = "0x" + "a" * 40,
        *,
        rank: int = 1,
        moniker: str = "alpha",
        owner_address: str | None = None,
        identity: str | None = None,
    ) -> Validator:
        return Validator(
            address=address,
            rank=rank,
            moniker=moniker,
            owner_address=owner_address,
            identity=identity,
            status="Aktif",
        )

    return _make


@pytest.fixture
def scripted_estimator() -> type[ScriptedEstimator]:
    """The ScriptedEstimator class, for tests that need custom answers."""
    return ScriptedEstimator


@pytest.fixture
def fake_chain() -> type[FakeChain]:
    """The FakeChain class."""
    return FakeChain


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """A fresh recording sleep."""
    return RecordingSleep()


@pytest.fixture
def tolerance() -> float:
    """Provide tolerance for floating point comparisons.

    Returns:
        float: Maximum acceptable difference for float equality
    """
    return 1e-9
