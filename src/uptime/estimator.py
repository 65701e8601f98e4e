"""Statistical estimators used wherever live block data is unavailable.

Every pseudo-random decision in the engine goes through an ``Estimator`` so
tests can inject a seeded or scripted one.
"""

from __future__ import annotations

import random

from typing import Protocol

from pydantic import BaseModel, Field

from src.helpers.config import UptimeSettings


class EstimatorParams(BaseModel):
    """Tunable heuristic constants.

    These have no derivation beyond the original dashboard's choices and
    should not be read as real network behavior.
    """

    sign_probability_floor: float = Field(default=0.85, ge=0, le=1)
    sign_probability_step: float = Field(default=0.01, ge=0)
    default_sign_probability: float = Field(default=0.95, ge=0, le=1)
    default_propose_probability: float = Field(default=0.05, ge=0, le=1)
    fallback_base_uptime: float = Field(default=92.0, ge=0, le=100)
    fallback_rank_pivot: int = Field(default=50, ge=1)
    fallback_rank_weight: float = Field(default=0.1, ge=0)
    fallback_jitter: float = Field(default=6.0, ge=0)
    fallback_max_uptime: float = Field(default=99.9, ge=0, le=100)
    fallback_max_proposed: int = Field(default=2, ge=0)


class Estimator(Protocol):
    """Source of estimated activity when direct evidence is missing."""

    def sign_probability(self, rank: int) -> float: ...

    def draw_signed(self, rank: int) -> bool: ...

    def draw_default(self) -> tuple[bool, bool]: ...

    def fallback_uptime(self, rank: int) -> float: ...

    def draw_proposed_count(self) -> int: ...

    def draw_tx_count(self) -> int: ...


class RankWeightedEstimator:
    """Estimator where better-ranked validators are modeled as more active."""

    def __init__(
        self,
        params: EstimatorParams | None = None,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.params = params or EstimatorParams()
        self.rng = rng or random.Random(seed)

    @classmethod
    def from_settings(cls, settings: UptimeSettings) -> RankWeightedEstimator:
        params = EstimatorParams(
            sign_probability_floor=settings.sign_probability_floor,
            sign_probability_step=settings.sign_probability_step,
            fallback_base_uptime=settings.fallback_base_uptime,
            fallback_jitter=settings.fallback_jitter,
        )
        return cls(params, seed=settings.estimator_seed)

    def sign_probability(self, rank: int) -> float:
        """Probability a validator of this rank signed: max(floor, 1 - rank*step)."""
        p = self.params
        probability = max(p.sign_probability_floor, 1 - rank * p.sign_probability_step)
        return min(1.0, probability)

    def draw_signed(self, rank: int) -> bool:
        return self.rng.random() < self.sign_probability(rank)

    def draw_default(self) -> tuple[bool, bool]:
        """Coin flips used when a block could not be classified at all."""
        signed = self.rng.random() < self.params.default_sign_probability
        proposed = self.rng.random() < self.params.default_propose_probability
        return signed, proposed

    def fallback_uptime(self, rank: int) -> float:
        """Plausible uptime percentage for a validator with no live data."""
        p = self.params
        rank_bonus = max(0.0, (p.fallback_rank_pivot - rank) * p.fallback_rank_weight)
        jitter = self.rng.random() * p.fallback_jitter
        uptime = p.fallback_base_uptime + rank_bonus + jitter
        return max(0.0, min(p.fallback_max_uptime, uptime))

    def draw_proposed_count(self) -> int:
        return self.rng.randint(0, self.params.fallback_max_proposed)

    def draw_tx_count(self) -> int:
        return self.rng.randint(0, 49)


__all__ = [
    "Estimator",
    "EstimatorParams",
    "RankWeightedEstimator",
]
