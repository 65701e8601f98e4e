"""Pydantic models for validator uptime analysis."""

from datetime import datetime
from enum import StrEnum

from typing import Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from src.helpers.constants import DEFAULT_RANK
from src.helpers.parsers import normalize_address


class UptimeStatus(StrEnum):
    """Uptime bucket, from best to worst."""

    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    POOR = "poor"
    CRITICAL = "critical"


class UptimeMethod(StrEnum):
    """How an uptime record was produced."""

    BLOCK_ANALYSIS = "block_analysis"
    STATISTICAL_FALLBACK = "statistical_fallback"


class ActivityBasis(StrEnum):
    """Heuristic layer that decided an activity verdict."""

    PROPOSER = "proposer"
    TRANSACTION = "transaction"
    ESTIMATE = "estimate"
    DEGRADED = "degraded"


class SchedulerState(StrEnum):
    """Lifecycle state of the uptime scheduler."""

    IDLE = "idle"
    UPDATING = "updating"
    SUCCESS = "success"
    ERROR = "error"


# Lower bounds, checked top to bottom
STATUS_THRESHOLDS: tuple[tuple[float, UptimeStatus], ...] = (
    (98.0, UptimeStatus.EXCELLENT),
    (95.0, UptimeStatus.GOOD),
    (90.0, UptimeStatus.WARNING),
    (85.0, UptimeStatus.POOR),
)


def status_for_uptime(uptime_percentage: float) -> UptimeStatus:
    """Classify an uptime percentage into its status bucket.

    Example:
        >>> status_for_uptime(98.0)
        <UptimeStatus.EXCELLENT: 'excellent'>
        >>> status_for_uptime(97.9)
        <UptimeStatus.GOOD: 'good'>
    """
    for threshold, status in STATUS_THRESHOLDS:
        if uptime_percentage >= threshold:
            return status
    return UptimeStatus.CRITICAL


class CamelModel(BaseModel):
    """Base model serializing to the camelCase payload contract."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Validator(CamelModel):
    """Active validator from the roster service."""

    address: str = Field(..., min_length=1, description="Validator address")
    owner_address: str | None = Field(
        default=None, description="Owner/operator address used as a matching alias"
    )
    moniker: str = Field(default="", description="Display name")
    rank: int = Field(default=DEFAULT_RANK, ge=1, description="1-based stake rank")
    identity: str | None = Field(default=None, description="External identity handle")
    status: str | None = Field(default=None, description="Roster membership status")

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    @field_validator("address")
    @classmethod
    def _strip_address(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "address cannot be blank"
            raise ValueError(msg)
        return value

    @field_validator("rank", mode="before")
    @classmethod
    def _default_rank(cls, value: Any) -> Any:
        if value in (None, "", 0):
            return DEFAULT_RANK
        return value

    @property
    def key(self) -> str:
        """Lowercased address used as the cache key."""
        return self.address.lower()

    def matches(self, address: str | None) -> bool:
        """Check address against this validator's address or owner, ignoring case."""
        candidate = normalize_address(address)
        if candidate is None:
            return False
        return candidate in {
            normalize_address(self.address),
            normalize_address(self.owner_address),
        }


class BlockSample(BaseModel):
    """Block data needed to classify validator activity."""

    height: int
    proposer: str | None = None
    tx_senders: list[str] = Field(default_factory=list)
    timestamp: int
    tx_count: int = 0


class ActivityVerdict(BaseModel):
    """Outcome of classifying one validator against one block."""

    signed: bool
    proposed: bool = False
    basis: ActivityBasis


class BlockDetail(CamelModel):
    """Per-block entry kept on an uptime record."""

    height: int
    signed: bool
    proposer: bool = Field(..., description="Whether the validator proposed it")
    timestamp: int
    tx_count: int = 0


class UptimeRecord(CamelModel):
    """Uptime summary for one validator over the analysis window."""

    address: str = Field(..., alias="validator")
    moniker: str = ""
    identity: str = ""
    rank: int
    signed_blocks: int = Field(..., ge=0)
    total_blocks: int = Field(..., ge=0)
    proposed_blocks: int = Field(default=0, ge=0)
    block_data: list[BlockDetail] = Field(default_factory=list)
    last_seen: datetime | None = None
    calculated_at: datetime
    method: UptimeMethod
    uptime_rank: int | None = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    @model_validator(mode="after")
    def _check_counts(self) -> Self:
        if self.signed_blocks > self.total_blocks:
            msg = "signed_blocks cannot exceed total_blocks"
            raise ValueError(msg)
        if self.proposed_blocks > self.total_blocks:
            msg = "proposed_blocks cannot exceed total_blocks"
            raise ValueError(msg)
        return self

    @computed_field(alias="missedBlocks")  # type: ignore[prop-decorator]
    @property
    def missed_blocks(self) -> int:
        return self.total_blocks - self.signed_blocks

    @computed_field(alias="uptimePercentage")  # type: ignore[prop-decorator]
    @property
    def uptime_percentage(self) -> float:
        if self.total_blocks == 0:
            return 0.0
        return 100.0 * self.signed_blocks / self.total_blocks

    @computed_field(alias="status")  # type: ignore[prop-decorator]
    @property
    def status(self) -> UptimeStatus:
        return status_for_uptime(self.uptime_percentage)

    @property
    def key(self) -> str:
        return self.address.lower()


class BlockRange(BaseModel):
    """Inclusive block range analyzed in a pass."""

    from_height: int = Field(..., alias="from")
    to_height: int = Field(..., alias="to")
    total: int

    model_config = ConfigDict(populate_by_name=True)


class NetworkStats(CamelModel):
    """Network-wide aggregate of one uptime pass."""

    total_validators: int
    average_uptime: str
    block_range: BlockRange
    status_distribution: dict[str, int]
    method_distribution: dict[str, int]


__all__ = [
    "STATUS_THRESHOLDS",
    "ActivityBasis",
    "ActivityVerdict",
    "BlockDetail",
    "BlockRange",
    "BlockSample",
    "NetworkStats",
    "SchedulerState",
    "UptimeMethod",
    "UptimeRecord",
    "UptimeStatus",
    "Validator",
    "status_for_uptime",
]
