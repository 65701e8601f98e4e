"""Read-only query surface over the uptime store.

Each operation returns a ``QueryResponse`` with an HTTP status code and a
JSON-ready body. Binding these to routes is left to the HTTP layer.
"""

from __future__ import annotations

from datetime import UTC, datetime

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from src.helpers.logging import get_logger
from src.helpers.parsers import is_address
from src.uptime.models import ActivityBasis


if TYPE_CHECKING:
    from src.helpers.config import UptimeSettings
    from src.uptime.scheduler import UptimeScheduler
    from src.uptime.store import UptimeStore

logger = get_logger(__name__)


class QueryResponse(BaseModel):
    """Status code plus JSON body; every body carries ``success``."""

    status_code: int = 200
    body: dict[str, Any]

    @property
    def success(self) -> bool:
        return bool(self.body.get("success"))


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


class UptimeQueryService:
    """Serves cached uptime data; only ``refresh`` triggers computation."""

    def __init__(
        self,
        store: UptimeStore,
        scheduler: UptimeScheduler,
        settings: UptimeSettings | None = None,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.settings = settings

    def _cache_info(self) -> dict[str, Any]:
        return {
            "last_updated": _iso(self.store.last_updated),
            "update_status": self.scheduler.state.value,
            "cache_age_seconds": self.scheduler.cache_age_seconds(),
        }

    def grid(self) -> QueryResponse:
        """Ranked validator list plus network stats, or 503 before the first pass."""
        snapshot = self.store.snapshot
        if snapshot is None:
            return QueryResponse(
                status_code=503,
                body={
                    "success": False,
                    "error": "Uptime data not ready",
                    "message": "Please wait for initial block analysis",
                    "status": self.scheduler.state.value,
                },
            )

        logger.debug("Serving uptime grid: %s validators", len(snapshot))
        return QueryResponse(
            body={
                "success": True,
                "data": [_dump(record) for record in snapshot.records],
                "meta": _dump(snapshot.network_stats),
                "cache_info": self._cache_info(),
            }
        )

    def validator(self, address: str) -> QueryResponse:
        """One validator's record by case-insensitive address."""
        address = address.strip()
        if not is_address(address):
            return QueryResponse(
                status_code=400,
                body={"success": False, "error": "Invalid validator address"},
            )

        record = self.store.get_validator(address)
        if record is None:
            return QueryResponse(
                status_code=404,
                body={
                    "success": False,
                    "error": "Validator not found in cache",
                    "message": "Wait for next update cycle or trigger refresh",
                },
            )

        return QueryResponse(
            body={"success": True, "data": _dump(record), "source": "cache"}
        )

    def stats(self) -> QueryResponse:
        """Network stats only, or 503 before the first pass."""
        stats = self.store.network_stats()
        if stats is None:
            return QueryResponse(
                status_code=503,
                body={"success": False, "error": "Network stats not ready"},
            )

        return QueryResponse(
            body={
                "success": True,
                "data": _dump(stats),
                "last_updated": _iso(self.store.last_updated),
                "update_status": self.scheduler.state.value,
            }
        )

    async def refresh(self) -> QueryResponse:
        """Run one pass now and report its outcome."""
        result = await self.scheduler.refresh()
        if result.success:
            message = "Uptime analysis refreshed successfully"
        elif result.skipped:
            message = "Refresh skipped, a pass is already running"
        else:
            message = "Refresh failed"

        return QueryResponse(
            body={
                "success": result.success,
                "message": message,
                "validators_processed": result.validators_processed,
                "network_average": result.network_average,
                "method_distribution": result.method_distribution,
                "error": result.error,
            }
        )

    def health(self) -> QueryResponse:
        """Scheduler state, last update, and a summary of the active config."""
        body: dict[str, Any] = {
            "success": True,
            "message": "Validator uptime tracking active",
            "timestamp": datetime.now(UTC).isoformat(),
            "status": self.scheduler.state.value,
            "last_update": _iso(self.scheduler.last_update),
            "last_error": self.scheduler.last_error,
        }
        if self.settings is not None:
            body["config"] = {
                "uptime_blocks": self.settings.uptime_blocks,
                "update_interval": f"{self.settings.update_interval:g}s",
                "validator_api": self.settings.validator_api_url,
                "detection_methods": [
                    ActivityBasis.PROPOSER.value,
                    ActivityBasis.TRANSACTION.value,
                    ActivityBasis.ESTIMATE.value,
                ],
                "rate_limit_delay": f"{self.settings.rate_limit_delay * 1000:g}ms",
            }
        return QueryResponse(body=body)


__all__ = [
    "QueryResponse",
    "UptimeQueryService",
]
