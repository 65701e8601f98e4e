"""Tests for the read-only query surface."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.helpers.config import UptimeSettings
from src.uptime.api import QueryResponse, UptimeQueryService
from src.uptime.calculator import UptimeCalculator
from src.uptime.classifier import BlockActivityClassifier
from src.uptime.fallback import StatisticalFallbackGenerator
from src.uptime.models import SchedulerState, Validator
from src.uptime.scheduler import PassResult, UptimeScheduler
from src.uptime.store import UptimeStore

ALPHA = "0x" + "a" * 40
BETA = "0x" + "b" * 40


class StaticRoster:
    """Roster that always returns the same validators."""

    has_succeeded = True

    def __init__(self, validators: list[Validator]) -> None:
        self._validators = validators

    async def refresh(self) -> list[Validator]:
        return list(self._validators)


@pytest.fixture
def service(fake_chain, scripted_estimator) -> UptimeQueryService:
    """Query service over a scheduler with one validator and no passes yet."""
    estimator = scripted_estimator(signed=False)
    chain = fake_chain(latest=100, proposer=ALPHA)
    fallback = StatisticalFallbackGenerator(estimator, window_size=10, detail_limit=5)
    calculator = UptimeCalculator(
        chain,
        BlockActivityClassifier(estimator),
        estimator,
        fallback,
        window_size=10,
        detail_limit=5,
    )
    store = UptimeStore()
    scheduler = UptimeScheduler(
        chain,
        StaticRoster([Validator(address=ALPHA, moniker="alpha", rank=1)]),
        calculator,
        fallback,
        store,
        window_size=10,
    )
    settings = UptimeSettings(rpc_url="https://rpc.example", uptime_blocks=10)
    return UptimeQueryService(store, scheduler, settings)


class TestBeforeFirstPass:
    """Tests for responses while no pass has completed."""

    def test_grid_not_ready(self, service: UptimeQueryService) -> None:
        """Test the grid answers 503 with the scheduler status."""
        response = service.grid()

        assert response.status_code == 503
        assert not response.success
        assert response.body["error"] == "Uptime data not ready"
        assert response.body["status"] == "idle"

    def test_stats_not_ready(self, service: UptimeQueryService) -> None:
        """Test stats answer 503."""
        response = service.stats()

        assert response.status_code == 503
        assert response.body["error"] == "Network stats not ready"

    def test_validator_not_found(self, service: UptimeQueryService) -> None:
        """Test a well-formed but unknown address is 404."""
        response = service.validator(ALPHA)

        assert response.status_code == 404
        assert response.body["error"] == "Validator not found in cache"


class TestAfterPass:
    """Tests for responses backed by a completed pass."""

    @pytest.mark.asyncio
    async def test_refresh_then_grid(self, service: UptimeQueryService) -> None:
        """Test a refresh populates the grid with camelCase records."""
        refreshed = await service.refresh()
        response = service.grid()

        assert refreshed.success
        assert refreshed.body["message"] == "Uptime analysis refreshed successfully"
        assert refreshed.body["validators_processed"] == 1
        assert response.status_code == 200
        record = response.body["data"][0]
        assert record["validator"] == ALPHA
        assert record["uptimePercentage"] == 100.0
        assert record["status"] == "excellent"
        assert record["uptimeRank"] == 1
        assert len(record["blockData"]) == 5
        assert response.body["meta"]["blockRange"] == {
            "from": 91,
            "to": 100,
            "total": 10,
        }
        assert response.body["cache_info"]["update_status"] == "success"
        assert response.body["cache_info"]["cache_age_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_validator_lookup(self, service: UptimeQueryService) -> None:
        """Test lookups are case-insensitive and served from cache."""
        await service.refresh()

        response = service.validator(ALPHA.upper().replace("0X", "0x"))

        assert response.status_code == 200
        assert response.body["source"] == "cache"
        assert response.body["data"]["validator"] == ALPHA

    @pytest.mark.asyncio
    async def test_unknown_validator_after_pass(
        self, service: UptimeQueryService
    ) -> None:
        """Test an address outside the roster is 404."""
        await service.refresh()

        assert service.validator(BETA).status_code == 404

    @pytest.mark.asyncio
    async def test_stats(self, service: UptimeQueryService) -> None:
        """Test stats carry the aggregate and update status."""
        await service.refresh()

        response = service.stats()

        assert response.status_code == 200
        assert response.body["data"]["totalValidators"] == 1
        assert response.body["data"]["averageUptime"] == "100.0"
        assert response.body["update_status"] == "success"
        assert response.body["last_updated"] is not None


@pytest.mark.parametrize("address", ["", "0x123", "not-an-address", "0x" + "z" * 40])
def test_invalid_address_is_400(service: UptimeQueryService, address: str) -> None:
    """Test malformed addresses are rejected before lookup."""
    response = service.validator(address)

    assert response.status_code == 400
    assert response.body["error"] == "Invalid validator address"


class TestRefreshMessages:
    """Tests for refresh outcome reporting."""

    @pytest.mark.asyncio
    async def test_skipped(self) -> None:
        """Test a skipped refresh says so."""
        scheduler = MagicMock()
        scheduler.refresh = AsyncMock(
            return_value=PassResult(success=False, skipped=True, error="busy")
        )
        api = UptimeQueryService(UptimeStore(), scheduler)

        response = await api.refresh()

        assert response.body["message"] == "Refresh skipped, a pass is already running"
        assert response.body["success"] is False

    @pytest.mark.asyncio
    async def test_failed(self) -> None:
        """Test a failed refresh reports the error."""
        scheduler = MagicMock()
        scheduler.refresh = AsyncMock(
            return_value=PassResult(success=False, error="No validators found")
        )
        api = UptimeQueryService(UptimeStore(), scheduler)

        response = await api.refresh()

        assert response.body["message"] == "Refresh failed"
        assert response.body["error"] == "No validators found"


class TestHealth:
    """Tests for the health summary."""

    def test_health_with_config(self, service: UptimeQueryService) -> None:
        """Test health includes scheduler state and config summary."""
        response = service.health()

        assert response.success
        assert response.body["status"] == "idle"
        assert response.body["last_update"] is None
        config = response.body["config"]
        assert config["uptime_blocks"] == 10
        assert config["update_interval"] == "60s"
        assert config["rate_limit_delay"] == "200ms"
        assert config["detection_methods"] == ["proposer", "transaction", "estimate"]

    def test_health_without_settings(self) -> None:
        """Test health works without settings."""
        scheduler = MagicMock()
        scheduler.state = SchedulerState.ERROR
        scheduler.last_update = None
        scheduler.last_error = "No validators found"

        response = UptimeQueryService(UptimeStore(), scheduler).health()

        assert response.body["status"] == "error"
        assert response.body["last_error"] == "No validators found"
        assert "config" not in response.body


def test_query_response_success_flag() -> None:
    """Test success mirrors the body flag."""
    assert QueryResponse(body={"success": True}).success
    assert not QueryResponse(status_code=500, body={}).success
