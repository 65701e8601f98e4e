"""Validator roster cache backed by the external validator API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from src.helpers.constants import ACTIVE_STATUSES, ROSTER_TIMEOUT
from src.helpers.http import fetch_json
from src.helpers.logging import get_logger
from src.uptime.errors import RosterUnavailable
from src.uptime.models import Validator


if TYPE_CHECKING:
    from collections.abc import Iterable

    import httpx

    from src.helpers.config import UptimeSettings

logger = get_logger(__name__)


def parse_roster(
    payload: Any, active_statuses: Iterable[str] = ACTIVE_STATUSES
) -> list[Validator]:
    """Extract active validators from a roster response body.

    Entries that fail validation are skipped and logged.

    Raises:
        RosterUnavailable: If the body has no ``validators`` array
    """
    if not isinstance(payload, dict) or not isinstance(
        payload.get("validators"), list
    ):
        msg = "Invalid validator data received"
        raise RosterUnavailable(msg)

    statuses = set(active_statuses)
    validators: list[Validator] = []
    seen: set[str] = set()
    for entry in payload["validators"]:
        if not isinstance(entry, dict) or entry.get("status") not in statuses:
            continue
        try:
            validator = Validator.model_validate(entry)
        except ValidationError as e:
            logger.warning(
                "Skipping malformed validator %s: %s", entry.get("address"), e
            )
            continue
        if validator.key in seen:
            continue
        seen.add(validator.key)
        validators.append(validator)
    return validators


class ValidatorRosterCache:
    """Holds the last good list of active validators.

    A failed refresh never replaces a good list with an empty one.
    """

    def __init__(
        self,
        api_url: str,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = ROSTER_TIMEOUT,
        active_statuses: Iterable[str] = ACTIVE_STATUSES,
    ) -> None:
        self.api_url = api_url
        self.http_client = http_client
        self.timeout = timeout
        self.active_statuses = tuple(active_statuses)
        self._validators: list[Validator] = []
        self.has_succeeded = False

    @classmethod
    def from_settings(
        cls, settings: UptimeSettings, http_client: httpx.AsyncClient
    ) -> ValidatorRosterCache:
        return cls(
            settings.validator_api_url,
            http_client,
            timeout=settings.roster_timeout,
            active_statuses=settings.active_statuses,
        )

    @property
    def validators(self) -> list[Validator]:
        return list(self._validators)

    async def fetch(self) -> list[Validator]:
        """Fetch and filter the roster without touching the cache.

        Raises:
            RosterUnavailable: If the service is unreachable or the body is invalid
        """
        logger.info("Fetching validator list from %s", self.api_url)
        payload = await fetch_json(self.http_client, self.api_url, timeout=self.timeout)
        if payload is None:
            msg = f"Validator roster unavailable at {self.api_url}"
            raise RosterUnavailable(msg)
        return parse_roster(payload, self.active_statuses)

    async def refresh(self) -> list[Validator]:
        """Refresh the cached roster, keeping the previous list on failure.

        Returns:
            The current active validator list (possibly the previous one)
        """
        try:
            fetched = await self.fetch()
        except RosterUnavailable as e:
            logger.warning(
                "Failed to fetch validators, keeping %s cached: %s",
                len(self._validators),
                e,
            )
            return self.validators

        if not fetched and self._validators:
            logger.warning(
                "Roster returned no active validators, keeping %s cached",
                len(self._validators),
            )
            return self.validators

        self._validators = fetched
        self.has_succeeded = True
        logger.info("Loaded %s active validators", len(fetched))
        return self.validators

    def reset(self) -> None:
        self._validators = []
        self.has_succeeded = False


__all__ = [
    "ValidatorRosterCache",
    "parse_roster",
]
