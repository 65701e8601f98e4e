"""HTTP client utilities and helpers."""

from __future__ import annotations

from asyncio import sleep
from functools import wraps

from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

import httpx

from src.helpers.constants import (
    DEFAULT_TIMEOUT,
    MAX_RETRIES,
    RETRY_DELAY,
    RETRY_MAX_DELAY,
)
from src.helpers.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

# Type for JSON responses (can be object, array, or None for errors)
type JsonResponse = dict[str, Any] | list[Any] | None


def retry_with_backoff(
    max_attempts: int = MAX_RETRIES + 1,
    base_delay: float = RETRY_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
    *,
    backoff_factor: float = 1.0,
    log_errors: bool = True,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator to retry async functions with a fixed or growing delay.

    With the default ``backoff_factor`` of 1.0 every retry waits exactly
    ``base_delay``; a factor of 2.0 gives classic exponential backoff.

    Args:
        max_attempts: Total number of attempts, first try included (default: 3)
        base_delay: Delay before the first retry in seconds (default: 1.0)
        max_delay: Maximum delay between retries (default: 60.0)
        backoff_factor: Multiplier applied to the delay after each retry
        log_errors: Whether to log retry attempts (default: True)

    Returns:
        Decorated function that retries on httpx.HTTPError and general exceptions

    Example:
        ```python
        from src.helpers.http import retry_with_backoff

        @retry_with_backoff(max_attempts=3, base_delay=1.0)
        async def fetch_data(client: httpx.AsyncClient, url: str) -> dict:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()

        # Will try up to 3 times, waiting 1s between attempts
        ```
    """
    if max_attempts < 1:
        msg = "max_attempts must be at least 1"
        raise ValueError(msg)

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            last_exception: Exception | None = None

            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except httpx.TimeoutException as e:
                    last_exception = e
                    if log_errors and attempt < max_attempts - 1:
                        logger.warning(
                            "%s timeout (attempt %d/%d)",
                            func.__name__,
                            attempt + 1,
                            max_attempts,
                        )
                except httpx.HTTPError as e:
                    last_exception = e
                    if log_errors and attempt < max_attempts - 1:
                        logger.warning(
                            "%s HTTP error (attempt %d/%d): %s",
                            func.__name__,
                            attempt + 1,
                            max_attempts,
                            e,
                        )
                except Exception as e:
                    last_exception = e
                    if log_errors and attempt < max_attempts - 1:
                        logger.warning(
                            "%s error (attempt %d/%d): %s",
                            func.__name__,
                            attempt + 1,
                            max_attempts,
                            e,
                        )

                # Don't sleep after the last attempt
                if attempt < max_attempts - 1:
                    delay = min(base_delay * (backoff_factor**attempt), max_delay)
                    await sleep(delay)

            # All retries exhausted, raise the last exception
            if last_exception:
                if log_errors:
                    logger.error(
                        "%s failed after %d attempts", func.__name__, max_attempts
                    )
                raise last_exception

            # This should never happen, but satisfy type checker
            msg = f"{func.__name__} failed without exception"
            raise RuntimeError(msg)

        return wrapper

    return decorator


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT, **kwargs: Any
) -> httpx.AsyncClient:
    """Create a configured httpx AsyncClient.

    Args:
        timeout: Default timeout in seconds (default: DEFAULT_TIMEOUT)
        **kwargs: Additional httpx.AsyncClient kwargs

    Returns:
        Configured AsyncClient instance

    Example:
        ```python
        from src.helpers.http import create_http_client

        async with create_http_client(timeout=15.0) as client:
            response = await client.get("https://example.com")
        ```
    """
    return httpx.AsyncClient(timeout=timeout, **kwargs)


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float | None = None,
    raise_for_status: bool = True,
) -> JsonResponse:
    """Fetch JSON data from a URL.

    Args:
        client: HTTP client instance
        url: URL to fetch
        timeout: Optional timeout override
        raise_for_status: Whether to raise on HTTP errors

    Returns:
        Parsed JSON data or None on error

    Example:
        ```python
        async with httpx.AsyncClient() as client:
            data = await fetch_json(client, "http://localhost:3001/api/validators")
            if data:
                print(data)
        ```
    """
    try:
        if timeout is None:
            response = await client.get(url)
        else:
            response = await client.get(url, timeout=timeout)
        if raise_for_status:
            response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            logger.debug("URL not found: %s", url)
        else:
            logger.warning("HTTP error fetching %s: %s", url, e)
        return None
    except httpx.HTTPError as e:
        logger.warning("HTTP error fetching %s: %s", url, e)
        return None
    except ValueError as e:
        logger.warning("Invalid JSON from %s: %s", url, e)
        return None


__all__ = [
    "JsonResponse",
    "create_http_client",
    "fetch_json",
    "retry_with_backoff",
]
