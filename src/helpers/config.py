"""Configuration management and environment variable utilities."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from src.helpers.constants import (
    ACTIVE_STATUSES,
    BLOCK_DETAIL_LIMIT,
    BLOCK_TIME_SECONDS,
    DEFAULT_TIMEOUT,
    FALLBACK_BLOCK_HEIGHT,
    INITIAL_DELAY,
    MAX_RETRIES,
    RATE_LIMIT_DELAY,
    RATE_LIMIT_EVERY,
    RETRY_DELAY,
    ROSTER_TIMEOUT,
    TX_SAMPLE_SIZE,
    UPDATE_INTERVAL,
    UPTIME_BLOCKS,
    VALIDATOR_DELAY,
)


# Load environment variables from .env file
load_dotenv()

DEFAULT_VALIDATOR_API_URL = "http://localhost:3001/api/validators"


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default

    Example:
        ```python
        from src.helpers.config import get_optional_env

        interval = float(get_optional_env("UPDATE_INTERVAL_SECONDS", "60"))
        ```
    """
    return os.getenv(key, default)


def get_float_env(key: str, default: float) -> float:
    """Get a numeric environment variable as float.

    Raises:
        ValueError: If the variable is set but is not a number
    """
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        msg = f"{key} must be a number, got {raw!r}"
        raise ValueError(msg) from None


def get_int_env(key: str, default: int) -> int:
    """Get an integer environment variable.

    Raises:
        ValueError: If the variable is set but is not an integer
    """
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        msg = f"{key} must be an integer, got {raw!r}"
        raise ValueError(msg) from None


def get_evm_rpc_url(rpc_url: str | None = None) -> str:
    """Get the EVM JSON-RPC URL from parameter or environment.

    Only a single endpoint is ever used; there is no failover list.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        EVM JSON-RPC URL

    Raises:
        ValueError: If RPC URL is not provided and EVM_RPC_URL env var is not set

    Example:
        ```python
        from src.helpers.config import get_evm_rpc_url

        # Get from environment
        rpc_url = get_evm_rpc_url()

        # Or provide explicitly
        rpc_url = get_evm_rpc_url("https://evmrpc-testnet.example.org")
        ```
    """
    if rpc_url:
        return rpc_url

    env_rpc_url = os.getenv("EVM_RPC_URL")
    if not env_rpc_url:
        msg = "EVM_RPC_URL must be provided or set in environment variables"
        raise ValueError(msg)

    return env_rpc_url


def get_validator_api_url(api_url: str | None = None) -> str:
    """Get the validator roster service URL from parameter or environment.

    Args:
        api_url: Optional roster URL to use directly

    Returns:
        Roster URL, defaulting to the local validator API
    """
    if api_url:
        return api_url
    return os.getenv("VALIDATOR_API_URL") or DEFAULT_VALIDATOR_API_URL


class UptimeSettings(BaseModel):
    """Runtime settings for the uptime engine."""

    rpc_url: str = Field(..., description="EVM JSON-RPC endpoint")
    validator_api_url: str = Field(
        default=DEFAULT_VALIDATOR_API_URL, description="Validator roster endpoint"
    )
    uptime_blocks: int = Field(default=UPTIME_BLOCKS, ge=1)
    block_detail_limit: int = Field(default=BLOCK_DETAIL_LIMIT, ge=1)
    tx_sample_size: int = Field(default=TX_SAMPLE_SIZE, ge=0)
    block_time_seconds: int = Field(default=BLOCK_TIME_SECONDS, ge=1)
    update_interval: float = Field(default=UPDATE_INTERVAL, gt=0)
    initial_delay: float = Field(default=INITIAL_DELAY, ge=0)
    rate_limit_every: int = Field(default=RATE_LIMIT_EVERY, ge=1)
    rate_limit_delay: float = Field(default=RATE_LIMIT_DELAY, ge=0)
    validator_delay: float = Field(default=VALIDATOR_DELAY, ge=0)
    fallback_block_height: int = Field(default=FALLBACK_BLOCK_HEIGHT, ge=1)
    rpc_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    rpc_max_retries: int = Field(default=MAX_RETRIES, ge=0)
    rpc_retry_delay: float = Field(default=RETRY_DELAY, ge=0)
    roster_timeout: float = Field(default=ROSTER_TIMEOUT, gt=0)
    active_statuses: tuple[str, ...] = ACTIVE_STATUSES
    estimator_seed: int | None = None
    sign_probability_floor: float = Field(default=0.85, ge=0, le=1)
    sign_probability_step: float = Field(default=0.01, ge=0)
    fallback_base_uptime: float = Field(default=92.0, ge=0, le=100)
    fallback_jitter: float = Field(default=6.0, ge=0)


def load_settings(rpc_url: str | None = None) -> UptimeSettings:
    """Build UptimeSettings from environment variables.

    Args:
        rpc_url: Optional RPC URL overriding EVM_RPC_URL

    Returns:
        Validated settings

    Raises:
        ValueError: If EVM_RPC_URL is missing or a numeric variable is malformed

    Example:
        ```python
        from src.helpers.config import load_settings

        settings = load_settings()
        print(settings.uptime_blocks)
        ```
    """
    statuses = get_optional_env("ACTIVE_STATUSES")
    seed = get_optional_env("ESTIMATOR_SEED")

    return UptimeSettings(
        rpc_url=get_evm_rpc_url(rpc_url),
        validator_api_url=get_validator_api_url(),
        uptime_blocks=get_int_env("UPTIME_BLOCKS", UPTIME_BLOCKS),
        update_interval=get_float_env("UPDATE_INTERVAL_SECONDS", UPDATE_INTERVAL),
        initial_delay=get_float_env("INITIAL_DELAY_SECONDS", INITIAL_DELAY),
        rate_limit_every=get_int_env("RATE_LIMIT_EVERY", RATE_LIMIT_EVERY),
        rate_limit_delay=get_float_env("RATE_LIMIT_DELAY_SECONDS", RATE_LIMIT_DELAY),
        validator_delay=get_float_env("VALIDATOR_DELAY_SECONDS", VALIDATOR_DELAY),
        fallback_block_height=get_int_env(
            "FALLBACK_BLOCK_HEIGHT", FALLBACK_BLOCK_HEIGHT
        ),
        rpc_timeout=get_float_env("RPC_TIMEOUT_SECONDS", DEFAULT_TIMEOUT),
        rpc_max_retries=get_int_env("RPC_MAX_RETRIES", MAX_RETRIES),
        rpc_retry_delay=get_float_env("RPC_RETRY_DELAY_SECONDS", RETRY_DELAY),
        roster_timeout=get_float_env("ROSTER_TIMEOUT_SECONDS", ROSTER_TIMEOUT),
        active_statuses=(
            tuple(s.strip() for s in statuses.split(",") if s.strip())
            if statuses
            else ACTIVE_STATUSES
        ),
        estimator_seed=int(seed) if seed else None,
        sign_probability_floor=get_float_env("SIGN_PROBABILITY_FLOOR", 0.85),
        sign_probability_step=get_float_env("SIGN_PROBABILITY_STEP", 0.01),
        fallback_base_uptime=get_float_env("FALLBACK_BASE_UPTIME", 92.0),
        fallback_jitter=get_float_env("FALLBACK_JITTER", 6.0),
    )


__all__ = [
    "DEFAULT_VALIDATOR_API_URL",
    "UptimeSettings",
    "get_evm_rpc_url",
    "get_float_env",
    "get_int_env",
    "get_optional_env",
    "get_validator_api_url",
    "load_settings",
]
