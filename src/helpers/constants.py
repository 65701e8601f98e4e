"""Common configuration constants used across the application."""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 8.0
"""Default JSON-RPC request timeout in seconds"""

ROSTER_TIMEOUT = 15.0
"""Timeout for the validator roster service in seconds"""

# Retry Configuration
MAX_RETRIES = 2
"""Default number of retries after the first failed attempt"""

RETRY_DELAY = 1.0
"""Fixed delay between RPC retry attempts in seconds"""

RETRY_MAX_DELAY = 60.0
"""Maximum delay between retries in seconds"""

# Uptime Window
UPTIME_BLOCKS = 100
"""Maximum number of recent blocks evaluated per validator"""

BLOCK_DETAIL_LIMIT = 50
"""Number of trailing evaluated blocks kept on each uptime record"""

TX_SAMPLE_SIZE = 10
"""Number of leading transactions scanned for validator senders"""

BLOCK_TIME_SECONDS = 6
"""Approximate block interval used to synthesize timestamps"""

DEFAULT_RANK = 50
"""Rank assumed for validators the roster returns without one"""

# Scheduling and Rate Limiting
UPDATE_INTERVAL = 60.0
"""Seconds between scheduled uptime passes"""

INITIAL_DELAY = 5.0
"""Seconds before the first pass after startup"""

RATE_LIMIT_EVERY = 10
"""Number of block fetches between rate-limit pauses"""

RATE_LIMIT_DELAY = 0.2
"""Pause in seconds after every RATE_LIMIT_EVERY block fetches"""

VALIDATOR_DELAY = 0.5
"""Pause in seconds between validators within a pass"""

FALLBACK_BLOCK_HEIGHT = 3_867_000
"""Window end assumed when the node has never reported a block height"""

# Roster
ACTIVE_STATUSES = ("Aktif", "active", "Active")
"""Roster status values that count as active membership"""

# Cache Keys
NETWORK_STATS_KEY = "network_stats"
"""Well-known cache key for the network statistics"""

ALL_VALIDATORS_KEY = "all_validators"
"""Well-known cache key for the ranked validator list"""


__all__ = [
    "ACTIVE_STATUSES",
    "ALL_VALIDATORS_KEY",
    "BLOCK_DETAIL_LIMIT",
    "BLOCK_TIME_SECONDS",
    "DEFAULT_RANK",
    "DEFAULT_TIMEOUT",
    "FALLBACK_BLOCK_HEIGHT",
    "INITIAL_DELAY",
    "MAX_RETRIES",
    "NETWORK_STATS_KEY",
    "RATE_LIMIT_DELAY",
    "RATE_LIMIT_EVERY",
    "RETRY_DELAY",
    "RETRY_MAX_DELAY",
    "ROSTER_TIMEOUT",
    "TX_SAMPLE_SIZE",
    "UPDATE_INTERVAL",
    "UPTIME_BLOCKS",
    "VALIDATOR_DELAY",
]
