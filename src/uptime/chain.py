"""Chain data client: latest height and sampled block contents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from src.helpers.constants import TX_SAMPLE_SIZE
from src.helpers.logging import get_logger
from src.helpers.models import RpcBlock
from src.helpers.parsers import parse_hex_int
from src.helpers.rpc import RPCClient, RPCError
from src.uptime.errors import ChainUnavailable
from src.uptime.models import BlockSample


if TYPE_CHECKING:
    from src.helpers.config import UptimeSettings

logger = get_logger(__name__)


def block_sample_from_rpc(
    raw: dict[str, Any], tx_sample_size: int = TX_SAMPLE_SIZE
) -> BlockSample:
    """Reduce a raw eth_getBlockByNumber result to a BlockSample.

    Raises:
        pydantic.ValidationError: If required block fields are missing
        ValueError: If hex fields cannot be parsed
    """
    block = RpcBlock.model_validate(raw)
    return BlockSample(
        height=parse_hex_int(block.number),
        proposer=block.miner or None,
        tx_senders=block.sender_sample(tx_sample_size),
        timestamp=parse_hex_int(block.timestamp),
        tx_count=len(block.transactions),
    )


class ChainDataClient:
    """Reads block data from a single JSON-RPC endpoint.

    Failure is binary: once the RPC client's retries are exhausted the call
    raises ChainUnavailable. There is no endpoint failover.
    """

    def __init__(
        self,
        rpc_client: RPCClient,
        http_client: httpx.AsyncClient,
        *,
        tx_sample_size: int = TX_SAMPLE_SIZE,
    ) -> None:
        self.rpc_client = rpc_client
        self.http_client = http_client
        self.tx_sample_size = tx_sample_size
        self.last_height: int | None = None

    @classmethod
    def from_settings(
        cls, settings: UptimeSettings, http_client: httpx.AsyncClient
    ) -> ChainDataClient:
        rpc_client = RPCClient(
            settings.rpc_url,
            timeout=settings.rpc_timeout,
            max_retries=settings.rpc_max_retries,
            retry_delay=settings.rpc_retry_delay,
        )
        return cls(rpc_client, http_client, tx_sample_size=settings.tx_sample_size)

    async def get_latest_height(self) -> int:
        """Fetch the latest block height.

        Raises:
            ChainUnavailable: If every attempt failed
        """
        try:
            height = await self.rpc_client.get_block_number(self.http_client)
        except (httpx.HTTPError, RPCError, ValueError) as e:
            msg = f"eth_blockNumber failed: {e}"
            raise ChainUnavailable(msg) from e

        self.last_height = height
        logger.info("Latest block height: %s", height)
        return height

    async def get_block(self, height: int) -> BlockSample | None:
        """Fetch one block with its transaction senders.

        Returns:
            BlockSample, or None when the node has no block at this height

        Raises:
            ChainUnavailable: If every attempt failed
        """
        try:
            raw = await self.rpc_client.get_block_by_number(
                self.http_client, height, full_transactions=True
            )
        except (httpx.HTTPError, RPCError, ValueError) as e:
            msg = f"eth_getBlockByNumber({height}) failed: {e}"
            raise ChainUnavailable(msg) from e

        if raw is None:
            logger.debug("Block %s not found", height)
            return None

        try:
            return block_sample_from_rpc(raw, self.tx_sample_size)
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning("Malformed block %s: %s", height, e)
            return None


class BlockCache:
    """Pass-scoped memo of fetched blocks, shared by every validator in a pass.

    Missing blocks are remembered too, so a failing height is requested at
    most once per pass.
    """

    def __init__(self) -> None:
        self._blocks: dict[int, BlockSample | None] = {}

    def __contains__(self, height: object) -> bool:
        return height in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def get(self, height: int) -> BlockSample | None:
        return self._blocks.get(height)

    def put(self, height: int, block: BlockSample | None) -> None:
        self._blocks[height] = block


__all__ = [
    "BlockCache",
    "ChainDataClient",
    "block_sample_from_rpc",
]
