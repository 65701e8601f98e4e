"""Tests for the chain data client and block cache."""

from unittest.mock import AsyncMock

import httpx
import pytest

from pydantic import ValidationError

from src.helpers.config import UptimeSettings
from src.helpers.rpc import RPCClient, RPCError
from src.uptime.chain import BlockCache, ChainDataClient, block_sample_from_rpc
from src.uptime.errors import ChainUnavailable
from src.uptime.models import BlockSample

PROPOSER = "0x" + "b" * 40


def _raw_block(height: int = 100, tx_count: int = 3) -> dict[str, object]:
    return {
        "number": hex(height),
        "hash": f"0xhash{height}",
        "miner": PROPOSER,
        "timestamp": hex(1_700_000_000),
        "transactions": [
            {"hash": f"0xtx{i}", "from": f"0x{i:040x}", "to": None}
            for i in range(tx_count)
        ],
    }


def _client(rpc: AsyncMock) -> ChainDataClient:
    return ChainDataClient(rpc, AsyncMock(spec=httpx.AsyncClient), tx_sample_size=2)


class TestBlockSampleFromRpc:
    """Tests for reducing raw blocks to samples."""

    def test_extracts_fields(self) -> None:
        """Test height, proposer, senders and counts are extracted."""
        sample = block_sample_from_rpc(_raw_block(100, tx_count=5), tx_sample_size=3)

        assert sample.height == 100
        assert sample.proposer == PROPOSER
        assert sample.timestamp == 1_700_000_000
        assert sample.tx_count == 5
        assert sample.tx_senders == [f"0x{i:040x}" for i in range(3)]

    def test_empty_miner_becomes_none(self) -> None:
        """Test an empty miner field is treated as unknown."""
        raw = _raw_block()
        raw["miner"] = ""

        assert block_sample_from_rpc(raw).proposer is None

    def test_missing_number_raises(self) -> None:
        """Test malformed blocks raise a validation error."""
        raw = _raw_block()
        del raw["number"]

        with pytest.raises(ValidationError):
            block_sample_from_rpc(raw)


class TestChainDataClient:
    """Tests for ChainDataClient."""

    @pytest.mark.asyncio
    async def test_get_latest_height(self) -> None:
        """Test the height is returned and remembered."""
        rpc = AsyncMock(spec=RPCClient)
        rpc.get_block_number.return_value = 1234
        chain = _client(rpc)

        assert await chain.get_latest_height() == 1234
        assert chain.last_height == 1234

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("refused"),
            RPCError("eth_blockNumber", "empty result"),
            ValueError("bad hex"),
        ],
    )
    @pytest.mark.asyncio
    async def test_get_latest_height_unavailable(self, error: Exception) -> None:
        """Test exhausted retries surface as ChainUnavailable."""
        rpc = AsyncMock(spec=RPCClient)
        rpc.get_block_number.side_effect = error
        chain = _client(rpc)

        with pytest.raises(ChainUnavailable, match="eth_blockNumber failed"):
            await chain.get_latest_height()
        assert chain.last_height is None

    @pytest.mark.asyncio
    async def test_failed_height_keeps_last_known(self) -> None:
        """Test a failure does not clear the previously known height."""
        rpc = AsyncMock(spec=RPCClient)
        rpc.get_block_number.side_effect = [500, httpx.ReadTimeout("slow")]
        chain = _client(rpc)

        await chain.get_latest_height()
        with pytest.raises(ChainUnavailable):
            await chain.get_latest_height()

        assert chain.last_height == 500

    @pytest.mark.asyncio
    async def test_get_block(self) -> None:
        """Test a block is fetched with full transactions and sampled."""
        rpc = AsyncMock(spec=RPCClient)
        rpc.get_block_by_number.return_value = _raw_block(42, tx_count=4)
        chain = _client(rpc)

        block = await chain.get_block(42)

        assert isinstance(block, BlockSample)
        assert block.height == 42
        assert len(block.tx_senders) == 2
        assert block.tx_count == 4
        assert rpc.get_block_by_number.call_args.kwargs["full_transactions"] is True

    @pytest.mark.asyncio
    async def test_get_block_missing_returns_none(self) -> None:
        """Test a null RPC result means the block is absent."""
        rpc = AsyncMock(spec=RPCClient)
        rpc.get_block_by_number.return_value = None

        assert await _client(rpc).get_block(42) is None

    @pytest.mark.asyncio
    async def test_get_block_malformed_returns_none(self) -> None:
        """Test a block that cannot be parsed is treated as missing."""
        rpc = AsyncMock(spec=RPCClient)
        rpc.get_block_by_number.return_value = {"hash": "0xonly"}

        assert await _client(rpc).get_block(42) is None

    @pytest.mark.asyncio
    async def test_get_block_unavailable(self) -> None:
        """Test transport failure raises ChainUnavailable."""
        rpc = AsyncMock(spec=RPCClient)
        rpc.get_block_by_number.side_effect = httpx.ReadTimeout("slow")

        with pytest.raises(ChainUnavailable, match=r"eth_getBlockByNumber\(42\)"):
            await _client(rpc).get_block(42)

    def test_from_settings(self) -> None:
        """Test the RPC client is configured from settings."""
        settings = UptimeSettings(
            rpc_url="https://rpc.example",
            rpc_timeout=3.0,
            rpc_max_retries=5,
            rpc_retry_delay=0.5,
            tx_sample_size=7,
        )

        chain = ChainDataClient.from_settings(
            settings, AsyncMock(spec=httpx.AsyncClient)
        )

        assert chain.rpc_client.rpc_url == "https://rpc.example"
        assert chain.rpc_client.timeout == 3.0
        assert chain.rpc_client.max_retries == 5
        assert chain.rpc_client.retry_delay == 0.5
        assert chain.tx_sample_size == 7


class TestBlockCache:
    """Tests for the pass-scoped block cache."""

    def test_put_and_get(self) -> None:
        """Test stored blocks are returned."""
        cache = BlockCache()
        block = BlockSample(height=1, timestamp=0)
        cache.put(1, block)

        assert 1 in cache
        assert cache.get(1) is block
        assert len(cache) == 1

    def test_remembers_missing_blocks(self) -> None:
        """Test a None entry is distinct from an absent one."""
        cache = BlockCache()
        cache.put(7, None)

        assert 7 in cache
        assert cache.get(7) is None
        assert 8 not in cache
