"""EVM JSON-RPC client utilities."""

from __future__ import annotations

import itertools

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from src.helpers.constants import DEFAULT_TIMEOUT, MAX_RETRIES, RETRY_DELAY
from src.helpers.http import retry_with_backoff
from src.helpers.parsers import parse_hex_int
from src.helpers.rpc_models import (
    EthBlockNumberRequest,
    EthGetBlockByNumberRequest,
    JsonRpcRequest,
    JsonRpcResponse,
)


if TYPE_CHECKING:
    import httpx


class RPCError(ValueError):
    """The node answered with a JSON-RPC error object."""

    def __init__(self, method: str, message: str, code: int | None = None) -> None:
        self.method = method
        self.code = code
        super().__init__(f"RPC error in {method}: {message}")


class RPCClient:
    """JSON-RPC client bound to exactly one endpoint, with fixed-delay retries."""

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
    ) -> None:
        """Initialize RPC client.

        Args:
            rpc_url: JSON-RPC endpoint URL
            timeout: Per-attempt timeout in seconds
            max_retries: Retries after the first failed attempt
            retry_delay: Fixed delay between attempts in seconds

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._ids = itertools.count(1)
        self._call_with_retry = retry_with_backoff(
            max_attempts=max_retries + 1,
            base_delay=retry_delay,
        )(self._send)

    def next_id(self) -> int:
        """Return a request id unique for the lifetime of this client."""
        return next(self._ids)

    async def _send(
        self,
        client: httpx.AsyncClient,
        request: JsonRpcRequest,
    ) -> Any:
        response = await client.post(
            self.rpc_url,
            json=request.model_dump(),
            timeout=self.timeout,
        )
        response.raise_for_status()

        try:
            envelope = JsonRpcResponse.model_validate(response.json())
        except ValidationError as e:
            msg = f"Malformed JSON-RPC response for {request.method}: {e}"
            raise RPCError(request.method, msg) from e

        if envelope.error is not None:
            raise RPCError(request.method, envelope.error.message, envelope.error.code)

        return envelope.result

    async def get_block_number(self, client: httpx.AsyncClient) -> int:
        """Get the latest block number.

        Args:
            client: HTTP client instance

        Returns:
            Latest block number

        Raises:
            RPCError: If the node returned no result
        """
        request = EthBlockNumberRequest(id=self.next_id())
        result = await self._call_with_retry(client, request)
        if not result:
            raise RPCError(request.method, "empty result")
        return parse_hex_int(result)

    async def get_block_by_number(
        self,
        client: httpx.AsyncClient,
        block_number: int,
        *,
        full_transactions: bool = True,
    ) -> dict[str, Any] | None:
        """Get a block by number.

        Args:
            client: HTTP client instance
            block_number: Block height
            full_transactions: Whether to expand transaction objects

        Returns:
            Raw block dict, or None when the node has no such block
        """
        request = EthGetBlockByNumberRequest.for_height(
            block_number, self.next_id(), full_transactions=full_transactions
        )
        return await self._call_with_retry(client, request)


__all__ = [
    "RPCClient",
    "RPCError",
]
