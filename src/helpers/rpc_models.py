"""Pydantic models for the JSON-RPC calls the uptime engine makes."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

from src.helpers.parsers import to_hex_block


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request body."""

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to call")
    params: list[Any] = Field(default_factory=list)
    id: int | str


class EthBlockNumberRequest(JsonRpcRequest):
    """eth_blockNumber: latest block height, no parameters."""

    method: str = Field(default="eth_blockNumber", frozen=True)
    params: list[Any] = Field(default_factory=list, frozen=True)


class EthGetBlockByNumberRequest(JsonRpcRequest):
    """eth_getBlockByNumber: one block by height."""

    method: str = Field(default="eth_getBlockByNumber", frozen=True)

    @classmethod
    def for_height(
        cls, height: int, request_id: int | str, *, full_transactions: bool = True
    ) -> Self:
        """Build a request for ``height``, hex-encoding the block tag."""
        return cls(params=[to_hex_block(height), full_transactions], id=request_id)


class JsonRpcError(BaseModel):
    """Error object carried by a failed JSON-RPC response."""

    code: int | None = None
    message: str = ""
    data: Any = None

    model_config = ConfigDict(extra="allow")


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response envelope. Exactly one of result or error is set."""

    jsonrpc: str | None = None
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None

    model_config = ConfigDict(extra="allow")


__all__ = [
    "EthBlockNumberRequest",
    "EthGetBlockByNumberRequest",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
]
