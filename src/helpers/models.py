"""Common Pydantic models for raw chain data."""

from pydantic import BaseModel, ConfigDict, Field


class RpcTransaction(BaseModel):
    """Transaction object from eth_getBlockByNumber with full transactions."""

    hash: str | None = Field(default=None, description="Transaction hash")
    from_address: str | None = Field(
        default=None, description="Sender address", alias="from"
    )
    to: str | None = Field(default=None, description="Recipient address")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class RpcBlock(BaseModel):
    """Block returned by eth_getBlockByNumber."""

    number: str = Field(..., description="Block number as hex string")
    hash: str | None = Field(default=None, description="Block hash")
    miner: str | None = Field(default=None, description="Miner/proposer address")
    timestamp: str = Field(..., description="Block timestamp as hex string")
    transactions: list[RpcTransaction | str] = Field(
        default_factory=list,
        description="Full transaction objects, or hashes when not expanded",
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def sender_sample(self, limit: int) -> list[str]:
        """Return sender addresses of the first ``limit`` transactions."""
        senders: list[str] = []
        for tx in self.transactions[:limit]:
            if isinstance(tx, RpcTransaction) and tx.from_address:
                senders.append(tx.from_address)
        return senders


__all__ = [
    "RpcBlock",
    "RpcTransaction",
]
