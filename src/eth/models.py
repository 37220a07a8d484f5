"""Pydantic models for client configuration, call options and call parameters."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.eth.formats import ValueRepresentation
from src.helpers.config import (
    get_eth_rpc_url,
    get_optional_env,
    get_return_type,
)
from src.helpers.constants import DEFAULT_TIMEOUT, JSONRPC_VERSION
from src.helpers.rpc_models import JsonRpcRequest


type BlockIdentifier = int | str
"""Block height as int, hex or decimal string, or one of the block tags"""


class EthClientConfig(BaseModel):
    """Read-only configuration of an ``EthClient``."""

    provider_url: str = Field(..., description="HTTP JSON-RPC endpoint URL")
    ws_url: str | None = Field(
        default=None, description="WebSocket endpoint used for subscriptions"
    )
    return_type: ValueRepresentation = Field(
        default=ValueRepresentation.HEX_STRING,
        description="Default representation of quantities in results",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Request timeout in seconds"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("provider_url")
    @classmethod
    def _require_url(cls, value: str) -> str:
        if not value:
            msg = "Provider URL cannot be empty"
            raise ValueError(msg)
        return value

    @classmethod
    def from_env(cls, provider_url: str | None = None) -> Self:
        """Build a configuration from ETH_RPC_URL, ETH_WS_URL and ETH_RETURN_TYPE.

        Args:
            provider_url: Optional URL taking precedence over ETH_RPC_URL

        Returns:
            EthClientConfig

        Raises:
            ValueError: If no provider URL is available or ETH_RETURN_TYPE is
                not a known representation
        """
        return cls(
            provider_url=get_eth_rpc_url(provider_url),
            ws_url=get_optional_env("ETH_WS_URL") or None,
            return_type=ValueRepresentation(get_return_type()),
        )


class CallOptions(BaseModel):
    """Per-call overrides.

    ``rpc_options`` is merged into the request envelope (``id``,
    ``jsonrpc``); ``provider_call_options`` is handed to the transport
    untouched.
    """

    return_type: ValueRepresentation | None = Field(
        default=None, description="Representation overriding the client default"
    )
    subscribe: bool = Field(
        default=False, description="Fire over a subscription instead of sending"
    )
    rpc_options: dict[str, Any] = Field(
        default_factory=dict, description="Request envelope overrides"
    )
    provider_call_options: dict[str, Any] = Field(
        default_factory=dict, description="Raw transport options"
    )


class CallDescriptor(BaseModel):
    """A single RPC invocation ready to be handed to a request manager."""

    method: str = Field(..., description="RPC method name")
    params: list[Any] = Field(default_factory=list, description="Encoded params")
    options: CallOptions = Field(default_factory=CallOptions)

    def to_request(self) -> JsonRpcRequest:
        """Build the JSON-RPC envelope, applying ``rpc_options`` overrides."""
        envelope: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION}
        envelope.update(self.options.rpc_options)
        envelope["method"] = self.method
        envelope["params"] = self.params
        return JsonRpcRequest(**envelope)


class EthTransaction(BaseModel):
    """Transaction object for eth_call, eth_estimateGas and eth_sendTransaction.

    Quantities may be given as int, hex or decimal string; they are encoded
    when the call is built.
    """

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    gas: int | str | None = None
    gas_price: int | str | None = Field(default=None, alias="gasPrice")
    max_fee_per_gas: int | str | None = Field(default=None, alias="maxFeePerGas")
    max_priority_fee_per_gas: int | str | None = Field(
        default=None, alias="maxPriorityFeePerGas"
    )
    max_fee_per_blob_gas: int | str | None = Field(
        default=None, alias="maxFeePerBlobGas"
    )
    value: int | str | None = None
    data: str | None = None
    nonce: int | str | None = None
    chain_id: int | str | None = Field(default=None, alias="chainId")
    tx_type: int | str | None = Field(default=None, alias="type")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class EthFilter(BaseModel):
    """Log filter for eth_newFilter and eth_getLogs."""

    from_block: int | str | None = Field(default=None, alias="fromBlock")
    to_block: int | str | None = Field(default=None, alias="toBlock")
    address: str | list[str] | None = None
    topics: list[str | list[str] | None] | None = None
    block_hash: str | None = Field(default=None, alias="blockHash")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


__all__ = [
    "BlockIdentifier",
    "CallDescriptor",
    "CallOptions",
    "EthClientConfig",
    "EthFilter",
    "EthTransaction",
]
