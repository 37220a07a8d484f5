"""Pydantic models for JSON-RPC requests and responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.helpers.constants import DEFAULT_REQUEST_ID, JSONRPC_VERSION


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request model."""

    jsonrpc: str = Field(default=JSONRPC_VERSION, description="JSON-RPC version")
    method: str = Field(..., description="Method name to call")
    params: list[Any] = Field(
        default_factory=list, description="Method parameters"
    )
    id: int | str = Field(default=DEFAULT_REQUEST_ID, description="Request ID")


class RpcErrorDetail(BaseModel):
    """Error object of a JSON-RPC 2.0 response."""

    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Short error description")
    data: Any = Field(default=None, description="Additional error data")


class RpcResponse(BaseModel):
    """JSON-RPC 2.0 response envelope.

    ``result`` may legitimately be ``None`` (e.g. an unknown transaction), so
    a response is only an error when ``error`` is set.
    """

    jsonrpc: str = Field(default=JSONRPC_VERSION, description="JSON-RPC version")
    id: int | str | None = Field(default=None, description="Request ID")
    result: Any = Field(default=None, description="Method result")
    error: RpcErrorDetail | None = Field(default=None, description="Error object")

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="after")
    def _check_result_or_error(self) -> "RpcResponse":
        if self.error is not None and self.result is not None:
            msg = "Response cannot carry both result and error"
            raise ValueError(msg)
        return self

    @property
    def is_error(self) -> bool:
        """Whether the node returned an error object."""
        return self.error is not None


__all__ = [
    "JsonRpcRequest",
    "RpcErrorDetail",
    "RpcResponse",
]
