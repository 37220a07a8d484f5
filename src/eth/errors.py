"""Typed exceptions raised by the Ethereum RPC client.

Every error carries a ``details`` dict so callers can inspect the method,
field or node error code without parsing the message.
"""

from functools import wraps

from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


P = ParamSpec("P")
T = TypeVar("T")


class EthClientError(Exception):
    """Base exception for the Ethereum RPC client."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def with_context(self, context: str) -> "EthClientError":
        """Return a copy of this error with ``context`` prefixed to the message.

        Args:
            context: Human readable description of the failed operation

        Returns:
            A new exception of the same class sharing ``details``
        """
        return type(self)(f"{context}: {self.message}", dict(self.details))


class ConversionError(EthClientError, ValueError):
    """A value is not a valid numeral or does not fit the target."""


class DispatchError(EthClientError):
    """A parameter could not be encoded, nothing was sent."""

    @property
    def method(self) -> str | None:
        return self.details.get("method")

    @property
    def field(self) -> str | None:
        return self.details.get("field")


class TransportError(EthClientError):
    """The request manager could not deliver the request or read the reply."""


class ProtocolError(EthClientError):
    """The node answered with a JSON-RPC error envelope."""

    @property
    def code(self) -> int | None:
        return self.details.get("code")

    @property
    def rpc_message(self) -> str | None:
        return self.details.get("message")

    @property
    def data(self) -> Any:
        return self.details.get("data")


def wrap_errors(
    context: str,
) -> "Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]":
    """Decorator re-raising client errors with a method-specific context.

    Args:
        context: Message prefix, e.g. "Error getting balance"

    Returns:
        Decorated coroutine function raising the same error class with the
        context prepended and the original error chained

    Example:
        ```python
        @wrap_errors("Error getting balance")
        async def get_balance(self, address: str) -> RpcResponse:
            ...
        ```
    """

    def decorator(
        func: "Callable[P, Awaitable[T]]",
    ) -> "Callable[P, Awaitable[T]]":
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except EthClientError as e:
                raise e.with_context(context) from e

        return wrapper

    return decorator


__all__ = [
    "ConversionError",
    "DispatchError",
    "EthClientError",
    "ProtocolError",
    "TransportError",
    "wrap_errors",
]
