"""Ethereum JSON-RPC request manager over HTTP and WebSocket."""

import json

from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError
from websockets.asyncio.client import connect
from websockets.exceptions import WebSocketException

from src.eth.errors import TransportError
from src.helpers.constants import (
    DEFAULT_TIMEOUT,
    EXTENDED_TIMEOUT,
    WS_PING_INTERVAL,
    WS_PING_TIMEOUT,
)
from src.helpers.http import create_http_client, request_kwargs
from src.helpers.logging import get_logger
from src.helpers.rpc_models import JsonRpcRequest, RpcResponse


if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from websockets.asyncio.client import ClientConnection

    from src.eth.models import CallDescriptor


logger = get_logger(__name__)

WS_OPTION_KEYS = ("ping_interval", "ping_timeout", "open_timeout", "additional_headers")


def _ws_kwargs(transport_options: dict[str, Any] | None) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "ping_interval": WS_PING_INTERVAL,
        "ping_timeout": WS_PING_TIMEOUT,
    }
    if transport_options:
        kwargs.update({
            key: transport_options[key]
            for key in WS_OPTION_KEYS
            if key in transport_options
        })
    return kwargs


def _decode_message(message: str | bytes) -> dict[str, Any]:
    try:
        return json.loads(message)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON from subscription: {e}"
        raise TransportError(msg) from e


class SubscriptionHandle:
    """An open WebSocket carrying one fired request.

    Iterate the handle to receive decoded messages; close it (or use it as
    an async context manager) to release the connection.
    """

    def __init__(self, request: JsonRpcRequest, connection: "ClientConnection") -> None:
        self.request = request
        self.connection = connection

    @property
    def id(self) -> int | str:
        """ID of the fired request."""
        return self.request.id

    async def recv(self) -> dict[str, Any]:
        """Wait for the next message and decode it.

        Raises:
            TransportError: If the connection drops or the message is not JSON
        """
        try:
            message = await self.connection.recv()
        except WebSocketException as e:
            msg = f"Subscription connection failed: {e}"
            raise TransportError(msg) from e
        return _decode_message(message)

    async def __aiter__(self) -> "AsyncIterator[dict[str, Any]]":
        async for message in self.connection:
            yield _decode_message(message)

    async def close(self) -> None:
        """Close the underlying connection."""
        await self.connection.close()

    async def __aenter__(self) -> "SubscriptionHandle":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class RequestManager:
    """Delivers call descriptors to an Ethereum node."""

    def __init__(
        self,
        rpc_url: str,
        ws_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the request manager.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint URL
            ws_url: WebSocket endpoint used by ``subscribe``
            timeout: Default timeout for requests in seconds
            http_client: Shared HTTP client; a client per request is opened
                when omitted

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.ws_url = ws_url
        self.timeout = timeout
        self.http_client = http_client

    async def _post(
        self,
        payload: dict[str, Any] | list[dict[str, Any]],
        transport_options: dict[str, Any] | None,
        default_timeout: float,
    ) -> Any:
        kwargs = {"timeout": default_timeout, **request_kwargs(transport_options)}
        try:
            if self.http_client is not None:
                response = await self.http_client.post(
                    self.rpc_url, json=payload, **kwargs
                )
            else:
                async with create_http_client(self.timeout) as client:
                    response = await client.post(self.rpc_url, json=payload, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.warning("HTTP error posting to %s: %s", self.rpc_url, e)
            msg = f"HTTP request failed: {e}"
            raise TransportError(msg) from e
        except ValueError as e:
            logger.warning("Invalid JSON from %s: %s", self.rpc_url, e)
            msg = f"Invalid JSON response: {e}"
            raise TransportError(msg) from e

    @staticmethod
    def _parse_response(data: Any) -> RpcResponse:
        try:
            return RpcResponse.model_validate(data)
        except ValidationError as e:
            msg = f"Malformed JSON-RPC response: {data!r}"
            raise TransportError(msg) from e

    async def send(
        self,
        descriptor: "CallDescriptor",
        transport_options: dict[str, Any] | None = None,
    ) -> RpcResponse:
        """Send a single JSON-RPC request and wait for the response.

        Args:
            descriptor: Method, encoded params and envelope overrides
            transport_options: ``timeout`` and ``headers`` for the HTTP POST

        Returns:
            RpcResponse: The response envelope, error envelopes included

        Raises:
            TransportError: If the request fails or the reply is not a
                JSON-RPC response
        """
        request = descriptor.to_request()
        data = await self._post(request.model_dump(), transport_options, self.timeout)
        return self._parse_response(data)

    async def batch_send(
        self,
        descriptors: "list[CallDescriptor]",
        transport_options: dict[str, Any] | None = None,
    ) -> list[RpcResponse]:
        """Send several requests in a single batch.

        Request IDs are replaced by the position of each descriptor.

        Returns:
            List of responses in the same order as ``descriptors``

        Raises:
            TransportError: If the request fails, the reply is not a batch or
                its ids do not match the requests one to one
        """
        if not descriptors:
            return []

        batch_payload: list[dict[str, Any]] = []
        for idx, descriptor in enumerate(descriptors):
            request = descriptor.to_request().model_copy(update={"id": idx})
            batch_payload.append(request.model_dump())

        data = await self._post(batch_payload, transport_options, EXTENDED_TIMEOUT)
        if not isinstance(data, list):
            msg = f"Expected a batch response, got {data!r}"
            raise TransportError(msg)

        by_id: dict[int | str, RpcResponse] = {}
        for item in data:
            response = self._parse_response(item)
            if response.id is None:
                detail = response.error.message if response.error else "no error"
                msg = f"Batch reply without an id: {detail}"
                raise TransportError(msg)
            if response.id in by_id or response.id not in range(len(descriptors)):
                msg = f"Unexpected or duplicate id {response.id!r} in batch reply"
                raise TransportError(msg)
            by_id[response.id] = response

        missing = [idx for idx in range(len(descriptors)) if idx not in by_id]
        if missing:
            msg = f"Batch reply is missing responses for ids {missing}"
            raise TransportError(msg)
        return [by_id[idx] for idx in range(len(descriptors))]

    async def subscribe(
        self,
        descriptor: "CallDescriptor",
        transport_options: dict[str, Any] | None = None,
    ) -> SubscriptionHandle:
        """Open a WebSocket and fire the request without waiting for a reply.

        Args:
            descriptor: Method, encoded params and envelope overrides
            transport_options: ``ping_interval``, ``ping_timeout``,
                ``open_timeout`` and ``additional_headers`` for the connection

        Returns:
            SubscriptionHandle owning the connection

        Raises:
            TransportError: If no WebSocket URL is configured or the
                connection fails
        """
        if not self.ws_url:
            msg = "No WebSocket URL configured for subscriptions"
            raise TransportError(msg)

        request = descriptor.to_request()
        try:
            connection = await connect(self.ws_url, **_ws_kwargs(transport_options))
        except (OSError, TimeoutError, WebSocketException) as e:
            logger.warning("WebSocket connection to %s failed: %s", self.ws_url, e)
            msg = f"WebSocket connection failed: {e}"
            raise TransportError(msg) from e

        try:
            await connection.send(request.model_dump_json())
        except WebSocketException as e:
            await connection.close()
            msg = f"Failed to send {request.method}: {e}"
            raise TransportError(msg) from e

        logger.info("Fired %s over %s", request.method, self.ws_url)
        return SubscriptionHandle(request, connection)


__all__ = [
    "RequestManager",
    "SubscriptionHandle",
]
