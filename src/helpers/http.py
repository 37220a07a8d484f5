"""HTTP client utilities."""

from typing import Any

import httpx

from src.helpers.constants import (
    CONNECTION_TIMEOUT,
    DEFAULT_TIMEOUT,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
)


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT, **kwargs: Any
) -> httpx.AsyncClient:
    """Create a configured httpx AsyncClient.

    Args:
        timeout: Default timeout in seconds (default: DEFAULT_TIMEOUT)
        **kwargs: Additional httpx.AsyncClient kwargs

    Returns:
        Configured AsyncClient instance with pooled connections

    Example:
        ```python
        from src.helpers.http import create_http_client

        async with create_http_client(timeout=60.0) as client:
            response = await client.post(rpc_url, json=payload)
        ```
    """
    kwargs.setdefault(
        "limits",
        httpx.Limits(
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            max_connections=MAX_CONNECTIONS,
        ),
    )
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=CONNECTION_TIMEOUT), **kwargs
    )


def request_kwargs(transport_options: dict[str, Any] | None) -> dict[str, Any]:
    """Pick the httpx request arguments out of raw transport options.

    Only ``timeout`` and ``headers`` are forwarded; anything else is meant for
    other transports and is ignored here.

    Example:
        >>> request_kwargs({"timeout": 5.0, "ping_interval": 10})
        {'timeout': 5.0}
    """
    if not transport_options:
        return {}
    return {
        key: transport_options[key]
        for key in ("timeout", "headers")
        if key in transport_options
    }


__all__ = [
    "create_http_client",
    "request_kwargs",
]
