"""Common configuration constants used across the client."""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

EXTENDED_TIMEOUT = 60.0
"""Extended timeout for batch requests"""

CONNECTION_TIMEOUT = 3.0
"""Timeout for establishing connections"""

# WebSocket keepalive
WS_PING_INTERVAL = 20.0
"""Seconds between WebSocket pings on subscription connections"""

WS_PING_TIMEOUT = 10.0
"""Seconds to wait for a pong before dropping the connection"""

# HTTP Connection Pooling
MAX_KEEPALIVE_CONNECTIONS = 5
"""Maximum number of keepalive connections in pool"""

MAX_CONNECTIONS = 10
"""Maximum total number of connections"""

# JSON-RPC
JSONRPC_VERSION = "2.0"
"""Protocol version sent in every request envelope"""

DEFAULT_REQUEST_ID = 1
"""Request ID used when the caller does not supply one"""


__all__ = [
    "CONNECTION_TIMEOUT",
    "DEFAULT_REQUEST_ID",
    "DEFAULT_TIMEOUT",
    "EXTENDED_TIMEOUT",
    "JSONRPC_VERSION",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "WS_PING_INTERVAL",
    "WS_PING_TIMEOUT",
]
