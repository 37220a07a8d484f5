"""Configuration management and environment variable utilities."""

import os

from dotenv import load_dotenv


# Load environment variables from .env file
load_dotenv()


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default
    """
    return os.getenv(key, default)


def get_required_url(
    key: str,
    url: str | None = None,
    *,
    description: str | None = None,
) -> str:
    """Get a URL from a parameter, falling back to an environment variable.

    Args:
        key: Environment variable name to fall back to
        url: Optional URL to use directly
        description: Name of the URL used in the error message

    Returns:
        The URL

    Raises:
        ValueError: If neither the parameter nor the environment variable is set
    """
    if url:
        return url

    env_url = os.getenv(key)
    if not env_url:
        msg = f"{description or key} must be provided or set in {key}"
        raise ValueError(msg)

    return env_url


def get_eth_rpc_url(rpc_url: str | None = None) -> str:
    """Get Ethereum RPC URL from parameter or environment.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        Ethereum RPC URL

    Raises:
        ValueError: If RPC URL is not provided and ETH_RPC_URL env var is not set

    Example:
        ```python
        from src.helpers.config import get_eth_rpc_url

        # Get from environment
        rpc_url = get_eth_rpc_url()

        # Or provide explicitly
        rpc_url = get_eth_rpc_url("https://eth.llamarpc.com")
        ```
    """
    return get_required_url("ETH_RPC_URL", rpc_url, description="Ethereum RPC URL")


def get_return_type(default: str = "HexString") -> str:
    """Get the default result representation from ETH_RETURN_TYPE.

    Args:
        default: Representation used when the variable is unset

    Returns:
        Representation name, validated by the caller
    """
    return os.getenv("ETH_RETURN_TYPE") or default


def get_log_level(default: str = "INFO") -> str:
    """Get the log level from LOG_LEVEL, upper-cased."""
    return (os.getenv("LOG_LEVEL") or default).upper()


__all__ = [
    "get_eth_rpc_url",
    "get_log_level",
    "get_optional_env",
    "get_required_url",
    "get_return_type",
]
