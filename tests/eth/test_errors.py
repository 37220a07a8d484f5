"""Tests for client exceptions."""

import pytest

from src.eth.errors import (
    ConversionError,
    DispatchError,
    EthClientError,
    ProtocolError,
    TransportError,
    wrap_errors,
)


class TestExceptions:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        "error_class", [ConversionError, DispatchError, ProtocolError, TransportError]
    )
    def test_subclasses_base(self, error_class: type[EthClientError]) -> None:
        """Test that every error derives from EthClientError."""
        assert issubclass(error_class, EthClientError)

    def test_details_default(self) -> None:
        """Test that details default to an empty dict."""
        error = TransportError("boom")

        assert error.message == "boom"
        assert error.details == {}
        assert str(error) == "boom"

    def test_protocol_error_properties(self) -> None:
        """Test ProtocolError accessors."""
        error = ProtocolError(
            "execution reverted (code 3)",
            {"code": 3, "message": "execution reverted", "data": "0x08c379a0"},
        )

        assert error.code == 3
        assert error.rpc_message == "execution reverted"
        assert error.data == "0x08c379a0"

    def test_dispatch_error_properties(self) -> None:
        """Test DispatchError accessors."""
        error = DispatchError("bad", {"method": "eth_call", "field": "transaction.gas"})

        assert error.method == "eth_call"
        assert error.field == "transaction.gas"

    def test_with_context(self) -> None:
        """Test that with_context keeps the class and copies details."""
        error = DispatchError("bad", {"field": "index"})

        wrapped = error.with_context("Error getting block")

        assert type(wrapped) is DispatchError
        assert wrapped.message == "Error getting block: bad"
        assert wrapped.details == {"field": "index"}
        assert wrapped.details is not error.details


class TestWrapErrors:
    """Tests for the wrap_errors decorator."""

    @pytest.mark.asyncio
    async def test_returns_value(self) -> None:
        """Test that successful calls are untouched."""

        @wrap_errors("Error fetching")
        async def fetch() -> str:
            return "0x1"

        assert await fetch() == "0x1"

    @pytest.mark.asyncio
    async def test_prefixes_context(self) -> None:
        """Test that client errors are re-raised with the context."""
        original = ConversionError("Invalid numeral: 'x'", {"value": "x"})

        @wrap_errors("Error getting balance")
        async def fetch() -> None:
            raise original

        with pytest.raises(ConversionError) as exc_info:
            await fetch()

        assert str(exc_info.value) == "Error getting balance: Invalid numeral: 'x'"
        assert exc_info.value.details == {"value": "x"}
        assert exc_info.value.__cause__ is original

    @pytest.mark.asyncio
    async def test_other_errors_pass_through(self) -> None:
        """Test that unrelated exceptions are not wrapped."""

        @wrap_errors("Error fetching")
        async def fetch() -> None:
            msg = "unrelated"
            raise RuntimeError(msg)

        with pytest.raises(RuntimeError, match="^unrelated$"):
            await fetch()

    def test_preserves_metadata(self) -> None:
        """Test that the wrapped function keeps its name and docstring."""

        @wrap_errors("Error fetching")
        async def fetch_block() -> None:
            """Fetch a block."""

        assert fetch_block.__name__ == "fetch_block"
        assert fetch_block.__doc__ == "Fetch a block."
