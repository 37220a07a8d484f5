"""Tests for the Ethereum JSON-RPC client."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from typing import Any

from pydantic import ValidationError

from src.eth.client import EthClient
from src.eth.errors import (
    ConversionError,
    DispatchError,
    ProtocolError,
    TransportError,
)
from src.eth.fields import METHOD_PARAMS
from src.eth.formats import ValueRepresentation
from src.eth.models import CallOptions, EthClientConfig, EthFilter, EthTransaction
from src.helpers.rpc import RequestManager
from src.helpers.rpc_models import RpcResponse


RPC_URL = "https://test.rpc"
ADDRESS = "0x407d73d8a49eeb85d32cf465507dd71d507100c1"
BLOCK_HASH = "0x" + "ab" * 32
TX_HASH = "0x" + "cd" * 32
CLIENT_ID = "0x59daa26581d0acd1fce254fb7e85952f4c09d0915afd33d3886cd914bc7d283c"


def _response(result: Any = None, error: dict[str, Any] | None = None) -> RpcResponse:
    return RpcResponse.model_validate(
        {"jsonrpc": "2.0", "id": 1, "result": result, "error": error}
    )


@pytest.fixture
def request_manager() -> AsyncMock:
    """Request manager replying with a null result."""
    manager = AsyncMock(spec=RequestManager)
    manager.send.return_value = _response()
    return manager


@pytest.fixture
def client(request_manager: AsyncMock) -> EthClient:
    """Client returning hex strings."""
    return EthClient(EthClientConfig(provider_url=RPC_URL), request_manager)


@pytest.fixture
def number_client(request_manager: AsyncMock) -> EthClient:
    """Client returning safe integers."""
    config = EthClientConfig(provider_url=RPC_URL, return_type="Number")
    return EthClient(config, request_manager)


def _sent(request_manager: AsyncMock) -> tuple[str, list[Any]]:
    descriptor = request_manager.send.call_args.args[0]
    return descriptor.method, descriptor.params


CATALOGUE = [
    ("get_client_version", (), "web3_clientVersion", []),
    ("get_sha3", ("0x68656c6c6f",), "web3_sha3", ["0x68656c6c6f"]),
    ("get_network_version", (), "net_version", []),
    ("get_network_listening", (), "net_listening", []),
    ("get_network_peer_count", (), "net_peerCount", []),
    ("get_protocol_version", (), "eth_protocolVersion", []),
    ("get_syncing", (), "eth_syncing", []),
    ("get_coinbase", (), "eth_coinbase", []),
    ("get_mining", (), "eth_mining", []),
    ("get_hash_rate", (), "eth_hashrate", []),
    ("get_gas_price", (), "eth_gasPrice", []),
    ("get_accounts", (), "eth_accounts", []),
    ("get_block_number", (), "eth_blockNumber", []),
    ("get_balance", (ADDRESS,), "eth_getBalance", [ADDRESS, "latest"]),
    ("get_balance", (ADDRESS, 100), "eth_getBalance", [ADDRESS, "0x64"]),
    (
        "get_storage_at",
        (ADDRESS, 0, "pending"),
        "eth_getStorageAt",
        [ADDRESS, "0x0", "pending"],
    ),
    (
        "get_transaction_count",
        (ADDRESS, "earliest"),
        "eth_getTransactionCount",
        [ADDRESS, "earliest"],
    ),
    (
        "get_block_transaction_count_by_hash",
        (BLOCK_HASH,),
        "eth_getBlockTransactionCountByHash",
        [BLOCK_HASH],
    ),
    (
        "get_block_transaction_count_by_number",
        (232,),
        "eth_getBlockTransactionCountByNumber",
        ["0xe8"],
    ),
    (
        "get_uncle_count_by_block_hash",
        (BLOCK_HASH,),
        "eth_getUncleCountByBlockHash",
        [BLOCK_HASH],
    ),
    (
        "get_uncle_count_by_block_number",
        ("latest",),
        "eth_getUncleCountByBlockNumber",
        ["latest"],
    ),
    ("get_code", (ADDRESS, 2), "eth_getCode", [ADDRESS, "0x2"]),
    ("sign", (ADDRESS, "0xdeadbeaf"), "eth_sign", [ADDRESS, "0xdeadbeaf"]),
    (
        "sign_transaction",
        ({"from": ADDRESS, "nonce": 1},),
        "eth_signTransaction",
        [{"from": ADDRESS, "nonce": "0x1"}],
    ),
    (
        "send_transaction",
        ({"from": ADDRESS, "value": 10**18},),
        "eth_sendTransaction",
        [{"from": ADDRESS, "value": "0xde0b6b3a7640000"}],
    ),
    ("send_raw_transaction", ("0xd46e",), "eth_sendRawTransaction", ["0xd46e"]),
    ("call", ({"to": ADDRESS},), "eth_call", [{"to": ADDRESS}, "latest"]),
    ("estimate_gas", ({"to": ADDRESS},), "eth_estimateGas", [{"to": ADDRESS}]),
    (
        "estimate_gas",
        ({"to": ADDRESS}, 5),
        "eth_estimateGas",
        [{"to": ADDRESS}, "0x5"],
    ),
    (
        "get_block_by_hash",
        (BLOCK_HASH,),
        "eth_getBlockByHash",
        [BLOCK_HASH, False],
    ),
    (
        "get_block_by_number",
        (1000, True),
        "eth_getBlockByNumber",
        ["0x3e8", True],
    ),
    ("get_transaction_by_hash", (TX_HASH,), "eth_getTransactionByHash", [TX_HASH]),
    (
        "get_transaction_by_block_hash_and_index",
        (BLOCK_HASH, 0),
        "eth_getTransactionByBlockHashAndIndex",
        [BLOCK_HASH, "0x0"],
    ),
    (
        "get_transaction_by_block_number_and_index",
        ("latest", 3),
        "eth_getTransactionByBlockNumberAndIndex",
        ["latest", "0x3"],
    ),
    (
        "get_transaction_receipt",
        (TX_HASH,),
        "eth_getTransactionReceipt",
        [TX_HASH],
    ),
    (
        "get_uncle_by_block_hash_and_index",
        (BLOCK_HASH, 1),
        "eth_getUncleByBlockHashAndIndex",
        [BLOCK_HASH, "0x1"],
    ),
    (
        "get_uncle_by_block_number_and_index",
        (10, 1),
        "eth_getUncleByBlockNumberAndIndex",
        ["0xa", "0x1"],
    ),
    ("get_compilers", (), "eth_getCompilers", []),
    (
        "compile_solidity",
        ("contract test {}",),
        "eth_compileSolidity",
        ["contract test {}"],
    ),
    ("compile_lll", ("(returnlll 0)",), "eth_compileLLL", ["(returnlll 0)"]),
    (
        "compile_serpent",
        ("def f(): return 1",),
        "eth_compileSerpent",
        ["def f(): return 1"],
    ),
    (
        "new_filter",
        ({"fromBlock": 1, "toBlock": "latest"},),
        "eth_newFilter",
        [{"fromBlock": "0x1", "toBlock": "latest"}],
    ),
    ("new_block_filter", (), "eth_newBlockFilter", []),
    ("new_pending_transaction_filter", (), "eth_newPendingTransactionFilter", []),
    ("uninstall_filter", (11,), "eth_uninstallFilter", ["0xb"]),
    ("get_filter_changes", ("0x16",), "eth_getFilterChanges", ["0x16"]),
    ("get_filter_logs", (22,), "eth_getFilterLogs", ["0x16"]),
    (
        "get_logs",
        ({"address": ADDRESS, "fromBlock": 0},),
        "eth_getLogs",
        [{"address": ADDRESS, "fromBlock": "0x0"}],
    ),
    ("get_work", (), "eth_getWork", []),
    (
        "submit_work",
        (1, BLOCK_HASH, TX_HASH),
        "eth_submitWork",
        ["0x0000000000000001", BLOCK_HASH, TX_HASH],
    ),
    (
        "submit_hash_rate",
        (0x500000, CLIENT_ID),
        "eth_submitHashRate",
        ["0x" + "0" * 58 + "500000", CLIENT_ID],
    ),
]


class TestCatalogue:
    """Every client method maps to its wire method and encoded params."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("name", "args", "wire_method", "wire_params"), CATALOGUE)
    async def test_wire_request(
        self,
        client: EthClient,
        request_manager: AsyncMock,
        name: str,
        args: tuple[Any, ...],
        wire_method: str,
        wire_params: list[Any],
    ) -> None:
        """Test the method name and params sent for each client method."""
        await getattr(client, name)(*args)

        assert _sent(request_manager) == (wire_method, wire_params)

    def test_every_wire_method_is_covered(self) -> None:
        """Test that the client exposes every catalogued method."""
        assert {entry[2] for entry in CATALOGUE} == set(METHOD_PARAMS)


class TestNormalization:
    """Tests for result normalization in the client."""

    @pytest.mark.asyncio
    async def test_default_hex_string(
        self, client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that the default representation canonicalizes hex."""
        request_manager.send.return_value = _response("0x0010")

        response = await client.get_block_number()

        assert response.result == "0x10"

    @pytest.mark.asyncio
    async def test_configured_number(
        self, number_client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that the configured representation is applied."""
        request_manager.send.return_value = _response("0x5208")

        response = await number_client.get_gas_price()

        assert response.result == 21000
        assert response.id == 1

    @pytest.mark.asyncio
    async def test_per_call_override(
        self, number_client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that the per-call return_type wins over the client default."""
        request_manager.send.return_value = _response("0xde0b6b3a7640000")

        response = await number_client.get_balance(
            ADDRESS, options=CallOptions(return_type=ValueRepresentation.DECIMAL_STRING)
        )

        assert response.result == "1000000000000000000"

    @pytest.mark.asyncio
    async def test_options_as_dict(
        self, client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that options may be passed as a plain dict."""
        request_manager.send.return_value = _response("0x2")

        response = await client.get_block_number(options={"return_type": "BigInt"})

        assert response.result == 2

    @pytest.mark.asyncio
    async def test_block_record(
        self, number_client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that block quantity fields are converted and hashes kept."""
        request_manager.send.return_value = _response(
            {
                "number": "0x1b4",
                "hash": BLOCK_HASH,
                "gasUsed": "0x5208",
                "transactions": [TX_HASH],
            }
        )

        response = await number_client.get_block_by_number(436)

        assert response.result == {
            "number": 436,
            "hash": BLOCK_HASH,
            "gasUsed": 21000,
            "transactions": [TX_HASH],
        }

    @pytest.mark.asyncio
    async def test_null_receipt(
        self, number_client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that an unknown transaction yields a null result."""
        response = await number_client.get_transaction_receipt(TX_HASH)

        assert response.result is None

    @pytest.mark.asyncio
    async def test_untouched_result(
        self, number_client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that non-quantity results are not converted."""
        request_manager.send.return_value = _response("0x600160008035811a8181")

        response = await number_client.get_code(ADDRESS)

        assert response.result == "0x600160008035811a8181"

    @pytest.mark.asyncio
    async def test_network_version_decimal(
        self, client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that the decimal network ID is normalized."""
        request_manager.send.return_value = _response("1")

        response = await client.get_network_version()

        assert response.result == "0x1"

    @pytest.mark.asyncio
    async def test_models_as_params(
        self, client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that pydantic params are encoded."""
        await client.call(EthTransaction(to=ADDRESS, gas=30400), "pending")
        assert _sent(request_manager) == (
            "eth_call",
            [{"to": ADDRESS, "gas": "0x76c0"}, "pending"],
        )

        await client.get_logs(EthFilter(from_block=1, to_block=2))
        assert _sent(request_manager) == (
            "eth_getLogs",
            [{"fromBlock": "0x1", "toBlock": "0x2"}],
        )


class TestErrors:
    """Tests for errors raised by the client."""

    @pytest.mark.asyncio
    async def test_protocol_error(
        self, client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that an error envelope raises ProtocolError with context."""
        request_manager.send.return_value = _response(
            error={"code": -32000, "message": "header not found"}
        )

        with pytest.raises(ProtocolError) as exc_info:
            await client.get_balance(ADDRESS, 99999999)

        error = exc_info.value
        assert str(error) == "Error getting balance: header not found (code -32000)"
        assert error.code == -32000
        assert error.rpc_message == "header not found"
        assert error.details["method"] == "eth_getBalance"
        assert isinstance(error.__cause__, ProtocolError)

    @pytest.mark.asyncio
    async def test_dispatch_error_sends_nothing(
        self, client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that an invalid block identifier aborts before sending."""
        with pytest.raises(DispatchError, match="^Error getting balance: ") as exc_info:
            await client.get_balance(ADDRESS, "newest")

        assert exc_info.value.field == "blockIdentifier"
        assert exc_info.value.method == "eth_getBalance"
        request_manager.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_conversion_error(
        self, number_client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that an unsafe Number raises ConversionError with context."""
        request_manager.send.return_value = _response("0x" + "f" * 20)

        with pytest.raises(ConversionError, match="^Error getting balance: .*safe"):
            await number_client.get_balance(ADDRESS)

    @pytest.mark.asyncio
    async def test_transport_error(
        self, client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that transport failures get the method context."""
        request_manager.send.side_effect = TransportError("HTTP request failed: 502")

        with pytest.raises(
            TransportError, match="^Error getting gas price: HTTP request failed"
        ):
            await client.get_gas_price()

    @pytest.mark.asyncio
    async def test_invalid_options(self, client: EthClient) -> None:
        """Test that invalid options raise a DispatchError with method context."""
        with pytest.raises(
            DispatchError, match=r"^Error getting block number: Invalid call options"
        ) as exc_info:
            await client.get_block_number(options={"return_type": "Float"})

        error = exc_info.value
        assert "return_type" in error.message
        assert error.method == "eth_blockNumber"
        assert error.field == "options"
        assert isinstance(error.__cause__, ValidationError)


class TestSubscribe:
    """Tests for firing calls over a subscription."""

    @pytest.mark.asyncio
    async def test_subscribe_returns_handle(
        self, client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that subscribe mode hands the descriptor to the transport."""
        handle = MagicMock()
        request_manager.subscribe.return_value = handle

        result = await client.get_balance(
            ADDRESS,
            options=CallOptions(
                subscribe=True, provider_call_options={"ping_interval": 5.0}
            ),
        )

        assert result is handle
        request_manager.send.assert_not_awaited()
        descriptor, transport_options = request_manager.subscribe.call_args.args
        assert descriptor.method == "eth_getBalance"
        assert descriptor.params == [ADDRESS, "latest"]
        assert transport_options == {"ping_interval": 5.0}


class TestClientInit:
    """Tests for EthClient construction."""

    def test_builds_request_manager(self) -> None:
        """Test that a request manager is built from the configuration."""
        config = EthClientConfig(
            provider_url=RPC_URL, ws_url="wss://test.rpc", timeout=5.0
        )

        client = EthClient(config)

        assert isinstance(client.request_manager, RequestManager)
        assert client.request_manager.rpc_url == RPC_URL
        assert client.request_manager.ws_url == "wss://test.rpc"
        assert client.request_manager.timeout == 5.0

    @pytest.mark.asyncio
    async def test_forwards_provider_call_options(
        self, client: EthClient, request_manager: AsyncMock
    ) -> None:
        """Test that transport options reach the request manager."""
        await client.get_block_number(
            options=CallOptions(provider_call_options={"timeout": 2.0})
        )

        assert request_manager.send.call_args.args[1] == {"timeout": 2.0}
