"""Ethereum JSON-RPC client with one method per RPC call.

Example:
    ```python
    from src.eth.client import EthClient
    from src.eth.models import CallOptions, EthClientConfig

    client = EthClient(EthClientConfig(provider_url=rpc_url, return_type="Number"))
    response = await client.get_block_by_number("latest", False)
    print(response.result["gasUsed"])

    # Per-call override of the result representation
    balance = await client.get_balance(
        "0xabc...", options=CallOptions(return_type="DecimalString")
    )
    ```
"""

from typing import Any

from pydantic import ValidationError

from src.eth.dispatch import build_call
from src.eth.errors import DispatchError, ProtocolError, wrap_errors
from src.eth.fields import result_spec_for
from src.eth.models import (
    BlockIdentifier,
    CallOptions,
    EthClientConfig,
    EthFilter,
    EthTransaction,
)
from src.eth.normalize import normalize_result
from src.helpers.logging import get_logger
from src.helpers.rpc import RequestManager, SubscriptionHandle
from src.helpers.rpc_models import RpcResponse


logger = get_logger(__name__)

type CallResult = RpcResponse | SubscriptionHandle
type Options = CallOptions | dict[str, Any] | None
type Transaction = EthTransaction | dict[str, Any]
type Filter = EthFilter | dict[str, Any]
type Quantity = int | str


class EthClient:
    """Client for the standard Ethereum JSON-RPC method catalogue.

    Every method returns the response envelope with quantities in the
    result converted to the configured representation, or a
    ``SubscriptionHandle`` when ``CallOptions.subscribe`` is set.
    """

    def __init__(
        self,
        config: EthClientConfig,
        request_manager: RequestManager | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Provider endpoints and default result representation
            request_manager: Transport; built from ``config`` when omitted
        """
        self.config = config
        self.request_manager = request_manager or RequestManager(
            config.provider_url,
            ws_url=config.ws_url,
            timeout=config.timeout,
        )

    async def _request(
        self,
        method: str,
        params: list[Any],
        options: Options = None,
    ) -> CallResult:
        try:
            call_options = (
                options
                if isinstance(options, CallOptions)
                else CallOptions.model_validate(options or {})
            )
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(map(str, error['loc']))}: {error['msg']}"
                for error in e.errors()
            )
            msg = f"Invalid call options: {problems}"
            raise DispatchError(msg, {"method": method, "field": "options"}) from e

        descriptor = build_call(method, params, options=call_options)
        logger.debug("Dispatching %s with params %s", method, descriptor.params)

        if call_options.subscribe:
            return await self.request_manager.subscribe(
                descriptor, call_options.provider_call_options
            )

        response = await self.request_manager.send(
            descriptor, call_options.provider_call_options
        )
        if response.error is not None:
            logger.warning(
                "%s returned error %s: %s",
                method,
                response.error.code,
                response.error.message,
            )
            msg = f"{response.error.message} (code {response.error.code})"
            raise ProtocolError(
                msg,
                {
                    "method": method,
                    "code": response.error.code,
                    "message": response.error.message,
                    "data": response.error.data,
                },
            )

        target = call_options.return_type or self.config.return_type
        result = normalize_result(response.result, result_spec_for(method), target)
        return response.model_copy(update={"result": result})

    # web3 / net

    @wrap_errors("Error getting client version")
    async def get_client_version(self, options: Options = None) -> CallResult:
        """Return the current client version."""
        return await self._request("web3_clientVersion", [], options)

    @wrap_errors("Error getting sha3 hash")
    async def get_sha3(self, data: str, options: Options = None) -> CallResult:
        """Return Keccak-256 (not the standardized SHA3-256) of ``data``."""
        return await self._request("web3_sha3", [data], options)

    @wrap_errors("Error getting network version")
    async def get_network_version(self, options: Options = None) -> CallResult:
        """Return the current network ID."""
        return await self._request("net_version", [], options)

    @wrap_errors("Error getting network listening status")
    async def get_network_listening(self, options: Options = None) -> CallResult:
        """Return whether the client is listening for network connections."""
        return await self._request("net_listening", [], options)

    @wrap_errors("Error getting network peer count")
    async def get_network_peer_count(self, options: Options = None) -> CallResult:
        """Return the number of peers connected to the client."""
        return await self._request("net_peerCount", [], options)

    # Node status

    @wrap_errors("Error getting protocol version")
    async def get_protocol_version(self, options: Options = None) -> CallResult:
        return await self._request("eth_protocolVersion", [], options)

    @wrap_errors("Error getting syncing status")
    async def get_syncing(self, options: Options = None) -> CallResult:
        """Return sync status data, or ``False`` when the node is not syncing."""
        return await self._request("eth_syncing", [], options)

    @wrap_errors("Error getting coinbase")
    async def get_coinbase(self, options: Options = None) -> CallResult:
        return await self._request("eth_coinbase", [], options)

    @wrap_errors("Error getting mining status")
    async def get_mining(self, options: Options = None) -> CallResult:
        return await self._request("eth_mining", [], options)

    @wrap_errors("Error getting hash rate")
    async def get_hash_rate(self, options: Options = None) -> CallResult:
        """Return the number of hashes per second the node is mining with."""
        return await self._request("eth_hashrate", [], options)

    @wrap_errors("Error getting gas price")
    async def get_gas_price(self, options: Options = None) -> CallResult:
        """Return the current gas price in wei."""
        return await self._request("eth_gasPrice", [], options)

    @wrap_errors("Error getting accounts")
    async def get_accounts(self, options: Options = None) -> CallResult:
        return await self._request("eth_accounts", [], options)

    @wrap_errors("Error getting block number")
    async def get_block_number(self, options: Options = None) -> CallResult:
        """Return the number of the most recent block."""
        return await self._request("eth_blockNumber", [], options)

    # State

    @wrap_errors("Error getting balance")
    async def get_balance(
        self,
        address: str,
        block_identifier: BlockIdentifier = "latest",
        options: Options = None,
    ) -> CallResult:
        """Get the balance of an address in wei.

        Args:
            address: Address to check the balance of
            block_identifier: Block height, or "latest", "earliest", "pending"
            options: Per-call options

        Returns:
            Response whose result is the balance in the chosen representation
        """
        return await self._request(
            "eth_getBalance", [address, block_identifier], options
        )

    @wrap_errors("Error getting storage value")
    async def get_storage_at(
        self,
        address: str,
        storage_position: Quantity,
        block_identifier: BlockIdentifier = "latest",
        options: Options = None,
    ) -> CallResult:
        """Return the value from a storage position at a given address."""
        return await self._request(
            "eth_getStorageAt",
            [address, storage_position, block_identifier],
            options,
        )

    @wrap_errors("Error getting transaction count")
    async def get_transaction_count(
        self,
        address: str,
        block_identifier: BlockIdentifier = "latest",
        options: Options = None,
    ) -> CallResult:
        """Return the number of transactions sent from an address."""
        return await self._request(
            "eth_getTransactionCount", [address, block_identifier], options
        )

    @wrap_errors("Error getting block transaction count by hash")
    async def get_block_transaction_count_by_hash(
        self, block_hash: str, options: Options = None
    ) -> CallResult:
        return await self._request(
            "eth_getBlockTransactionCountByHash", [block_hash], options
        )

    @wrap_errors("Error getting block transaction count by number")
    async def get_block_transaction_count_by_number(
        self, block_identifier: BlockIdentifier, options: Options = None
    ) -> CallResult:
        return await self._request(
            "eth_getBlockTransactionCountByNumber", [block_identifier], options
        )

    @wrap_errors("Error getting uncle count by block hash")
    async def get_uncle_count_by_block_hash(
        self, block_hash: str, options: Options = None
    ) -> CallResult:
        return await self._request(
            "eth_getUncleCountByBlockHash", [block_hash], options
        )

    @wrap_errors("Error getting uncle count by block number")
    async def get_uncle_count_by_block_number(
        self, block_identifier: BlockIdentifier, options: Options = None
    ) -> CallResult:
        return await self._request(
            "eth_getUncleCountByBlockNumber", [block_identifier], options
        )

    @wrap_errors("Error getting code")
    async def get_code(
        self,
        address: str,
        block_identifier: BlockIdentifier = "latest",
        options: Options = None,
    ) -> CallResult:
        """Return the code at a given address."""
        return await self._request(
            "eth_getCode", [address, block_identifier], options
        )

    # Signing and transactions

    @wrap_errors("Error signing message")
    async def sign(
        self, address: str, message: str, options: Options = None
    ) -> CallResult:
        """Sign ``message`` with the key of an unlocked account."""
        return await self._request("eth_sign", [address, message], options)

    @wrap_errors("Error signing transaction")
    async def sign_transaction(
        self, transaction: Transaction, options: Options = None
    ) -> CallResult:
        """Sign a transaction that can be submitted later with send_raw_transaction."""
        return await self._request("eth_signTransaction", [transaction], options)

    @wrap_errors("Error sending transaction")
    async def send_transaction(
        self, transaction: Transaction, options: Options = None
    ) -> CallResult:
        """Create a new message call or contract creation transaction.

        Quantity fields (gas, gasPrice, maxFeePerGas, maxPriorityFeePerGas,
        value, nonce) may be given as int, hex or decimal string.
        """
        return await self._request("eth_sendTransaction", [transaction], options)

    @wrap_errors("Error sending raw transaction")
    async def send_raw_transaction(
        self, raw_transaction: str, options: Options = None
    ) -> CallResult:
        return await self._request(
            "eth_sendRawTransaction", [raw_transaction], options
        )

    @wrap_errors("Error sending call transaction")
    async def call(
        self,
        transaction: Transaction,
        block_identifier: BlockIdentifier = "latest",
        options: Options = None,
    ) -> CallResult:
        """Execute a message call immediately without creating a transaction."""
        return await self._request(
            "eth_call", [transaction, block_identifier], options
        )

    @wrap_errors("Error getting gas estimate")
    async def estimate_gas(
        self,
        transaction: Transaction,
        block_identifier: BlockIdentifier | None = None,
        options: Options = None,
    ) -> CallResult:
        """Estimate the gas needed for a transaction to complete.

        The block identifier is only sent when given.
        """
        return await self._request(
            "eth_estimateGas", [transaction, block_identifier], options
        )

    # Blocks, transactions and receipts

    @wrap_errors("Error getting block by hash")
    async def get_block_by_hash(
        self,
        block_hash: str,
        return_full_txs: bool = False,
        options: Options = None,
    ) -> CallResult:
        """Return a block by hash, or a ``None`` result when no block was found.

        Args:
            block_hash: Hash of the block
            return_full_txs: Return full transaction objects instead of hashes
            options: Per-call options
        """
        return await self._request(
            "eth_getBlockByHash", [block_hash, return_full_txs], options
        )

    @wrap_errors("Error getting block by number")
    async def get_block_by_number(
        self,
        block_identifier: BlockIdentifier,
        return_full_txs: bool = False,
        options: Options = None,
    ) -> CallResult:
        """Return a block by number, or a ``None`` result when no block was found."""
        return await self._request(
            "eth_getBlockByNumber", [block_identifier, return_full_txs], options
        )

    @wrap_errors("Error getting transaction by hash")
    async def get_transaction_by_hash(
        self, transaction_hash: str, options: Options = None
    ) -> CallResult:
        return await self._request(
            "eth_getTransactionByHash", [transaction_hash], options
        )

    @wrap_errors("Error getting transaction by block hash and index")
    async def get_transaction_by_block_hash_and_index(
        self,
        block_hash: str,
        transaction_index: Quantity,
        options: Options = None,
    ) -> CallResult:
        return await self._request(
            "eth_getTransactionByBlockHashAndIndex",
            [block_hash, transaction_index],
            options,
        )

    @wrap_errors("Error getting transaction by block number and index")
    async def get_transaction_by_block_number_and_index(
        self,
        block_identifier: BlockIdentifier,
        transaction_index: Quantity,
        options: Options = None,
    ) -> CallResult:
        return await self._request(
            "eth_getTransactionByBlockNumberAndIndex",
            [block_identifier, transaction_index],
            options,
        )

    @wrap_errors("Error getting transaction receipt")
    async def get_transaction_receipt(
        self, transaction_hash: str, options: Options = None
    ) -> CallResult:
        """Return the receipt of a transaction, ``None`` while it is pending."""
        return await self._request(
            "eth_getTransactionReceipt", [transaction_hash], options
        )

    @wrap_errors("Error getting uncle by block hash and index")
    async def get_uncle_by_block_hash_and_index(
        self,
        block_hash: str,
        uncle_index: Quantity,
        options: Options = None,
    ) -> CallResult:
        return await self._request(
            "eth_getUncleByBlockHashAndIndex", [block_hash, uncle_index], options
        )

    @wrap_errors("Error getting uncle by block number and index")
    async def get_uncle_by_block_number_and_index(
        self,
        block_identifier: BlockIdentifier,
        uncle_index: Quantity,
        options: Options = None,
    ) -> CallResult:
        return await self._request(
            "eth_getUncleByBlockNumberAndIndex",
            [block_identifier, uncle_index],
            options,
        )

    # Compilers

    @wrap_errors("Error getting compilers")
    async def get_compilers(self, options: Options = None) -> CallResult:
        return await self._request("eth_getCompilers", [], options)

    @wrap_errors("Error compiling solidity")
    async def compile_solidity(
        self, source_code: str, options: Options = None
    ) -> CallResult:
        return await self._request("eth_compileSolidity", [source_code], options)

    @wrap_errors("Error compiling LLL")
    async def compile_lll(
        self, source_code: str, options: Options = None
    ) -> CallResult:
        return await self._request("eth_compileLLL", [source_code], options)

    @wrap_errors("Error compiling serpent")
    async def compile_serpent(
        self, source_code: str, options: Options = None
    ) -> CallResult:
        return await self._request("eth_compileSerpent", [source_code], options)

    # Filters and logs

    @wrap_errors("Error creating filter")
    async def new_filter(self, filter_: Filter, options: Options = None) -> CallResult:
        """Create a log filter and return its ID.

        ``fromBlock`` and ``toBlock`` accept block heights or tags.
        """
        return await self._request("eth_newFilter", [filter_], options)

    @wrap_errors("Error creating block filter")
    async def new_block_filter(self, options: Options = None) -> CallResult:
        """Create a filter notifying when a new block arrives."""
        return await self._request("eth_newBlockFilter", [], options)

    @wrap_errors("Error creating pending transaction filter")
    async def new_pending_transaction_filter(
        self, options: Options = None
    ) -> CallResult:
        """Create a filter notifying when new pending transactions arrive."""
        return await self._request("eth_newPendingTransactionFilter", [], options)

    @wrap_errors("Error uninstalling filter")
    async def uninstall_filter(
        self, filter_id: Quantity, options: Options = None
    ) -> CallResult:
        return await self._request("eth_uninstallFilter", [filter_id], options)

    @wrap_errors("Error getting filter changes")
    async def get_filter_changes(
        self, filter_id: Quantity, options: Options = None
    ) -> CallResult:
        """Return logs, block hashes or transaction hashes since the last poll."""
        return await self._request("eth_getFilterChanges", [filter_id], options)

    @wrap_errors("Error getting filter logs")
    async def get_filter_logs(
        self, filter_id: Quantity, options: Options = None
    ) -> CallResult:
        return await self._request("eth_getFilterLogs", [filter_id], options)

    @wrap_errors("Error getting logs")
    async def get_logs(self, filter_: Filter, options: Options = None) -> CallResult:
        """Return all logs matching a filter object."""
        return await self._request("eth_getLogs", [filter_], options)

    # Mining

    @wrap_errors("Error getting work")
    async def get_work(self, options: Options = None) -> CallResult:
        """Return the current block pow-hash, seed hash and boundary condition."""
        return await self._request("eth_getWork", [], options)

    @wrap_errors("Error submitting work")
    async def submit_work(
        self,
        nonce: Quantity,
        pow_hash: str,
        digest: str,
        options: Options = None,
    ) -> CallResult:
        """Submit a proof-of-work solution.

        Args:
            nonce: Found nonce, sent as 8 bytes
            pow_hash: Header pow-hash (32 bytes)
            digest: Mix digest (32 bytes)
            options: Per-call options
        """
        return await self._request(
            "eth_submitWork", [nonce, pow_hash, digest], options
        )

    @wrap_errors("Error submitting hash rate")
    async def submit_hash_rate(
        self,
        hash_rate: Quantity,
        client_id: Quantity,
        options: Options = None,
    ) -> CallResult:
        """Submit the mining hash rate, both values sent as 32 bytes."""
        return await self._request(
            "eth_submitHashRate", [hash_rate, client_id], options
        )


__all__ = [
    "EthClient",
]
