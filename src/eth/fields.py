"""Static encoding tables for every supported RPC method.

``METHOD_PARAMS`` describes how each positional parameter is encoded before
transmission, ``METHOD_RESULTS`` which result fields are decoded afterwards.
Both are keyed by the wire method name so coverage can be audited in one
place.
"""

from enum import StrEnum

from typing import NamedTuple


BLOCK_TAGS = frozenset({"latest", "earliest", "pending"})
"""Block identifier keywords passed to the node verbatim"""


class Encoding(StrEnum):
    """How a positional parameter is put on the wire."""

    RAW = "raw"
    QUANTITY = "quantity"
    BLOCK = "block"
    PADDED = "padded"
    OBJECT = "object"


class ParamSpec(NamedTuple):
    """Encoding of one positional parameter."""

    name: str
    encoding: Encoding = Encoding.RAW
    width: int | None = None
    quantity_fields: tuple[str, ...] = ()
    block_fields: tuple[str, ...] = ()
    optional: bool = False


class ResultSpec(NamedTuple):
    """Result fields to decode.

    An empty ``fields`` tuple means the result itself is a quantity.
    ``nested`` maps keys holding lists of records to the fields decoded in
    each of those records.
    """

    fields: tuple[str, ...] = ()
    nested: tuple[tuple[str, tuple[str, ...]], ...] = ()


TRANSACTION_QUANTITY_FIELDS = (
    "gas",
    "gasPrice",
    "maxFeePerGas",
    "maxPriorityFeePerGas",
    "maxFeePerBlobGas",
    "value",
    "nonce",
    "chainId",
    "type",
)

FILTER_BLOCK_FIELDS = ("fromBlock", "toBlock")

SYNCING_FIELDS = ("startingBlock", "currentBlock", "highestBlock")

TRANSACTION_FIELDS = (
    "blockNumber",
    "gas",
    "gasPrice",
    "maxFeePerGas",
    "maxPriorityFeePerGas",
    "nonce",
    "transactionIndex",
    "value",
    "v",
    "chainId",
    "type",
)

BLOCK_FIELDS = (
    "number",
    "nonce",
    "difficulty",
    "totalDifficulty",
    "size",
    "gasLimit",
    "gasUsed",
    "timestamp",
    "baseFeePerGas",
    "blobGasUsed",
    "excessBlobGas",
)

LOG_FIELDS = ("logIndex", "transactionIndex", "blockNumber")

RECEIPT_FIELDS = (
    "blockNumber",
    "cumulativeGasUsed",
    "gasUsed",
    "effectiveGasPrice",
    "transactionIndex",
    "status",
    "type",
)

_ADDRESS = ParamSpec("address")
_BLOCK = ParamSpec("blockIdentifier", Encoding.BLOCK)
_BLOCK_HASH = ParamSpec("blockHash")
_INDEX = ParamSpec("index", Encoding.QUANTITY)
_FILTER_ID = ParamSpec("filterId", Encoding.QUANTITY)
_TRANSACTION = ParamSpec(
    "transaction", Encoding.OBJECT, quantity_fields=TRANSACTION_QUANTITY_FIELDS
)
_FILTER = ParamSpec("filter", Encoding.OBJECT, block_fields=FILTER_BLOCK_FIELDS)
_SOURCE = ParamSpec("sourceCode")

SCALAR = ResultSpec()
BLOCK_RESULT = ResultSpec(BLOCK_FIELDS, (("transactions", TRANSACTION_FIELDS),))
TRANSACTION_RESULT = ResultSpec(TRANSACTION_FIELDS)
RECEIPT_RESULT = ResultSpec(RECEIPT_FIELDS, (("logs", LOG_FIELDS),))
LOG_RESULT = ResultSpec(LOG_FIELDS)


METHOD_PARAMS: dict[str, tuple[ParamSpec, ...]] = {
    "web3_clientVersion": (),
    "web3_sha3": (ParamSpec("data"),),
    "net_version": (),
    "net_listening": (),
    "net_peerCount": (),
    "eth_protocolVersion": (),
    "eth_syncing": (),
    "eth_coinbase": (),
    "eth_mining": (),
    "eth_hashrate": (),
    "eth_gasPrice": (),
    "eth_accounts": (),
    "eth_blockNumber": (),
    "eth_getBalance": (_ADDRESS, _BLOCK),
    "eth_getStorageAt": (
        _ADDRESS,
        ParamSpec("storagePosition", Encoding.QUANTITY),
        _BLOCK,
    ),
    "eth_getTransactionCount": (_ADDRESS, _BLOCK),
    "eth_getBlockTransactionCountByHash": (_BLOCK_HASH,),
    "eth_getBlockTransactionCountByNumber": (_BLOCK,),
    "eth_getUncleCountByBlockHash": (_BLOCK_HASH,),
    "eth_getUncleCountByBlockNumber": (_BLOCK,),
    "eth_getCode": (_ADDRESS, _BLOCK),
    "eth_sign": (_ADDRESS, ParamSpec("message")),
    "eth_signTransaction": (_TRANSACTION,),
    "eth_sendTransaction": (_TRANSACTION,),
    "eth_sendRawTransaction": (ParamSpec("rawTransaction"),),
    "eth_call": (_TRANSACTION, _BLOCK),
    "eth_estimateGas": (_TRANSACTION, _BLOCK._replace(optional=True)),
    "eth_getBlockByHash": (_BLOCK_HASH, ParamSpec("returnFullTxs")),
    "eth_getBlockByNumber": (_BLOCK, ParamSpec("returnFullTxs")),
    "eth_getTransactionByHash": (ParamSpec("transactionHash"),),
    "eth_getTransactionByBlockHashAndIndex": (
        _BLOCK_HASH,
        _INDEX._replace(name="transactionIndex"),
    ),
    "eth_getTransactionByBlockNumberAndIndex": (
        _BLOCK,
        _INDEX._replace(name="transactionIndex"),
    ),
    "eth_getTransactionReceipt": (ParamSpec("transactionHash"),),
    "eth_getUncleByBlockHashAndIndex": (
        _BLOCK_HASH,
        _INDEX._replace(name="uncleIndex"),
    ),
    "eth_getUncleByBlockNumberAndIndex": (
        _BLOCK,
        _INDEX._replace(name="uncleIndex"),
    ),
    "eth_getCompilers": (),
    "eth_compileSolidity": (_SOURCE,),
    "eth_compileLLL": (_SOURCE,),
    "eth_compileSerpent": (_SOURCE,),
    "eth_newFilter": (_FILTER,),
    "eth_newBlockFilter": (),
    "eth_newPendingTransactionFilter": (),
    "eth_uninstallFilter": (_FILTER_ID,),
    "eth_getFilterChanges": (_FILTER_ID,),
    "eth_getFilterLogs": (_FILTER_ID,),
    "eth_getLogs": (_FILTER,),
    "eth_getWork": (),
    "eth_submitWork": (
        ParamSpec("nonce", Encoding.PADDED, width=8),
        ParamSpec("powHash"),
        ParamSpec("digest"),
    ),
    "eth_submitHashRate": (
        ParamSpec("hashRate", Encoding.PADDED, width=32),
        ParamSpec("clientId", Encoding.PADDED, width=32),
    ),
}


# Methods missing here return the node's result untouched
METHOD_RESULTS: dict[str, ResultSpec] = {
    "net_version": SCALAR,
    "net_peerCount": SCALAR,
    "eth_protocolVersion": SCALAR,
    "eth_syncing": ResultSpec(SYNCING_FIELDS),
    "eth_hashrate": SCALAR,
    "eth_gasPrice": SCALAR,
    "eth_blockNumber": SCALAR,
    "eth_getBalance": SCALAR,
    "eth_getStorageAt": SCALAR,
    "eth_getTransactionCount": SCALAR,
    "eth_getBlockTransactionCountByHash": SCALAR,
    "eth_getBlockTransactionCountByNumber": SCALAR,
    "eth_getUncleCountByBlockHash": SCALAR,
    "eth_getUncleCountByBlockNumber": SCALAR,
    "eth_estimateGas": SCALAR,
    "eth_getBlockByHash": BLOCK_RESULT,
    "eth_getBlockByNumber": BLOCK_RESULT,
    "eth_getTransactionByHash": TRANSACTION_RESULT,
    "eth_getTransactionByBlockHashAndIndex": TRANSACTION_RESULT,
    "eth_getTransactionByBlockNumberAndIndex": TRANSACTION_RESULT,
    "eth_getTransactionReceipt": RECEIPT_RESULT,
    "eth_getUncleByBlockHashAndIndex": BLOCK_RESULT,
    "eth_getUncleByBlockNumberAndIndex": BLOCK_RESULT,
    "eth_newFilter": SCALAR,
    "eth_newBlockFilter": SCALAR,
    "eth_newPendingTransactionFilter": SCALAR,
    "eth_getFilterChanges": LOG_RESULT,
    "eth_getFilterLogs": LOG_RESULT,
    "eth_getLogs": LOG_RESULT,
}


def params_for(method: str) -> tuple[ParamSpec, ...]:
    """Return the parameter encodings of ``method``.

    Raises:
        KeyError: If the method is not in the catalogue
    """
    return METHOD_PARAMS[method]


def result_spec_for(method: str) -> ResultSpec | None:
    """Return the result fields of ``method``, or None if left untouched."""
    return METHOD_RESULTS.get(method)


__all__ = [
    "BLOCK_FIELDS",
    "BLOCK_TAGS",
    "LOG_FIELDS",
    "METHOD_PARAMS",
    "METHOD_RESULTS",
    "RECEIPT_FIELDS",
    "SYNCING_FIELDS",
    "TRANSACTION_FIELDS",
    "Encoding",
    "ParamSpec",
    "ResultSpec",
    "params_for",
    "result_spec_for",
]
