"""Build call descriptors, encoding parameters into their wire form."""

from collections.abc import Mapping, Sequence

from typing import Any

from pydantic import BaseModel

from src.eth.errors import ConversionError, DispatchError
from src.eth.fields import BLOCK_TAGS, Encoding, ParamSpec, params_for
from src.eth.formats import to_hex
from src.eth.models import CallDescriptor, CallOptions


def is_block_tag(value: Any) -> bool:
    """Whether ``value`` is one of the reserved block identifier keywords.

    Example:
        >>> is_block_tag("latest")
        True
        >>> is_block_tag("0x64")
        False
    """
    return isinstance(value, str) and value in BLOCK_TAGS


def encode_block_identifier(value: Any) -> str:
    """Encode a block identifier for the wire.

    Tags pass through verbatim, heights are converted to hex.

    Example:
        >>> encode_block_identifier(100)
        '0x64'
        >>> encode_block_identifier("pending")
        'pending'
    """
    if is_block_tag(value):
        return value
    return to_hex(value)


def _encode(value: Any, path: str, encoder: Any, *args: Any) -> Any:
    try:
        return encoder(value, *args)
    except ConversionError as e:
        msg = f"Invalid value for {path}: {e.message}"
        raise DispatchError(msg, {"field": path, "value": value}) from e


def _encode_object(value: Any, spec: ParamSpec, path: str) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True, exclude_none=True)
    if not isinstance(value, Mapping):
        msg = f"Expected an object, got {type(value).__name__}"
        raise DispatchError(msg, {"field": path})

    encoded: dict[str, Any] = {}
    for key, item in value.items():
        if item is None:
            continue
        if key in spec.quantity_fields:
            encoded[key] = _encode(item, f"{path}.{key}", to_hex)
        elif key in spec.block_fields:
            encoded[key] = _encode(item, f"{path}.{key}", encode_block_identifier)
        else:
            encoded[key] = item
    return encoded


def encode_param(value: Any, spec: ParamSpec) -> Any:
    """Encode a single positional parameter according to its spec.

    Raises:
        DispatchError: If the value cannot be encoded
    """
    if spec.encoding is Encoding.QUANTITY:
        return _encode(value, spec.name, to_hex)
    if spec.encoding is Encoding.PADDED:
        return _encode(value, spec.name, to_hex, spec.width)
    if spec.encoding is Encoding.BLOCK:
        return _encode(value, spec.name, encode_block_identifier)
    if spec.encoding is Encoding.OBJECT:
        return _encode_object(value, spec, spec.name)
    return value


def build_call(
    method: str,
    raw_params: Sequence[Any],
    fields_to_encode: Sequence[ParamSpec] | None = None,
    options: CallOptions | None = None,
) -> CallDescriptor:
    """Build the descriptor of an RPC call.

    Args:
        method: Wire method name, e.g. "eth_getBalance"
        raw_params: Positional parameters as given by the caller
        fields_to_encode: Parameter encodings, looked up in the method table
            when omitted
        options: Per-call options carried on the descriptor

    Returns:
        CallDescriptor: Method, encoded params and options

    Raises:
        DispatchError: If a parameter cannot be encoded; nothing is sent

    Example:
        >>> build_call("eth_getBalance", ["0xabc", 100]).params
        ['0xabc', '0x64']
    """
    from_table = fields_to_encode is None
    if from_table:
        try:
            specs = params_for(method)
        except KeyError as e:
            msg = f"Unknown method: {method}"
            raise DispatchError(msg, {"method": method}) from e
    else:
        specs = tuple(fields_to_encode)

    params = list(raw_params)
    if from_table and len(params) > len(specs):
        msg = f"{method} takes {len(specs)} parameters, got {len(params)}"
        raise DispatchError(msg, {"method": method})

    # Trailing optional parameters left as None are not sent
    while (
        params
        and len(params) <= len(specs)
        and params[-1] is None
        and specs[len(params) - 1].optional
    ):
        params.pop()

    encoded: list[Any] = []
    try:
        for value, spec in zip(params, specs, strict=False):
            encoded.append(encode_param(value, spec))
    except DispatchError as e:
        e.details["method"] = method
        raise

    # Parameters beyond the given encodings pass through unmodified
    encoded.extend(params[len(specs) :])

    return CallDescriptor(
        method=method, params=encoded, options=options or CallOptions()
    )


__all__ = [
    "build_call",
    "encode_block_identifier",
    "encode_param",
    "is_block_tag",
]
