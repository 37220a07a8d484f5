"""Convert quantity fields of raw RPC results into the caller's representation."""

from collections.abc import Mapping, Sequence

from typing import Any

from src.eth.errors import ConversionError
from src.eth.fields import ResultSpec
from src.eth.formats import ValueRepresentation, convert


def _normalize_record(
    record: Mapping[str, Any],
    fields_to_decode: Sequence[str],
    target: ValueRepresentation,
    nested: Mapping[str, Sequence[str]],
) -> dict[str, Any]:
    normalized = dict(record)
    for field in fields_to_decode:
        # Optional protocol fields may be absent or null
        value = normalized.get(field)
        if value is not None:
            normalized[field] = convert(value, target)

    for key, nested_fields in nested.items():
        items = normalized.get(key)
        if isinstance(items, list):
            normalized[key] = [
                _normalize_record(item, nested_fields, target, {})
                if isinstance(item, Mapping)
                else item
                for item in items
            ]
    return normalized


def normalize(
    raw_result: Any,
    fields_to_decode: Sequence[str],
    target: ValueRepresentation | str,
    nested: Mapping[str, Sequence[str]] | None = None,
) -> Any:
    """Normalize a raw RPC result.

    Args:
        raw_result: Scalar, record, or list of records returned by the node
        fields_to_decode: Record keys holding hex quantities; empty when the
            result itself is a quantity
        target: Representation to convert quantities to
        nested: Keys holding lists of records mapped to their own fields

    Returns:
        The result with named quantities converted. ``None`` and booleans
        are returned unchanged.

    Raises:
        ConversionError: If a named field is not a valid quantity

    Example:
        >>> normalize({"gasUsed": "0x5208"}, ["gasUsed"], "Number")
        {'gasUsed': 21000}
        >>> normalize(None, ["gasUsed"], "Number") is None
        True
    """
    try:
        representation = ValueRepresentation(target)
    except ValueError as e:
        msg = f"Unknown representation: {target!r}"
        raise ConversionError(msg, {"target": target}) from e
    nested = nested or {}

    if raw_result is None or isinstance(raw_result, bool):
        return raw_result

    if isinstance(raw_result, Mapping):
        return _normalize_record(raw_result, fields_to_decode, representation, nested)

    if isinstance(raw_result, list):
        return [
            normalize(item, fields_to_decode, representation, nested)
            if isinstance(item, Mapping) or not fields_to_decode
            else item
            for item in raw_result
        ]

    if fields_to_decode:
        # Hashes and other scalars alongside records are not quantities
        return raw_result
    return convert(raw_result, representation)


def normalize_result(
    raw_result: Any,
    spec: ResultSpec | None,
    target: ValueRepresentation | str,
) -> Any:
    """Normalize a raw result using a method's ``ResultSpec``.

    A ``None`` spec leaves the result untouched.
    """
    if spec is None:
        return raw_result
    return normalize(raw_result, spec.fields, target, dict(spec.nested))


__all__ = [
    "normalize",
    "normalize_result",
]
