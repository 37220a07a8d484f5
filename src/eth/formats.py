"""Conversion between hex, decimal and numeric representations of quantities.

The hex string is the canonical wire form. Everything else is a client-side
convenience chosen per client or per call.
"""

from enum import StrEnum
import re

from typing import Any

from src.eth.errors import ConversionError


MAX_SAFE_INTEGER = 2**53 - 1
"""Largest magnitude a Number representation may hold without losing precision"""

_HEX_PATTERN = re.compile(r"^-?0[xX][0-9a-fA-F]+$")
_DECIMAL_PATTERN = re.compile(r"^-?[0-9]+$")


def _describe(value: Any) -> str:
    # repr of an int past the digit limit raises ValueError
    try:
        return repr(value)
    except ValueError:
        return f"<{value.bit_length()}-bit integer>"


class ValueRepresentation(StrEnum):
    """Representations a quantity can be returned in."""

    HEX_STRING = "HexString"
    NUMBER = "Number"
    BIG_INT = "BigInt"
    DECIMAL_STRING = "DecimalString"


def parse_numeral(value: Any) -> int:
    """Parse a hex string, decimal string or integer into an int.

    Args:
        value: ``0x``-prefixed hex string, decimal string, int or integral float

    Returns:
        int: The parsed value

    Raises:
        ConversionError: If the value is not a valid numeral

    Example:
        >>> parse_numeral("0x5208")
        21000
        >>> parse_numeral("-42")
        -42
    """
    # bool is an int subclass but never a quantity
    if isinstance(value, bool):
        msg = f"Cannot convert boolean {value!r} to a quantity"
        raise ConversionError(msg, {"value": value})

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if not value.is_integer():
            msg = f"Cannot convert non-integral number {value!r} to a quantity"
            raise ConversionError(msg, {"value": value})
        return int(value)

    if isinstance(value, str):
        text = value.strip()
        if _HEX_PATTERN.match(text):
            negative = text.startswith("-")
            magnitude = int(text.lstrip("-")[2:], 16)
            return -magnitude if negative else magnitude
        if _DECIMAL_PATTERN.match(text):
            try:
                return int(text, 10)
            except ValueError as e:
                msg = f"Numeral has too many digits ({len(text)})"
                raise ConversionError(msg, {"value": value}) from e
        msg = f"Invalid numeral: {value!r}"
        raise ConversionError(msg, {"value": value})

    msg = f"Unsupported value type {type(value).__name__}"
    raise ConversionError(msg, {"value": value})


def to_hex(value: Any, width: int | None = None) -> str:
    """Convert a value to a canonical ``0x``-prefixed lowercase hex string.

    Args:
        value: Any value accepted by ``parse_numeral``
        width: Optional byte width to left-pad the result to

    Returns:
        str: Hex string, zero-trimmed unless ``width`` is given

    Raises:
        ConversionError: If the value is invalid, or negative or too large
            for the requested width

    Example:
        >>> to_hex(100)
        '0x64'
        >>> to_hex("0x1", width=4)
        '0x00000001'
    """
    number = parse_numeral(value)

    if width is None:
        if number < 0:
            return f"-0x{-number:x}"
        return f"0x{number:x}"

    if width <= 0:
        msg = f"Byte width must be positive, got {width}"
        raise ConversionError(msg, {"value": value, "width": width})
    if number < 0:
        msg = f"Cannot pad negative value {_describe(value)}"
        raise ConversionError(msg, {"value": value, "width": width})

    digits = f"{number:x}"
    if len(digits) > width * 2:
        msg = f"Value {_describe(value)} exceeds {width} bytes"
        raise ConversionError(msg, {"value": value, "width": width})
    return "0x" + digits.rjust(width * 2, "0")


def to_number(value: Any) -> int:
    """Convert a value to an int inside the safe integer range.

    Raises:
        ConversionError: If the magnitude exceeds ``MAX_SAFE_INTEGER``
    """
    number = parse_numeral(value)
    if abs(number) > MAX_SAFE_INTEGER:
        msg = f"Value {_describe(value)} exceeds the safe integer range"
        raise ConversionError(msg, {"value": value})
    return number


def to_big_int(value: Any) -> int:
    """Convert a value to an arbitrary-precision int."""
    return parse_numeral(value)


def to_decimal_string(value: Any) -> str:
    """Convert a value to a base-10 string.

    Raises:
        ConversionError: If the value is invalid or too large to print in base 10
    """
    number = parse_numeral(value)
    try:
        return str(number)
    except ValueError as e:
        msg = f"Value is too large for a decimal string ({number.bit_length()} bits)"
        raise ConversionError(msg, {"value": value}) from e


def canonicalize_hex(value: str) -> str:
    """Lowercase and zero-trim a hex string.

    Example:
        >>> canonicalize_hex("0x00FF")
        '0xff'

    Raises:
        ConversionError: If the value is not a hex string
    """
    if not isinstance(value, str) or not _HEX_PATTERN.match(value.strip()):
        msg = f"Not a hex string: {value!r}"
        raise ConversionError(msg, {"value": value})
    return to_hex(value)


def convert(
    value: Any,
    target: ValueRepresentation | str,
    width: int | None = None,
) -> str | int:
    """Convert a value to the target representation.

    Args:
        value: Hex string, decimal string, int or integral float
        target: Representation to produce
        width: Byte width for padded hex output, HexString target only

    Returns:
        str | int: The converted value

    Raises:
        ConversionError: If the value is malformed, out of range or the
            target is unknown
    """
    try:
        representation = ValueRepresentation(target)
    except ValueError as e:
        msg = f"Unknown representation: {target!r}"
        raise ConversionError(msg, {"target": target}) from e

    if width is not None and representation is not ValueRepresentation.HEX_STRING:
        msg = f"Byte width only applies to {ValueRepresentation.HEX_STRING}"
        raise ConversionError(msg, {"target": str(representation), "width": width})

    if representation is ValueRepresentation.HEX_STRING:
        return to_hex(value, width)
    if representation is ValueRepresentation.NUMBER:
        return to_number(value)
    if representation is ValueRepresentation.BIG_INT:
        return to_big_int(value)
    return to_decimal_string(value)


__all__ = [
    "MAX_SAFE_INTEGER",
    "ValueRepresentation",
    "canonicalize_hex",
    "convert",
    "parse_numeral",
    "to_big_int",
    "to_decimal_string",
    "to_hex",
    "to_number",
]
