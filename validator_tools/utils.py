"""Small parsing helpers shared across modules."""

from typing import Optional

from .exceptions import ParseError


def strip_0x(value: str) -> str:
    return value[2:] if value.startswith(("0x", "0X")) else value


def decode_hex(value, field: str, length: Optional[int] = None) -> bytes:
    """Decode an optionally 0x-prefixed hex string.

    Raises:
        ParseError: If value is not a string, not hex, or not ``length`` bytes
    """
    if not isinstance(value, str):
        raise ParseError(f"{field} must be a hex string, got {type(value).__name__}")
    try:
        decoded = bytes.fromhex(strip_0x(value))
    except ValueError as e:
        raise ParseError(f"invalid hex in {field}: {e}") from e
    if length is not None and len(decoded) != length:
        raise ParseError(f"{field} must be {length} bytes, got {len(decoded)}")
    return decoded


def parse_uint(value, field: str, allow_int: bool = True) -> int:
    """Parse a decimal string (or, when ``allow_int``, a JSON integer) into a uint64.

    Deposit files carry ``amount`` as a JSON number, while signed exits carry
    their numeric fields as decimal strings only, so exit parsing passes
    ``allow_int=False``.
    """
    if isinstance(value, bool):
        raise ParseError(f"{field} must be an unsigned integer, got {value!r}")
    if isinstance(value, int) and allow_int:
        result = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        result = int(value)
    else:
        raise ParseError(f"{field} must be an unsigned integer, got {value!r}")
    if result < 0 or result >= 2**64:
        raise ParseError(f"{field} out of range: {result}")
    return result
