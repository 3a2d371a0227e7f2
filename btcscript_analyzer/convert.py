"""Encoding and decoding of script numbers and booleans."""

from __future__ import annotations

from .errors import ScriptError, ScriptFailure

INT_MAX_LEN = 5


def encode_int(n: int) -> bytes:
    """Encode an integer as a minimal little-endian sign-magnitude script number."""
    if n == 0:
        return b""
    negative = n < 0
    out = bytearray()
    magnitude = abs(n)
    while magnitude:
        out.append(magnitude & 0xFF)
        magnitude >>= 8
    if out[-1] & 0x80:
        out.append(0x80 if negative else 0x00)
    elif negative:
        out[-1] |= 0x80
    if len(out) > INT_MAX_LEN:
        raise ValueError(f"integer {n} does not fit in {INT_MAX_LEN} bytes")
    return bytes(out)


def check_int(data: bytes, max_len: int) -> None:
    """Raise NUM_OVERFLOW if ``data`` is longer than ``max_len`` bytes."""
    if len(data) > max_len:
        raise ScriptFailure(ScriptError.NUM_OVERFLOW)


def decode_int_unchecked(data: bytes) -> int:
    """Decode a script number without checking its length."""
    if not data:
        return 0
    raw = bytearray(data)
    negative = bool(raw[-1] & 0x80)
    raw[-1] &= 0x7F
    value = int.from_bytes(raw, "little")
    return -value if negative else value


def decode_int(data: bytes, max_len: int) -> int:
    """Decode a script number of at most ``max_len`` bytes."""
    check_int(data, max_len)
    return decode_int_unchecked(data)


def encode_bool(b: bool) -> bytes:
    """Encode a boolean as <01> or <>."""
    return b"\x01" if b else b""


def decode_bool(data: bytes) -> bool:
    """Interpret bytes as a boolean; zero and negative zero are false."""
    last = len(data) - 1
    for i, byte in enumerate(data):
        if byte != 0:
            return i != last or byte != 0x80
    return False