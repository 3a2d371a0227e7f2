"""Hexadecimal encoding and decoding helpers."""

from __future__ import annotations

_ASCII_WHITESPACE = frozenset(b" \t\n\x0c\r")


class HexDecodeError(ValueError):
    """Raised when a string is not valid hexadecimal."""


class OddHexLengthError(HexDecodeError):
    """The input holds an odd number of hex characters."""

    def __init__(self, amount: int) -> None:
        super().__init__(f"string contains an odd amount ({amount}) of hex characters")
        self.amount = amount


class InvalidHexCharacterError(HexDecodeError):
    """The input holds a byte that is not a hex digit."""

    def __init__(self, position: int, char: int) -> None:
        shown = chr(char) if 32 <= char <= 126 else "\ufffd"
        super().__init__(f'invalid character "{shown}" (0x{char:02x}) at byte {position}')
        self.position = position
        self.char = char


def _as_bytes(text: str | bytes) -> bytes:
    return text.encode("utf-8") if isinstance(text, str) else bytes(text)


def _digit(char: int, position: int) -> int:
    if 0x30 <= char <= 0x39:
        return char - 0x30
    if 0x41 <= char <= 0x46:
        return char - 0x41 + 10
    if 0x61 <= char <= 0x66:
        return char - 0x61 + 10
    raise InvalidHexCharacterError(position, char)


def encode_hex(data: bytes) -> str:
    """Encode bytes as lower-case hex."""
    return bytes(data).hex()


def decode_hex(text: str | bytes) -> bytes:
    """Decode a hex string; characters are checked pairwise before the length."""
    raw = _as_bytes(text)
    out = bytearray()
    for i in range(0, len(raw) - 1, 2):
        high = _digit(raw[i], i)
        low = _digit(raw[i + 1], i + 1)
        out.append((high << 4) | low)
    if len(raw) % 2:
        raise OddHexLengthError(len(raw))
    return bytes(out)


def decode_hex_ignore_whitespace(text: str | bytes) -> bytes:
    """Decode a hex string, skipping ASCII whitespace anywhere in it."""
    raw = _as_bytes(text)
    out = bytearray()
    high: int | None = None
    for position, char in enumerate(raw):
        if char in _ASCII_WHITESPACE:
            continue
        n = _digit(char, position)
        if high is None:
            high = n
        else:
            out.append((high << 4) | n)
            high = None
    if high is not None:
        raise OddHexLengthError(2 * len(out) + 1)
    return bytes(out)