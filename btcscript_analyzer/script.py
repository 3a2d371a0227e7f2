"""Parsing and formatting of scripts as sequences of opcodes and data pushes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Union

from .convert import encode_int
from .hexutil import HexDecodeError, decode_hex
from .opcode import OP_ELSE, OP_ENDIF, OP_IF, OP_NOTIF, Opcode

ScriptElem = Union[Opcode, bytes]

_ASM_SEPARATOR = re.compile(r"[ \t\n\x0c\r]+")
_ASM_INTEGER = re.compile(r"[+-]?[0-9]+")
_MAX_ASM_INTEGER = 0x7FFFFFFF
_MAX_PUSH_SIZE = 520
_PUSHDATA1_BYTE = 0x4C
_PUSHDATA2_BYTE = 0x4D


class ParseScriptError(ValueError):
    """Raised when raw script bytes cannot be split into elements."""


class ParseAsmScriptError(ValueError):
    """Raised when a textual (asm) script cannot be assembled."""


def _format_elem(elem: ScriptElem) -> str:
    if isinstance(elem, Opcode):
        return str(elem)
    return f"<{elem.hex()}>"


@dataclass(frozen=True)
class Script:
    """A parsed script: opcodes and pushed byte strings in order."""

    elements: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "elements",
            tuple(e if isinstance(e, Opcode) else bytes(e) for e in self.elements),
        )

    def __iter__(self) -> Iterator[ScriptElem]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __getitem__(self, index):
        return self.elements[index]

    def __str__(self) -> str:
        return self.format_indented()

    @classmethod
    def parse_from_bytes(cls, data: bytes) -> Script:
        """Split serialized script bytes into opcodes and data pushes."""
        data = bytes(data)
        elements: list = []
        offset = 0
        while offset < len(data):
            byte = data[offset]
            offset += 1
            opcode = Opcode(byte)
            if opcode.name() is not None:
                width = opcode.pushdata_length()
                if width is None:
                    elements.append(opcode)
                    continue
                if offset + width > len(data):
                    raise ParseScriptError(
                        f"{opcode} with incomplete push length (SCRIPT_ERR_BAD_OPCODE)"
                    )
                length = int.from_bytes(data[offset : offset + width], "little")
                offset += width
            elif byte <= 75:
                length = byte
            else:
                raise ParseScriptError(f"invalid opcode 0x{byte:02x}")
            if offset + length > len(data):
                raise ParseScriptError(
                    f"invalid length, expected {length} but got {len(data) - offset} "
                    "(SCRIPT_ERR_BAD_OPCODE)"
                )
            elements.append(data[offset : offset + length])
            offset += length
        return cls(tuple(elements))

    @classmethod
    def parse_from_asm(cls, asm: str) -> tuple:
        """Assemble whitespace separated asm.

        Returns the serialized script bytes and the parsed script.
        """
        out = bytearray()
        for token in _ASM_SEPARATOR.split(asm):
            if token:
                out += _assemble_token(token)
        raw = bytes(out)
        return raw, cls.parse_from_bytes(raw)

    def to_bytes(self) -> bytes:
        """Concatenate opcode bytes and pushed data, without push length prefixes."""
        return b"".join(
            bytes([e.code]) if isinstance(e, Opcode) else e for e in self.elements
        )

    def format_space_separated(self) -> str:
        return " ".join(_format_elem(e) for e in self.elements)

    def format_newline_separated(self) -> str:
        return "\n".join(_format_elem(e) for e in self.elements)

    def format_indented(self) -> str:
        """One element per line, indenting the bodies of conditionals."""
        lines = []
        indent = 0
        for position, elem in enumerate(self.elements):
            if position and elem in (OP_ELSE, OP_ENDIF):
                indent = max(0, indent - 1)
            lines.append("  " * (indent if position else 0) + _format_elem(elem))
            if elem in (OP_IF, OP_NOTIF, OP_ELSE):
                indent += 1
        return "\n".join(lines)


def _assemble_token(token: str) -> bytes:
    if _ASM_INTEGER.fullmatch(token):
        n = int(token)
        if n == 0:
            return b"\x00"
        if -1 <= n <= 16:
            return bytes([0x50 + n])
        if -_MAX_ASM_INTEGER <= n <= _MAX_ASM_INTEGER:
            encoded = encode_int(n)
            return bytes([len(encoded)]) + encoded
        raise ParseAsmScriptError("integer out of range")

    if len(token) >= 2 and token.startswith("<") and token.endswith(">"):
        hex_part = token[1:-1].encode("utf-8")
        size = len(hex_part) // 2
        if size <= 75:
            prefix = bytes([size])
        elif size <= 255:
            prefix = bytes([_PUSHDATA1_BYTE, size])
        elif size <= _MAX_PUSH_SIZE:
            prefix = bytes([_PUSHDATA2_BYTE]) + size.to_bytes(2, "little")
        else:
            raise ParseAsmScriptError("data push too large")
        try:
            payload = decode_hex(hex_part)
        except HexDecodeError as err:
            raise ParseAsmScriptError(f"hex decode error: {err}") from err
        return prefix + payload

    opcode = Opcode.from_name(token)
    if opcode is None:
        raise ParseAsmScriptError("unknown opcode")
    if opcode.pushdata_length() is not None:
        raise ParseAsmScriptError("OP_PUSHDATA opcodes are not allowed in asm script")
    return bytes([opcode.code])