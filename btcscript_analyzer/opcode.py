"""Script opcodes, their names and classification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, order=True)
class Opcode:
    """A single script opcode byte."""

    code: int

    def __post_init__(self) -> None:
        if not 0 <= self.code <= 0xFF:
            raise ValueError(f"opcode out of range: {self.code}")

    def __str__(self) -> str:
        return self.name() or "UNKNOWN"

    def name(self) -> str | None:
        """Canonical name, or None for unknown and internal opcodes."""
        if self.is_internal():
            return None
        return _NAME_BY_CODE.get(self.code)

    def is_internal(self) -> bool:
        """Internal opcodes do not exist in the protocol and only model other opcodes."""
        return self.code == OP_INTERNAL_NOT.code

    def is_disabled(self) -> bool:
        """Opcodes disabled because of CVE-2010-5137."""
        return self in _DISABLED

    def pushdata_length(self) -> int | None:
        """Width of the length field following OP_PUSHDATA1/2/4, otherwise None."""
        return _PUSHDATA_LENGTHS.get(self)

    def returns_boolean(self) -> bool:
        """Whether the opcode's result is always <> or <01>."""
        return self in _RETURNS_BOOLEAN

    def returns_number(self) -> bool:
        """Whether the opcode's result is at most a 5-byte number."""
        return self.returns_boolean() or self in _RETURNS_NUMBER

    def can_reorder_args(self) -> bool:
        """Whether the opcode's arguments are commutative."""
        return self not in _ORDERED_ARGS

    def opcode_type(self) -> OpcodeType:
        """Broad category of the opcode."""
        if self.is_disabled():
            return OpcodeType.DISABLED
        if self in (OP_VER, OP_VERIF, OP_VERNOTIF):
            return OpcodeType.INVALID
        if OP_0 <= self <= OP_PUSHDATA4:
            return OpcodeType.CONSTANT
        if OP_NOP <= self <= OP_RETURN:
            return OpcodeType.FLOW
        if OP_TOALTSTACK <= self <= OP_TUCK:
            return OpcodeType.STACK
        if OP_CAT <= self <= OP_SIZE:
            return OpcodeType.SPLICE
        if OP_INVERT <= self <= OP_EQUALVERIFY:
            return OpcodeType.BITWISE
        if OP_1ADD <= self <= OP_WITHIN:
            return OpcodeType.ARITHMETIC
        if OP_RIPEMD160 <= self <= OP_CHECKMULTISIGVERIFY or self == OP_CHECKSIGADD:
            return OpcodeType.CRYPTO
        if OP_CHECKLOCKTIMEVERIFY <= self <= OP_CHECKSEQUENCEVERIFY:
            return OpcodeType.LOCKTIME
        return OpcodeType.INVALID

    @classmethod
    def from_name_exact_unprefixed(cls, name: str) -> Opcode | None:
        """Look up an upper-case name given without its OP_ prefix."""
        for full_name, opcode in _TABLE:
            if full_name[3:] == name:
                return None if opcode.is_internal() else opcode
        return None

    @classmethod
    def from_name(cls, name: str) -> Opcode | None:
        """Look up a name case-insensitively, with or without the OP_ prefix."""
        if len(name) >= 3 and name[:2].upper() == "OP" and name[2] == "_" and name[:2].isascii():
            name = name[3:]
        if len(name) > _LONGEST_NAME_LENGTH - 3:
            return None
        return cls.from_name_exact_unprefixed(name.translate(_ASCII_UPPER))


class OpcodeType(Enum):
    """Category of an opcode."""

    DATA = "data"
    NUMBER = "number"
    CONSTANT = "constant"
    FLOW = "flow"
    STACK = "stack"
    SPLICE = "splice"
    BITWISE = "bitwise"
    ARITHMETIC = "arithmetic"
    CRYPTO = "crypto"
    LOCKTIME = "locktime"
    DISABLED = "disabled"
    INVALID = "invalid"


# push value
OP_0 = Opcode(0x00)
OP_FALSE = Opcode(0x00)
OP_PUSHDATA1 = Opcode(0x4C)
OP_PUSHDATA2 = Opcode(0x4D)
OP_PUSHDATA4 = Opcode(0x4E)
OP_1NEGATE = Opcode(0x4F)
OP_RESERVED = Opcode(0x50)
OP_1 = Opcode(0x51)
OP_TRUE = Opcode(0x51)
OP_2 = Opcode(0x52)
OP_3 = Opcode(0x53)
OP_4 = Opcode(0x54)
OP_5 = Opcode(0x55)
OP_6 = Opcode(0x56)
OP_7 = Opcode(0x57)
OP_8 = Opcode(0x58)
OP_9 = Opcode(0x59)
OP_10 = Opcode(0x5A)
OP_11 = Opcode(0x5B)
OP_12 = Opcode(0x5C)
OP_13 = Opcode(0x5D)
OP_14 = Opcode(0x5E)
OP_15 = Opcode(0x5F)
OP_16 = Opcode(0x60)

# control
OP_NOP = Opcode(0x61)
OP_VER = Opcode(0x62)
OP_IF = Opcode(0x63)
OP_NOTIF = Opcode(0x64)
OP_VERIF = Opcode(0x65)
OP_VERNOTIF = Opcode(0x66)
OP_ELSE = Opcode(0x67)
OP_ENDIF = Opcode(0x68)
OP_VERIFY = Opcode(0x69)
OP_RETURN = Opcode(0x6A)

# stack ops
OP_TOALTSTACK = Opcode(0x6B)
OP_FROMALTSTACK = Opcode(0x6C)
OP_2DROP = Opcode(0x6D)
OP_2DUP = Opcode(0x6E)
OP_3DUP = Opcode(0x6F)
OP_2OVER = Opcode(0x70)
OP_2ROT = Opcode(0x71)
OP_2SWAP = Opcode(0x72)
OP_IFDUP = Opcode(0x73)
OP_DEPTH = Opcode(0x74)
OP_DROP = Opcode(0x75)
OP_DUP = Opcode(0x76)
OP_NIP = Opcode(0x77)
OP_OVER = Opcode(0x78)
OP_PICK = Opcode(0x79)
OP_ROLL = Opcode(0x7A)
OP_ROT = Opcode(0x7B)
OP_SWAP = Opcode(0x7C)
OP_TUCK = Opcode(0x7D)

# splice ops
OP_CAT = Opcode(0x7E)
OP_SUBSTR = Opcode(0x7F)
OP_LEFT = Opcode(0x80)
OP_RIGHT = Opcode(0x81)
OP_SIZE = Opcode(0x82)

# bit logic
OP_INVERT = Opcode(0x83)
OP_AND = Opcode(0x84)
OP_OR = Opcode(0x85)
OP_XOR = Opcode(0x86)
OP_EQUAL = Opcode(0x87)
OP_EQUALVERIFY = Opcode(0x88)
OP_RESERVED1 = Opcode(0x89)
OP_RESERVED2 = Opcode(0x8A)

# numeric
OP_1ADD = Opcode(0x8B)
OP_1SUB = Opcode(0x8C)
OP_2MUL = Opcode(0x8D)
OP_2DIV = Opcode(0x8E)
OP_NEGATE = Opcode(0x8F)
OP_ABS = Opcode(0x90)
OP_NOT = Opcode(0x91)
OP_0NOTEQUAL = Opcode(0x92)
OP_ADD = Opcode(0x93)
OP_SUB = Opcode(0x94)
OP_MUL = Opcode(0x95)
OP_DIV = Opcode(0x96)
OP_MOD = Opcode(0x97)
OP_LSHIFT = Opcode(0x98)
OP_RSHIFT = Opcode(0x99)
OP_BOOLAND = Opcode(0x9A)
OP_BOOLOR = Opcode(0x9B)
OP_NUMEQUAL = Opcode(0x9C)
OP_NUMEQUALVERIFY = Opcode(0x9D)
OP_NUMNOTEQUAL = Opcode(0x9E)
OP_LESSTHAN = Opcode(0x9F)
OP_GREATERTHAN = Opcode(0xA0)
OP_LESSTHANOREQUAL = Opcode(0xA1)
OP_GREATERTHANOREQUAL = Opcode(0xA2)
OP_MIN = Opcode(0xA3)
OP_MAX = Opcode(0xA4)
OP_WITHIN = Opcode(0xA5)

# crypto
OP_RIPEMD160 = Opcode(0xA6)
OP_SHA1 = Opcode(0xA7)
OP_SHA256 = Opcode(0xA8)
OP_HASH160 = Opcode(0xA9)
OP_HASH256 = Opcode(0xAA)
OP_CODESEPARATOR = Opcode(0xAB)
OP_CHECKSIG = Opcode(0xAC)
OP_CHECKSIGVERIFY = Opcode(0xAD)
OP_CHECKMULTISIG = Opcode(0xAE)
OP_CHECKMULTISIGVERIFY = Opcode(0xAF)

# expansion
OP_NOP1 = Opcode(0xB0)
OP_CHECKLOCKTIMEVERIFY = Opcode(0xB1)
OP_NOP2 = Opcode(0xB1)
OP_CHECKSEQUENCEVERIFY = Opcode(0xB2)
OP_NOP3 = Opcode(0xB2)
OP_NOP4 = Opcode(0xB3)
OP_NOP5 = Opcode(0xB4)
OP_NOP6 = Opcode(0xB5)
OP_NOP7 = Opcode(0xB6)
OP_NOP8 = Opcode(0xB7)
OP_NOP9 = Opcode(0xB8)
OP_NOP10 = Opcode(0xB9)

# tapscript
OP_CHECKSIGADD = Opcode(0xBA)

OP_INVALIDOPCODE = Opcode(0xFF)

# aliases
OP_CLTV = Opcode(0xB1)
OP_CSV = Opcode(0xB2)

# Internal: like OP_NOT but without the 4-byte input limit.
# Equivalent to IF 0 ELSE 1 ENDIF without minimal if.
OP_INTERNAL_NOT = Opcode(0xFE)

# Names in lookup order; the first name for a value is its canonical name.
_TABLE: tuple[tuple[str, Opcode], ...] = (
    ("OP_0", OP_0),
    ("OP_FALSE", OP_FALSE),
    ("OP_PUSHDATA1", OP_PUSHDATA1),
    ("OP_PUSHDATA2", OP_PUSHDATA2),
    ("OP_PUSHDATA4", OP_PUSHDATA4),
    ("OP_1NEGATE", OP_1NEGATE),
    ("OP_RESERVED", OP_RESERVED),
    ("OP_1", OP_1),
    ("OP_TRUE", OP_TRUE),
    ("OP_2", OP_2),
    ("OP_3", OP_3),
    ("OP_4", OP_4),
    ("OP_5", OP_5),
    ("OP_6", OP_6),
    ("OP_7", OP_7),
    ("OP_8", OP_8),
    ("OP_9", OP_9),
    ("OP_10", OP_10),
    ("OP_11", OP_11),
    ("OP_12", OP_12),
    ("OP_13", OP_13),
    ("OP_14", OP_14),
    ("OP_15", OP_15),
    ("OP_16", OP_16),
    ("OP_NOP", OP_NOP),
    ("OP_VER", OP_VER),
    ("OP_IF", OP_IF),
    ("OP_NOTIF", OP_NOTIF),
    ("OP_VERIF", OP_VERIF),
    ("OP_VERNOTIF", OP_VERNOTIF),
    ("OP_ELSE", OP_ELSE),
    ("OP_ENDIF", OP_ENDIF),
    ("OP_VERIFY", OP_VERIFY),
    ("OP_RETURN", OP_RETURN),
    ("OP_TOALTSTACK", OP_TOALTSTACK),
    ("OP_FROMALTSTACK", OP_FROMALTSTACK),
    ("OP_2DROP", OP_2DROP),
    ("OP_2DUP", OP_2DUP),
    ("OP_3DUP", OP_3DUP),
    ("OP_2OVER", OP_2OVER),
    ("OP_2ROT", OP_2ROT),
    ("OP_2SWAP", OP_2SWAP),
    ("OP_IFDUP", OP_IFDUP),
    ("OP_DEPTH", OP_DEPTH),
    ("OP_DROP", OP_DROP),
    ("OP_DUP", OP_DUP),
    ("OP_NIP", OP_NIP),
    ("OP_OVER", OP_OVER),
    ("OP_PICK", OP_PICK),
    ("OP_ROLL", OP_ROLL),
    ("OP_ROT", OP_ROT),
    ("OP_SWAP", OP_SWAP),
    ("OP_TUCK", OP_TUCK),
    ("OP_CAT", OP_CAT),
    ("OP_SUBSTR", OP_SUBSTR),
    ("OP_LEFT", OP_LEFT),
    ("OP_RIGHT", OP_RIGHT),
    ("OP_SIZE", OP_SIZE),
    ("OP_INVERT", OP_INVERT),
    ("OP_AND", OP_AND),
    ("OP_OR", OP_OR),
    ("OP_XOR", OP_XOR),
    ("OP_EQUAL", OP_EQUAL),
    ("OP_EQUALVERIFY", OP_EQUALVERIFY),
    ("OP_RESERVED1", OP_RESERVED1),
    ("OP_RESERVED2", OP_RESERVED2),
    ("OP_1ADD", OP_1ADD),
    ("OP_1SUB", OP_1SUB),
    ("OP_2MUL", OP_2MUL),
    ("OP_2DIV", OP_2DIV),
    ("OP_NEGATE", OP_NEGATE),
    ("OP_ABS", OP_ABS),
    ("OP_NOT", OP_NOT),
    ("OP_0NOTEQUAL", OP_0NOTEQUAL),
    ("OP_ADD", OP_ADD),
    ("OP_SUB", OP_SUB),
    ("OP_MUL", OP_MUL),
    ("OP_DIV", OP_DIV),
    ("OP_MOD", OP_MOD),
    ("OP_LSHIFT", OP_LSHIFT),
    ("OP_RSHIFT", OP_RSHIFT),
    ("OP_BOOLAND", OP_BOOLAND),
    ("OP_BOOLOR", OP_BOOLOR),
    ("OP_NUMEQUAL", OP_NUMEQUAL),
    ("OP_NUMEQUALVERIFY", OP_NUMEQUALVERIFY),
    ("OP_NUMNOTEQUAL", OP_NUMNOTEQUAL),
    ("OP_LESSTHAN", OP_LESSTHAN),
    ("OP_GREATERTHAN", OP_GREATERTHAN),
    ("OP_LESSTHANOREQUAL", OP_LESSTHANOREQUAL),
    ("OP_GREATERTHANOREQUAL", OP_GREATERTHANOREQUAL),
    ("OP_MIN", OP_MIN),
    ("OP_MAX", OP_MAX),
    ("OP_WITHIN", OP_WITHIN),
    ("OP_RIPEMD160", OP_RIPEMD160),
    ("OP_SHA1", OP_SHA1),
    ("OP_SHA256", OP_SHA256),
    ("OP_HASH160", OP_HASH160),
    ("OP_HASH256", OP_HASH256),
    ("OP_CODESEPARATOR", OP_CODESEPARATOR),
    ("OP_CHECKSIG", OP_CHECKSIG),
    ("OP_CHECKSIGVERIFY", OP_CHECKSIGVERIFY),
    ("OP_CHECKMULTISIG", OP_CHECKMULTISIG),
    ("OP_CHECKMULTISIGVERIFY", OP_CHECKMULTISIGVERIFY),
    ("OP_NOP1", OP_NOP1),
    ("OP_CHECKLOCKTIMEVERIFY", OP_CHECKLOCKTIMEVERIFY),
    ("OP_NOP2", OP_NOP2),
    ("OP_CHECKSEQUENCEVERIFY", OP_CHECKSEQUENCEVERIFY),
    ("OP_NOP3", OP_NOP3),
    ("OP_NOP4", OP_NOP4),
    ("OP_NOP5", OP_NOP5),
    ("OP_NOP6", OP_NOP6),
    ("OP_NOP7", OP_NOP7),
    ("OP_NOP8", OP_NOP8),
    ("OP_NOP9", OP_NOP9),
    ("OP_NOP10", OP_NOP10),
    ("OP_CHECKSIGADD", OP_CHECKSIGADD),
    ("OP_INVALIDOPCODE", OP_INVALIDOPCODE),
    ("OP_CLTV", OP_CLTV),
    ("OP_CSV", OP_CSV),
    ("OP_INTERNAL_NOT", OP_INTERNAL_NOT),
)

_NAME_BY_CODE: dict[int, str] = {}
for _name, _opcode in _TABLE:
    _NAME_BY_CODE.setdefault(_opcode.code, _name)

_LONGEST_NAME_LENGTH = max(len(name) for name, _ in _TABLE)

_ASCII_UPPER = str.maketrans(
    "abcdefghijklmnopqrstuvwxyz", "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)

_DISABLED = frozenset(
    {
        OP_CAT,
        OP_SUBSTR,
        OP_LEFT,
        OP_RIGHT,
        OP_INVERT,
        OP_AND,
        OP_OR,
        OP_XOR,
        OP_2MUL,
        OP_2DIV,
        OP_MUL,
        OP_DIV,
        OP_MOD,
        OP_LSHIFT,
        OP_RSHIFT,
    }
)

_PUSHDATA_LENGTHS = {OP_PUSHDATA1: 1, OP_PUSHDATA2: 2, OP_PUSHDATA4: 4}

_RETURNS_BOOLEAN = frozenset(
    {
        OP_EQUAL,
        OP_NOT,
        OP_0NOTEQUAL,
        OP_BOOLAND,
        OP_BOOLOR,
        OP_NUMEQUAL,
        OP_NUMNOTEQUAL,
        OP_LESSTHAN,
        OP_GREATERTHAN,
        OP_LESSTHANOREQUAL,
        OP_GREATERTHANOREQUAL,
        OP_WITHIN,
        OP_CHECKSIG,
        OP_CHECKMULTISIG,
        OP_INTERNAL_NOT,
    }
)

_RETURNS_NUMBER = frozenset(
    {OP_SIZE, OP_NEGATE, OP_ABS, OP_ADD, OP_SUB, OP_MIN, OP_MAX}
)

_ORDERED_ARGS = frozenset(
    {
        OP_SUB,
        OP_LESSTHAN,
        OP_GREATERTHAN,
        OP_LESSTHANOREQUAL,
        OP_GREATERTHANOREQUAL,
        OP_WITHIN,
        OP_CHECKSIG,
        OP_CHECKMULTISIG,
    }
)