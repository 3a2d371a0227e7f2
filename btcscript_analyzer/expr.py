"""Symbolic expressions for values on the script stack, and their simplification."""

from __future__ import annotations

import dataclasses
import hashlib
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import Callable, Optional, Union

from Crypto.Hash import RIPEMD160

from .checksig import (
    SIG_HASH_TYPES,
    PubKeyCheckResult,
    check_pub_key,
    is_valid_signature_encoding,
)
from .context import ScriptContext, ScriptRules, ScriptVersion
from .convert import check_int, decode_bool, decode_int_unchecked, encode_bool, encode_int
from .errors import ScriptError, ScriptFailure
from .opcode import OP_CHECKMULTISIG, Opcode


class Opcode1(Enum):
    """Opcodes taking one argument."""

    OP_SIZE = 0x82
    OP_ABS = 0x90
    OP_NOT = 0x91
    OP_0NOTEQUAL = 0x92
    OP_RIPEMD160 = 0xA6
    OP_SHA1 = 0xA7
    OP_SHA256 = 0xA8
    OP_CHECKLOCKTIMEVERIFY = 0xB1
    OP_CHECKSEQUENCEVERIFY = 0xB2
    OP_INTERNAL_NOT = 0xFE


class Opcode2(Enum):
    """Opcodes taking two arguments."""

    OP_EQUAL = 0x87
    OP_ADD = 0x93
    OP_SUB = 0x94
    OP_BOOLAND = 0x9A
    OP_BOOLOR = 0x9B
    OP_NUMEQUAL = 0x9C
    OP_NUMNOTEQUAL = 0x9E
    OP_LESSTHAN = 0x9F
    OP_LESSTHANOREQUAL = 0xA1
    OP_MIN = 0xA3
    OP_MAX = 0xA4
    OP_CHECKSIG = 0xAC


class Opcode3(Enum):
    """Opcodes taking three arguments."""

    OP_WITHIN = 0xA5


_ARITY = {Opcode1: 1, Opcode2: 2, Opcode3: 3}


class _ExprBase:
    """Gives every expression the same total order used for sorting."""

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, _ExprBase):
            return NotImplemented
        return _sort_key(self) < _sort_key(other)


@dataclass(frozen=True)
class BytesExpr(_ExprBase):
    """A constant byte string."""

    data: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))

    def is_false(self) -> bool:
        return self.data == b""

    def is_true(self) -> bool:
        return self.data == b"\x01"

    def __str__(self) -> str:
        return f"<{self.data.hex()}>"


@dataclass(frozen=True)
class StackExpr(_ExprBase):
    """An unknown item of the initial stack, numbered from the top."""

    pos: int

    def __str__(self) -> str:
        return f"<stack item #{self.pos}>"


@dataclass(frozen=True)
class OpExpr(_ExprBase):
    """An opcode applied to a fixed number of arguments."""

    op: Union[Opcode1, Opcode2, Opcode3]
    args: tuple
    error: Optional[ScriptError] = None

    def __post_init__(self) -> None:
        args = tuple(self.args)
        expected = _ARITY.get(type(self.op))
        if expected is None:
            raise TypeError(f"not an expression opcode: {self.op!r}")
        if len(args) != expected:
            raise ValueError(f"{self.op.name} takes {expected} arguments, got {len(args)}")
        object.__setattr__(self, "args", args)

    def opcode(self) -> Opcode:
        return Opcode(self.op.value)

    def __str__(self) -> str:
        return f"{self.opcode()}({_join(self.args)})"


@dataclass(frozen=True)
class MultisigExpr(_ExprBase):
    """OP_CHECKMULTISIG over signatures followed by public keys."""

    args: tuple
    pk_offset: int

    def __post_init__(self) -> None:
        args = tuple(self.args)
        if not 0 <= self.pk_offset <= len(args):
            raise ValueError(f"pubkey offset {self.pk_offset} out of range")
        object.__setattr__(self, "args", args)

    def opcode(self) -> Opcode:
        return OP_CHECKMULTISIG

    def sigs(self) -> tuple:
        return self.args[: self.pk_offset]

    def keys(self) -> tuple:
        return self.args[self.pk_offset :]

    def __str__(self) -> str:
        return (
            f"{self.opcode()}(sigs=[{_join(self.sigs())}], "
            f"pubkeys=[{_join(self.keys())}])"
        )


Expr = Union[OpExpr, MultisigExpr, StackExpr, BytesExpr]

_OP_TYPES = (OpExpr, MultisigExpr)


def _join(args: tuple) -> str:
    return ", ".join(str(arg) for arg in args)


def _sort_key(expr: Expr) -> tuple:
    # Operations first, then stack items, then constants.
    if isinstance(expr, _OP_TYPES):
        return (
            0,
            expr.opcode().code,
            len(expr.args),
            tuple(_sort_key(arg) for arg in expr.args),
        )
    if isinstance(expr, StackExpr):
        return (1, expr.pos)
    return (2, expr.data)


def _returns_boolean(expr: Expr) -> bool:
    return isinstance(expr, _OP_TYPES) and expr.opcode().returns_boolean()


def encode_int_expr(n: int) -> BytesExpr:
    """A constant holding ``n`` as a script number."""
    return BytesExpr(encode_int(n))


def encode_bool_expr(b: bool) -> BytesExpr:
    """A constant holding ``b`` as <01> or <>."""
    return BytesExpr(encode_bool(b))


def sort_recursive(exprs: list) -> None:
    """Sort a list of expressions in place, and the arguments of commutative operations."""
    _sort_recursive(exprs, True)


def _sort_recursive(exprs: list, sort_current: bool) -> None:
    if sort_current:
        exprs.sort(key=_sort_key)
    exprs[:] = [_with_sorted_args(expr) for expr in exprs]


def _with_sorted_args(expr: Expr) -> Expr:
    if not isinstance(expr, _OP_TYPES):
        return expr
    args = list(expr.args)
    _sort_recursive(args, expr.opcode().can_reorder_args())
    return dataclasses.replace(expr, args=tuple(args))


def replace_all(expr: Expr, search: Expr, replacement: Expr) -> tuple:
    """Replace every occurrence of ``search``; return the new expression and whether it changed."""
    if expr == search:
        return replacement, True
    if isinstance(expr, _OP_TYPES):
        results = [replace_all(arg, search, replacement) for arg in expr.args]
        if any(changed for _, changed in results):
            return dataclasses.replace(expr, args=tuple(arg for arg, _ in results)), True
    return expr, False


def evaluate(expr: Expr, ctx: ScriptContext) -> tuple:
    """Simplify an expression as far as possible.

    Returns the simplified expression and whether anything changed.
    Raises ScriptFailure when the expression can never succeed.
    """
    return _evaluate(expr, ctx, 0)


def _evaluate(expr: Expr, ctx: ScriptContext, depth: int) -> tuple:
    if not isinstance(expr, _OP_TYPES):
        return expr, False

    changed = False
    new_args = []
    for arg in expr.args:
        new_arg, arg_changed = _evaluate(arg, ctx, depth + 1)
        new_args.append(new_arg)
        changed |= arg_changed
    if changed:
        expr = dataclasses.replace(expr, args=tuple(new_args))

    if isinstance(expr, MultisigExpr):
        simplified = _simplify_multisig(expr)
    elif isinstance(expr.op, Opcode1):
        simplified = _simplify_unary(expr, ctx, depth)
    elif isinstance(expr.op, Opcode2):
        simplified = _simplify_binary(expr, ctx)
    else:
        simplified = None

    if simplified is None:
        return expr, changed
    return simplified, True


_HASHES: dict = {
    Opcode1.OP_RIPEMD160: lambda data: RIPEMD160.new(data).digest(),
    Opcode1.OP_SHA1: lambda data: hashlib.sha1(data).digest(),
    Opcode1.OP_SHA256: lambda data: hashlib.sha256(data).digest(),
}

_NOTS = (Opcode1.OP_NOT, Opcode1.OP_INTERNAL_NOT)


def _simplify_unary(expr: OpExpr, ctx: ScriptContext, depth: int) -> Optional[Expr]:
    op = expr.op
    (arg,) = expr.args

    if op is Opcode1.OP_SIZE:
        if isinstance(arg, BytesExpr):
            return encode_int_expr(len(arg.data))
        if _returns_boolean(arg):
            return arg
        return None

    if op in _HASHES:
        if isinstance(arg, BytesExpr):
            hash_fn: Callable[[bytes], bytes] = _HASHES[op]
            return BytesExpr(hash_fn(arg.data))
        return None

    if op in _NOTS:
        if isinstance(arg, BytesExpr):
            if op is Opcode1.OP_NOT and len(arg.data) > 4:
                raise ScriptFailure(ScriptError.NUM_OVERFLOW)
            return encode_bool_expr(not decode_bool(arg.data))
        if isinstance(arg, OpExpr) and arg.op in _NOTS:
            inner = arg.args[0]
            if _returns_boolean(inner) or (isinstance(inner, StackExpr) and depth == 0):
                return inner
        if (
            isinstance(arg, OpExpr)
            and arg.op is Opcode2.OP_CHECKSIG
            and depth == 0
            and ctx.rules is ScriptRules.ALL
        ):
            # assumes a valid public key
            return OpExpr(Opcode2.OP_EQUAL, (arg.args[0], encode_bool_expr(False)))
    return None


def _simplify_binary(expr: OpExpr, ctx: ScriptContext) -> Optional[Expr]:
    op = expr.op
    first, second = expr.args

    if op in (Opcode2.OP_ADD, Opcode2.OP_SUB):
        for arg in expr.args:
            if isinstance(arg, BytesExpr):
                check_int(arg.data, 4)
        if isinstance(first, BytesExpr) and isinstance(second, BytesExpr):
            a = decode_int_unchecked(first.data)
            b = decode_int_unchecked(second.data)
            return encode_int_expr(a + b if op is Opcode2.OP_ADD else a - b)
        return None

    if op is Opcode2.OP_EQUAL:
        if isinstance(first, BytesExpr) and isinstance(second, BytesExpr):
            return encode_bool_expr(first.data == second.data)
        if isinstance(second, BytesExpr) and _returns_boolean(first):
            if second.is_true():
                return first
            if second.is_false():
                return OpExpr(Opcode1.OP_NOT, (first,))
            return encode_bool_expr(False)
        return None

    if op is Opcode2.OP_CHECKSIG:
        return _simplify_checksig(first, second, ctx)

    return None


def _simplify_checksig(sig: Expr, pubkey: Expr, ctx: ScriptContext) -> Optional[Expr]:
    if not isinstance(pubkey, BytesExpr):
        return None
    all_rules = ctx.rules is ScriptRules.ALL

    if ctx.version is ScriptVersion.SEGWIT_V1:
        if not pubkey.data:
            raise ScriptFailure(ScriptError.PUBKEYTYPE)
        if len(pubkey.data) != 32:
            if all_rules:
                raise ScriptFailure(ScriptError.DISCOURAGE_UPGRADABLE_PUBKEYTYPE)
            return encode_bool_expr(True)
        if isinstance(sig, BytesExpr):
            if not sig.data:
                return encode_bool_expr(False)
            if len(sig.data) not in (64, 65):
                raise ScriptFailure(ScriptError.SCHNORR_SIG_SIZE)
            if len(sig.data) == 65 and sig.data[64] not in SIG_HASH_TYPES:
                raise ScriptFailure(ScriptError.SCHNORR_SIG_HASHTYPE)
        return None

    check = check_pub_key(pubkey.data)
    if check is PubKeyCheckResult.INVALID:
        raise ScriptFailure(ScriptError.PUBKEYTYPE)
    if not check.compressed and ctx.version is ScriptVersion.SEGWIT_V0 and all_rules:
        raise ScriptFailure(ScriptError.WITNESS_PUBKEYTYPE)
    if isinstance(sig, BytesExpr):
        if not sig.data:
            return encode_bool_expr(False)
        if all_rules:
            if not is_valid_signature_encoding(sig.data):
                raise ScriptFailure(ScriptError.SIG_DER)
            if sig.data[-1] not in SIG_HASH_TYPES:
                raise ScriptFailure(ScriptError.SIG_HASHTYPE)
    return None


def _simplify_multisig(expr: MultisigExpr) -> Optional[Expr]:
    sigs, keys = expr.sigs(), expr.keys()
    if len(sigs) != len(keys):
        return None
    checks = [OpExpr(Opcode2.OP_CHECKSIG, (sig, key)) for sig, key in zip(sigs, keys)]
    if not checks:
        return encode_bool_expr(True)
    return reduce(lambda a, b: OpExpr(Opcode2.OP_BOOLAND, (a, b)), checks)