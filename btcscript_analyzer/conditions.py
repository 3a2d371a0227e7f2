"""Simplification of the conjunction of a spending path's conditions."""

from __future__ import annotations

from .context import ScriptContext
from .convert import decode_bool
from .errors import ScriptError, ScriptFailure
from .expr import (
    BytesExpr,
    MultisigExpr,
    Opcode1,
    Opcode2,
    OpExpr,
    encode_bool_expr,
    evaluate,
    replace_all,
    sort_recursive,
)

_NOTS = (Opcode1.OP_NOT, Opcode1.OP_INTERNAL_NOT)
_OP_TYPES = (OpExpr, MultisigExpr)


def simplify_conditions(conditions, ctx: ScriptContext) -> list:
    """Simplify conditions that must all hold.

    Returns the simplified, sorted list of conditions. Raises ScriptFailure
    when the conditions can never all be satisfied.
    """
    exprs = list(conditions)
    while _simplify_step(exprs, ctx):
        pass
    return exprs


def _simplify_step(exprs: list, ctx: ScriptContext) -> bool:
    """Apply one rewrite in place; return whether another pass is needed."""
    sort_recursive(exprs)
    j = 0
    while j < len(exprs):
        expr1 = exprs[j]
        if isinstance(expr1, BytesExpr):
            if not decode_bool(expr1.data):
                raise ScriptFailure(ScriptError.UNKNOWN_ERROR)
            del exprs[j]
            continue
        if isinstance(expr1, OpExpr) and expr1.op is Opcode2.OP_BOOLAND:
            del exprs[j]
            exprs.extend(expr1.args)
            return True

        for k, expr2 in enumerate(exprs):
            if k == j:
                continue
            if expr1 == expr2:
                # (a && a) == a
                del exprs[k]
                return True
            if not isinstance(expr1, _OP_TYPES):
                continue
            if isinstance(expr1, OpExpr) and expr1.op in _NOTS:
                inner = expr1.args[0]
                if inner == expr2:
                    # (a && !a) == 0
                    raise ScriptFailure(ScriptError.UNKNOWN_ERROR)
                if isinstance(inner, _OP_TYPES) and inner.opcode().returns_boolean():
                    # (!a && f(a)) -> f(false)
                    if _substitute(exprs, k, inner, encode_bool_expr(False)):
                        return True
            if isinstance(expr1, OpExpr) and expr1.op is Opcode2.OP_EQUAL:
                # (a == b && f(a)) -> f(b)
                if _substitute(exprs, k, expr1.args[0], expr1.args[1]):
                    return True
            if expr1.opcode().returns_boolean():
                # (a && f(a)) -> f(true)
                if _substitute(exprs, k, expr1, encode_bool_expr(True)):
                    return True

        simplified, changed = evaluate(exprs[j], ctx)
        exprs[j] = simplified
        if changed:
            return True
        j += 1
    return False


def _substitute(exprs: list, index: int, search, replacement) -> bool:
    result, changed = replace_all(exprs[index], search, replacement)
    if changed:
        exprs[index] = result
    return changed