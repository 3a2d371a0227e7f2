"""Symbolic execution of a script along every spending path."""

from __future__ import annotations

import copy
import dataclasses

from . import opcode as ops
from .context import ScriptContext, ScriptRules, ScriptVersion
from .convert import decode_bool, decode_int
from .errors import ScriptError, ScriptFailure
from .expr import (
    BytesExpr,
    MultisigExpr,
    Opcode1,
    Opcode2,
    Opcode3,
    OpExpr,
    encode_bool_expr,
    encode_int_expr,
)
from .opcode import Opcode
from .condition_stack import ConditionStack
from .conditions import simplify_conditions
from .requirements import PathResult, extract_locktime_requirements
from .script import Script
from .stack import Stack

MAX_STACK_SIZE = 1000
MAX_PUBKEYS_PER_MULTISIG = 20

_NOPS = frozenset(
    {
        ops.OP_NOP,
        ops.OP_CODESEPARATOR,
        ops.OP_NOP1,
        ops.OP_NOP4,
        ops.OP_NOP5,
        ops.OP_NOP6,
        ops.OP_NOP7,
        ops.OP_NOP8,
        ops.OP_NOP9,
        ops.OP_NOP10,
    }
)

_UNARY = {
    ops.OP_ABS: Opcode1.OP_ABS,
    ops.OP_NOT: Opcode1.OP_NOT,
    ops.OP_0NOTEQUAL: Opcode1.OP_0NOTEQUAL,
    ops.OP_RIPEMD160: Opcode1.OP_RIPEMD160,
    ops.OP_SHA1: Opcode1.OP_SHA1,
    ops.OP_SHA256: Opcode1.OP_SHA256,
}

# Outer hash applied on top of SHA256.
_DOUBLE_HASHES = {
    ops.OP_HASH160: Opcode1.OP_RIPEMD160,
    ops.OP_HASH256: Opcode1.OP_SHA256,
}

# Opcode and whether its two arguments are swapped.
_BINARY = {
    ops.OP_ADD: (Opcode2.OP_ADD, False),
    ops.OP_SUB: (Opcode2.OP_SUB, False),
    ops.OP_BOOLAND: (Opcode2.OP_BOOLAND, False),
    ops.OP_BOOLOR: (Opcode2.OP_BOOLOR, False),
    ops.OP_NUMEQUAL: (Opcode2.OP_NUMEQUAL, False),
    ops.OP_NUMEQUALVERIFY: (Opcode2.OP_NUMEQUAL, False),
    ops.OP_NUMNOTEQUAL: (Opcode2.OP_NUMNOTEQUAL, False),
    ops.OP_LESSTHAN: (Opcode2.OP_LESSTHAN, False),
    ops.OP_GREATERTHAN: (Opcode2.OP_LESSTHAN, True),
    ops.OP_LESSTHANOREQUAL: (Opcode2.OP_LESSTHANOREQUAL, False),
    ops.OP_GREATERTHANOREQUAL: (Opcode2.OP_LESSTHANOREQUAL, True),
    ops.OP_MIN: (Opcode2.OP_MIN, False),
    ops.OP_MAX: (Opcode2.OP_MAX, False),
}

_VERIFY_ERRORS = {
    ops.OP_EQUALVERIFY: ScriptError.EQUALVERIFY,
    ops.OP_NUMEQUALVERIFY: ScriptError.NUMEQUALVERIFY,
    ops.OP_CHECKSIGVERIFY: ScriptError.CHECKSIGVERIFY,
    ops.OP_CHECKMULTISIGVERIFY: ScriptError.CHECKMULTISIGVERIFY,
}

_LOCKTIME_CHECKS = {
    ops.OP_CHECKLOCKTIMEVERIFY: Opcode1.OP_CHECKLOCKTIMEVERIFY,
    ops.OP_CHECKSEQUENCEVERIFY: Opcode1.OP_CHECKSEQUENCEVERIFY,
}


class AnalysisError(Exception):
    """Raised when a script cannot be analyzed or has no spending path."""


class ScriptAnalyzer:
    """Executes a script symbolically, forking at every conditional."""

    def __init__(self, script: Script) -> None:
        self._script = script
        self._offset = 0
        self._stack = Stack()
        self._altstack: list = []
        self._conditions: list = []
        self._cs = ConditionStack()

    def run(self, ctx: ScriptContext) -> list:
        """Analyze every spending path; return a PathResult for each spendable one.

        Raises ScriptFailure if the script contains a disabled opcode.
        """
        for elem in self._script:
            if isinstance(elem, Opcode) and elem.is_disabled():
                raise ScriptFailure(ScriptError.DISABLED_OPCODE)

        results = []
        for path in self._fork()._explore(ctx):
            try:
                remaining, locktime, sequence = extract_locktime_requirements(
                    path._conditions
                )
            except ScriptFailure:
                continue
            results.append(
                PathResult(
                    stack_size=path._stack.items_used(),
                    spending_conditions=remaining,
                    locktime_req=locktime,
                    sequence_req=sequence,
                )
            )
        return results

    def _fork(self) -> ScriptAnalyzer:
        other = copy.copy(self)
        other._stack = self._stack.copy()
        other._altstack = list(self._altstack)
        other._conditions = list(self._conditions)
        other._cs = dataclasses.replace(self._cs)
        return other

    def _explore(self, ctx: ScriptContext) -> list:
        """Run this path and all forks; forks' paths come before the forking path."""
        finished = []
        forks, ok = self._execute(ctx)
        frames = [[self, forks, 0, ok]]
        while frames:
            frame = frames[-1]
            node, children, index, node_ok = frame
            if index < len(children):
                frame[2] += 1
                child = children[index]
                child_forks, child_ok = child._execute(ctx)
                frames.append([child, child_forks, 0, child_ok])
            else:
                frames.pop()
                if node_ok:
                    finished.append(node)
        return finished

    def _execute(self, ctx: ScriptContext) -> tuple:
        forks: list = []
        try:
            self._analyze_path(ctx, forks)
            self._conditions = simplify_conditions(self._conditions, ctx)
        except ScriptFailure:
            return forks, False
        return forks, True

    def _analyze_path(self, ctx: ScriptContext, forks: list) -> None:
        while self._offset < len(self._script):
            f_exec = self._cs.all_true()
            elem = self._script[self._offset]
            self._offset += 1

            if not f_exec:
                if not isinstance(elem, Opcode):
                    continue
                if elem < ops.OP_IF or elem > ops.OP_ENDIF:
                    continue

            if isinstance(elem, Opcode):
                self._step(elem, ctx, f_exec, forks)
            else:
                self._stack.push(BytesExpr(elem))

            if len(self._stack) + len(self._altstack) > MAX_STACK_SIZE:
                raise ScriptFailure(ScriptError.STACK_SIZE)

        if not self._cs.empty():
            raise ScriptFailure(ScriptError.UNBALANCED_CONDITIONAL)

        clean_stack_exempt = (
            ctx.version is ScriptVersion.LEGACY and ctx.rules is ScriptRules.CONSENSUS_ONLY
        )
        if len(self._stack) > 1 and not clean_stack_exempt:
            raise ScriptFailure(ScriptError.CLEANSTACK)

        self._verify(ScriptError.EVAL_FALSE)

    def _step(self, op: Opcode, ctx: ScriptContext, f_exec: bool, forks: list) -> None:
        stack = self._stack

        if op == ops.OP_0:
            stack.push(BytesExpr(b""))
        elif op == ops.OP_1NEGATE:
            stack.push(BytesExpr(b"\x81"))
        elif ops.OP_1 <= op <= ops.OP_16:
            stack.push(BytesExpr(bytes([op.code - 0x50])))
        elif op in _NOPS:
            pass
        elif op in (ops.OP_IF, ops.OP_NOTIF):
            self._branch(op, ctx, f_exec, forks)
        elif op == ops.OP_ELSE:
            if self._cs.empty():
                raise ScriptFailure(ScriptError.UNBALANCED_CONDITIONAL)
            self._cs.toggle_top()
        elif op == ops.OP_ENDIF:
            if self._cs.empty():
                raise ScriptFailure(ScriptError.UNBALANCED_CONDITIONAL)
            self._cs.pop_back()
        elif op == ops.OP_VERIFY:
            self._verify(ScriptError.VERIFY)
        elif op == ops.OP_RETURN:
            raise ScriptFailure(ScriptError.OP_RETURN)
        elif op == ops.OP_TOALTSTACK:
            (elem,) = stack.pop(1)
            self._altstack.append(elem)
        elif op == ops.OP_FROMALTSTACK:
            if not self._altstack:
                raise ScriptFailure(ScriptError.INVALID_ALTSTACK_OPERATION)
            stack.push(self._altstack.pop())
        elif op == ops.OP_2DROP:
            stack.pop(2)
        elif op == ops.OP_2DUP:
            stack.extend_from_within_back(2, 0)
        elif op == ops.OP_3DUP:
            stack.extend_from_within_back(3, 0)
        elif op == ops.OP_2OVER:
            stack.extend_from_within_back(2, 2)
        elif op == ops.OP_2ROT:
            for a, b in ((0, 2), (1, 3), (2, 4), (3, 5)):
                stack.swap_back(a, b)
        elif op == ops.OP_2SWAP:
            stack.swap_back(0, 2)
            stack.swap_back(1, 3)
        elif op == ops.OP_IFDUP:
            elem = stack.get_back(0)
            fork = self._fork()
            fork._conditions.append(OpExpr(Opcode1.OP_INTERNAL_NOT, (elem,)))
            forks.append(fork)
            self._conditions.append(elem)
            stack.push(elem)
        elif op == ops.OP_DEPTH:
            stack.push(encode_int_expr(len(stack)))
        elif op == ops.OP_DROP:
            stack.pop(1)
        elif op == ops.OP_DUP:
            stack.extend_from_within_back(1, 0)
        elif op == ops.OP_NIP:
            stack.remove_back(1)
        elif op == ops.OP_OVER:
            stack.extend_from_within_back(1, 1)
        elif op in (ops.OP_PICK, ops.OP_ROLL):
            index = self._num_from_stack()
            if index < 0:
                raise ScriptFailure(ScriptError.INVALID_STACK_OPERATION)
            if index + 1 + len(self._altstack) > MAX_STACK_SIZE:
                # Reaching that deep always exceeds the stack size limit.
                raise ScriptFailure(ScriptError.STACK_SIZE)
            if op == ops.OP_PICK:
                elem = stack.get_back(index)
            else:
                elem = stack.remove_back(index)
            stack.push(elem)
        elif op == ops.OP_ROT:
            stack.swap_back(2, 1)
            stack.swap_back(1, 0)
        elif op == ops.OP_SWAP:
            stack.swap_back(0, 1)
        elif op == ops.OP_TUCK:
            stack.swap_back(0, 1)
            stack.extend_from_within_back(1, 1)
        elif op == ops.OP_SIZE:
            top = stack.get_back(0)
            if isinstance(top, BytesExpr):
                stack.push(encode_int_expr(len(top.data)))
            else:
                stack.push(OpExpr(Opcode1.OP_SIZE, (top,)))
        elif op in (ops.OP_EQUAL, ops.OP_EQUALVERIFY):
            stack.push(OpExpr(Opcode2.OP_EQUAL, tuple(stack.pop(2))))
            self._verify_if_needed(op)
        elif op in (ops.OP_1ADD, ops.OP_1SUB):
            (elem,) = stack.pop(1)
            kind = Opcode2.OP_ADD if op == ops.OP_1ADD else Opcode2.OP_SUB
            stack.push(OpExpr(kind, (elem, BytesExpr(b"\x01"))))
        elif op == ops.OP_NEGATE:
            (elem,) = stack.pop(1)
            stack.push(OpExpr(Opcode2.OP_SUB, (BytesExpr(b""), elem)))
        elif op in _UNARY:
            (elem,) = stack.pop(1)
            stack.push(OpExpr(_UNARY[op], (elem,)))
        elif op in _BINARY:
            kind, swapped = _BINARY[op]
            first, second = stack.pop(2)
            if swapped:
                first, second = second, first
            stack.push(OpExpr(kind, (first, second)))
            self._verify_if_needed(op)
        elif op == ops.OP_WITHIN:
            stack.push(OpExpr(Opcode3.OP_WITHIN, tuple(stack.pop(3))))
        elif op in _DOUBLE_HASHES:
            (elem,) = stack.pop(1)
            inner = OpExpr(Opcode1.OP_SHA256, (elem,))
            stack.push(OpExpr(_DOUBLE_HASHES[op], (inner,)))
        elif op in (ops.OP_CHECKSIG, ops.OP_CHECKSIGVERIFY):
            stack.push(OpExpr(Opcode2.OP_CHECKSIG, tuple(stack.pop(2))))
            self._verify_if_needed(op)
        elif op in (ops.OP_CHECKMULTISIG, ops.OP_CHECKMULTISIGVERIFY):
            self._checkmultisig(op, ctx)
        elif op in _LOCKTIME_CHECKS:
            elem = stack.get_back(0)
            self._conditions.append(OpExpr(_LOCKTIME_CHECKS[op], (elem,)))
        elif op == ops.OP_CHECKSIGADD:
            if ctx.version is not ScriptVersion.SEGWIT_V1:
                raise ScriptFailure(ScriptError.BAD_OPCODE)
            sig, n, pubkey = stack.pop(3)
            check = OpExpr(Opcode2.OP_CHECKSIG, (sig, pubkey))
            stack.push(OpExpr(Opcode2.OP_ADD, (n, check)))
        else:
            raise ScriptFailure(ScriptError.BAD_OPCODE)

    def _branch(self, op: Opcode, ctx: ScriptContext, f_exec: bool, forks: list) -> None:
        if not f_exec:
            self._cs.push_back(False)
            return

        minimal_if = ctx.version is ScriptVersion.SEGWIT_V1 or (
            ctx.version is ScriptVersion.SEGWIT_V0 and ctx.rules is ScriptRules.ALL
        )
        (elem,) = self._stack.pop(1)
        fork = self._fork()
        is_if = op == ops.OP_IF
        self._cs.push_back(is_if)
        fork._cs.push_back(not is_if)

        if minimal_if:
            error = (
                ScriptError.TAPSCRIPT_MINIMALIF
                if ctx.version is ScriptVersion.SEGWIT_V1
                else ScriptError.MINIMALIF
            )
            self._conditions.append(
                OpExpr(Opcode2.OP_EQUAL, (elem, encode_bool_expr(True)), error)
            )
            fork._conditions.append(
                OpExpr(Opcode2.OP_EQUAL, (elem, encode_bool_expr(False)), error)
            )
        else:
            self._conditions.append(elem)
            fork._conditions.append(OpExpr(Opcode1.OP_INTERNAL_NOT, (elem,)))

        forks.append(fork)

    def _checkmultisig(self, op: Opcode, ctx: ScriptContext) -> None:
        if ctx.version is ScriptVersion.SEGWIT_V1:
            raise ScriptFailure(ScriptError.TAPSCRIPT_CHECKMULTISIG)

        key_count = self._num_from_stack()
        if not 0 <= key_count <= MAX_PUBKEYS_PER_MULTISIG:
            raise ScriptFailure(ScriptError.PUBKEY_COUNT)
        pubkeys = self._stack.pop(key_count)

        sig_count = self._num_from_stack()
        if not 0 <= sig_count <= key_count:
            raise ScriptFailure(ScriptError.SIG_COUNT)
        sigs = self._stack.pop(sig_count)

        (dummy,) = self._stack.pop(1)
        if ctx.rules is ScriptRules.ALL:
            self._conditions.append(
                OpExpr(Opcode2.OP_EQUAL, (dummy, BytesExpr(b"")), ScriptError.SIG_NULLDUMMY)
            )

        self._stack.push(MultisigExpr(tuple(sigs) + tuple(pubkeys), sig_count))
        self._verify_if_needed(op)

    def _verify_if_needed(self, op: Opcode) -> None:
        error = _VERIFY_ERRORS.get(op)
        if error is not None:
            self._verify(error)

    def _verify(self, error: ScriptError) -> None:
        (elem,) = self._stack.pop(1)
        if isinstance(elem, BytesExpr):
            if not decode_bool(elem.data):
                raise ScriptFailure(error)
        else:
            self._conditions.append(elem)

    def _num_from_stack(self) -> int:
        (top,) = self._stack.pop(1)
        if not isinstance(top, BytesExpr):
            raise ScriptFailure(ScriptError.UNKNOWN_DEPTH)
        return decode_int(top.data, 4)


def analyze_script(script: Script, ctx: ScriptContext) -> str:
    """Describe every way of spending ``script``.

    Raises AnalysisError when the script uses a disabled opcode or cannot be spent.
    """
    try:
        results = ScriptAnalyzer(script).run(ctx)
    except ScriptFailure as failure:
        raise AnalysisError(f"Script error: {failure.error}") from failure
    if not results:
        raise AnalysisError("Script is unspendable")
    return "Spending paths:" + "".join(f"\n\n{result}" for result in results)