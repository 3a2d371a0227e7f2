"""Locktime requirements of a spending path and the textual path summary."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .convert import decode_int
from .errors import ScriptError, ScriptFailure
from .expr import BytesExpr, Opcode1, OpExpr
from .locktime import (
    SEQUENCE_LOCKTIME_MASK,
    SEQUENCE_LOCKTIME_TYPE_FLAG,
    LocktimeType,
    locktime_to_string,
    locktime_type_equals,
)

_U32_MAX = 0xFFFFFFFF


@dataclass
class LocktimeRequirement:
    """A known minimum locktime and the expressions whose value is unknown."""

    exprs: list = field(default_factory=list)
    req: Optional[int] = None

    def describe(self, relative: bool) -> Optional[str]:
        """Describe the requirement, or None when there is none."""
        if not self.exprs and self.req is None:
            return None
        if self.req is None:
            kind = "unknown"
            min_value = "unknown"
        else:
            kind = LocktimeType.of(self.req, relative).value
            min_value = locktime_to_string(self.req, relative)
        text = f"type: {kind}, minValue: {min_value}"
        if self.exprs:
            text += ", stack elements: " + ", ".join(str(e) for e in self.exprs)
        return text


@dataclass
class PathResult:
    """Requirements for one way of spending a script."""

    stack_size: int
    spending_conditions: list
    locktime_req: LocktimeRequirement
    sequence_req: LocktimeRequirement

    def __str__(self) -> str:
        if self.spending_conditions:
            items = "".join(f"\n{c}" for c in self.spending_conditions)
        else:
            items = " none"
        locktime = self.locktime_req.describe(False)
        sequence = self.sequence_req.describe(True)
        if sequence is not None:
            sequence_str = sequence
        elif locktime is not None:
            sequence_str = "non-final (not 0xffffffff)"
        else:
            sequence_str = "none"
        return (
            f"Stack size: {self.stack_size}\n"
            f"Stack item requirements:{items}\n"
            f"Locktime requirement: {locktime if locktime is not None else 'none'}\n"
            f"Sequence requirement: {sequence_str}"
        )


def extract_locktime_requirements(conditions) -> tuple:
    """Split locktime checks out of a path's conditions.

    Returns the remaining conditions, the absolute locktime requirement and the
    relative (sequence) requirement. Raises ScriptFailure when the checks
    cannot all be satisfied.
    """
    locktime = LocktimeRequirement()
    sequence = LocktimeRequirement()
    remaining = []
    for expr in conditions:
        if not (
            isinstance(expr, OpExpr)
            and expr.op in (Opcode1.OP_CHECKLOCKTIMEVERIFY, Opcode1.OP_CHECKSEQUENCEVERIFY)
        ):
            remaining.append(expr)
            continue
        relative = expr.op is Opcode1.OP_CHECKSEQUENCEVERIFY
        requirement = sequence if relative else locktime
        (arg,) = expr.args
        if not isinstance(arg, BytesExpr):
            requirement.exprs.append(arg)
            continue
        min_value = decode_int(arg.data, 5)
        if min_value < 0:
            raise ScriptFailure(ScriptError.NEGATIVE_LOCKTIME)
        if not relative and min_value > _U32_MAX:
            raise ScriptFailure(ScriptError.UNSATISFIED_LOCKTIME)
        min_value &= _U32_MAX
        if relative:
            min_value &= SEQUENCE_LOCKTIME_TYPE_FLAG | SEQUENCE_LOCKTIME_MASK
        if requirement.req is None:
            requirement.req = min_value
        else:
            if not locktime_type_equals(requirement.req, min_value, relative):
                raise ScriptFailure(ScriptError.UNSATISFIED_LOCKTIME)
            requirement.req = max(requirement.req, min_value)
    return remaining, locktime, sequence