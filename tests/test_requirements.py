import pytest

from btcscript_analyzer.errors import ScriptError, ScriptFailure
from btcscript_analyzer.expr import (
    OpExpr,
    Opcode1,
    Opcode2,
    StackExpr,
    encode_bool_expr,
    encode_int_expr,
)
from btcscript_analyzer.locktime import LOCKTIME_THRESHOLD, SEQUENCE_LOCKTIME_TYPE_FLAG
from btcscript_analyzer.requirements import (
    LocktimeRequirement,
    PathResult,
    extract_locktime_requirements,
)


def cltv(arg):
    return OpExpr(Opcode1.OP_CHECKLOCKTIMEVERIFY, (arg,))


def csv(arg):
    return OpExpr(Opcode1.OP_CHECKSEQUENCEVERIFY, (arg,))


def test_empty_requirement_has_no_description():
    assert LocktimeRequirement().describe(False) is None
    assert LocktimeRequirement().describe(True) is None


def test_absolute_height_description():
    req = LocktimeRequirement(req=100)
    assert req.describe(False) == "type: height, minValue: at block 100"


def test_relative_height_description():
    req = LocktimeRequirement(req=10)
    assert req.describe(True) == "type: height, minValue: in 10 blocks"


def test_unknown_description_lists_exprs():
    req = LocktimeRequirement(exprs=[StackExpr(0)])
    assert req.describe(False) == (
        "type: unknown, minValue: unknown, stack elements: <stack item #0>"
    )


def test_extract_keeps_other_conditions_in_order():
    other1 = StackExpr(1)
    other2 = OpExpr(Opcode2.OP_EQUAL, (StackExpr(0), encode_bool_expr(True)))
    remaining, locktime, sequence = extract_locktime_requirements(
        [other1, cltv(encode_int_expr(100)), other2]
    )
    assert remaining == [other1, other2]
    assert locktime.req == 100
    assert sequence.req is None and sequence.exprs == []


def test_extract_takes_maximum():
    _, locktime, _ = extract_locktime_requirements(
        [cltv(encode_int_expr(200)), cltv(encode_int_expr(100))]
    )
    assert locktime.req == 200


def test_extract_mixed_types_unsatisfiable():
    conditions = [cltv(encode_int_expr(100)), cltv(encode_int_expr(LOCKTIME_THRESHOLD))]
    with pytest.raises(ScriptFailure) as info:
        extract_locktime_requirements(conditions)
    assert info.value.error is ScriptError.UNSATISFIED_LOCKTIME


def test_extract_negative_locktime():
    with pytest.raises(ScriptFailure) as info:
        extract_locktime_requirements([csv(encode_int_expr(-1))])
    assert info.value.error is ScriptError.NEGATIVE_LOCKTIME


def test_extract_absolute_above_u32():
    with pytest.raises(ScriptFailure) as info:
        extract_locktime_requirements([cltv(encode_int_expr(2**32))])
    assert info.value.error is ScriptError.UNSATISFIED_LOCKTIME


def test_extract_relative_is_masked():
    _, _, sequence = extract_locktime_requirements(
        [csv(encode_int_expr((1 << 23) | 5))]
    )
    assert sequence.req == 5


def test_extract_relative_keeps_type_flag():
    value = SEQUENCE_LOCKTIME_TYPE_FLAG | 3
    _, _, sequence = extract_locktime_requirements([csv(encode_int_expr(value))])
    assert sequence.req == value


def test_extract_symbolic_argument():
    remaining, locktime, _ = extract_locktime_requirements([cltv(StackExpr(2))])
    assert remaining == []
    assert locktime.exprs == [StackExpr(2)]
    assert locktime.req is None


def test_path_result_without_requirements():
    result = PathResult(0, [], LocktimeRequirement(), LocktimeRequirement())
    assert str(result) == (
        "Stack size: 0\n"
        "Stack item requirements: none\n"
        "Locktime requirement: none\n"
        "Sequence requirement: none"
    )


def test_path_result_locktime_makes_sequence_non_final():
    result = PathResult(
        1, [StackExpr(0)], LocktimeRequirement(req=100), LocktimeRequirement()
    )
    assert str(result) == (
        "Stack size: 1\n"
        "Stack item requirements:\n<stack item #0>\n"
        "Locktime requirement: type: height, minValue: at block 100\n"
        "Sequence requirement: non-final (not 0xffffffff)"
    )


def test_path_result_sequence_described():
    result = PathResult(0, [], LocktimeRequirement(), LocktimeRequirement(req=10))
    assert str(result).endswith(
        "Locktime requirement: none\nSequence requirement: type: height, minValue: in 10 blocks"
    )