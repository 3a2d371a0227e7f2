import pytest

from btcscript_analyzer.analyzer import AnalysisError, ScriptAnalyzer, analyze_script
from btcscript_analyzer.context import ScriptContext, ScriptRules, ScriptVersion
from btcscript_analyzer.errors import ScriptError, ScriptFailure
from btcscript_analyzer.expr import (
    BytesExpr,
    Opcode1,
    Opcode2,
    OpExpr,
    StackExpr,
    encode_bool_expr,
)
from btcscript_analyzer.script import Script

V0_ALL = ScriptContext(ScriptVersion.SEGWIT_V0, ScriptRules.ALL)
LEGACY_CONSENSUS = ScriptContext(ScriptVersion.LEGACY, ScriptRules.CONSENSUS_ONLY)
TAPSCRIPT = ScriptContext(ScriptVersion.SEGWIT_V1, ScriptRules.ALL)

PUBKEY_HEX = "02" + "11" * 32


def asm(text):
    _, script = Script.parse_from_asm(text)
    return script


def test_single_true_push_has_no_requirements():
    text = analyze_script(Script.parse_from_bytes(b"\x51"), V0_ALL)
    assert text == (
        "Spending paths:\n\n"
        "Stack size: 0\n"
        "Stack item requirements: none\n"
        "Locktime requirement: none\n"
        "Sequence requirement: none"
    )


def test_op_return_is_unspendable():
    with pytest.raises(AnalysisError) as info:
        analyze_script(asm("OP_RETURN"), V0_ALL)
    assert str(info.value) == "Script is unspendable"


def test_disabled_opcode_reported_even_in_unexecuted_branch():
    script = asm("0 OP_IF OP_CAT OP_ENDIF 1")
    with pytest.raises(AnalysisError) as info:
        analyze_script(script, LEGACY_CONSENSUS)
    assert str(info.value) == f"Script error: {ScriptError.DISABLED_OPCODE}"


def test_run_raises_on_disabled_opcode():
    with pytest.raises(ScriptFailure) as info:
        ScriptAnalyzer(asm("OP_MUL")).run(V0_ALL)
    assert info.value.error is ScriptError.DISABLED_OPCODE


def test_unbalanced_endif_is_unspendable():
    with pytest.raises(AnalysisError, match="Script is unspendable"):
        analyze_script(asm("1 OP_ENDIF"), V0_ALL)


def test_if_else_forks_with_minimal_if_conditions():
    results = ScriptAnalyzer(asm("OP_IF 1 OP_ELSE 1 OP_ENDIF")).run(V0_ALL)
    assert len(results) == 2
    assert all(r.stack_size == 1 for r in results)
    false_path, true_path = results
    assert false_path.spending_conditions == [
        OpExpr(Opcode2.OP_EQUAL, (StackExpr(0), encode_bool_expr(False)), ScriptError.MINIMALIF)
    ]
    assert true_path.spending_conditions == [
        OpExpr(Opcode2.OP_EQUAL, (StackExpr(0), encode_bool_expr(True)), ScriptError.MINIMALIF)
    ]


def test_if_without_minimal_if_uses_plain_truthiness():
    results = ScriptAnalyzer(asm("OP_IF 1 OP_ELSE 1 OP_ENDIF")).run(LEGACY_CONSENSUS)
    false_path, true_path = results
    assert false_path.spending_conditions == [
        OpExpr(Opcode1.OP_INTERNAL_NOT, (StackExpr(0),))
    ]
    assert true_path.spending_conditions == [StackExpr(0)]


def test_tapscript_if_uses_tapscript_error():
    results = ScriptAnalyzer(asm("OP_IF 1 OP_ELSE 1 OP_ENDIF")).run(TAPSCRIPT)
    assert all(
        c.error is ScriptError.TAPSCRIPT_MINIMALIF
        for r in results
        for c in r.spending_conditions
    )


def test_cleanstack_depends_on_rules():
    script = asm("1 1")
    with pytest.raises(AnalysisError, match="unspendable"):
        analyze_script(script, V0_ALL)
    results = ScriptAnalyzer(script).run(LEGACY_CONSENSUS)
    assert len(results) == 1


def test_pay_to_pubkey_hash_conditions():
    script = asm("OP_DUP OP_HASH160 <" + "00" * 20 + "> OP_EQUALVERIFY OP_CHECKSIG")
    results = ScriptAnalyzer(script).run(V0_ALL)
    assert len(results) == 1
    (path,) = results
    assert path.stack_size == 2
    hashed = OpExpr(
        Opcode1.OP_RIPEMD160, (OpExpr(Opcode1.OP_SHA256, (StackExpr(0),)),)
    )
    assert OpExpr(Opcode2.OP_EQUAL, (hashed, BytesExpr(bytes(20)))) in path.spending_conditions
    assert OpExpr(Opcode2.OP_CHECKSIG, (StackExpr(1), StackExpr(0))) in path.spending_conditions


def test_multisig_adds_nulldummy_condition_under_all_rules():
    script = asm(f"1 <{PUBKEY_HEX}> 1 OP_CHECKMULTISIG")
    (path,) = ScriptAnalyzer(script).run(V0_ALL)
    pubkey = BytesExpr(bytes.fromhex(PUBKEY_HEX))
    assert OpExpr(Opcode2.OP_CHECKSIG, (StackExpr(0), pubkey)) in path.spending_conditions
    assert (
        OpExpr(Opcode2.OP_EQUAL, (StackExpr(1), BytesExpr(b"")), ScriptError.SIG_NULLDUMMY)
        in path.spending_conditions
    )


def test_multisig_without_policy_rules_has_no_dummy_condition():
    script = asm(f"1 <{PUBKEY_HEX}> 1 OP_CHECKMULTISIG")
    context = ScriptContext(ScriptVersion.SEGWIT_V0, ScriptRules.CONSENSUS_ONLY)
    (path,) = ScriptAnalyzer(script).run(context)
    pubkey = BytesExpr(bytes.fromhex(PUBKEY_HEX))
    assert path.spending_conditions == [
        OpExpr(Opcode2.OP_CHECKSIG, (StackExpr(0), pubkey))
    ]
    assert path.stack_size == 2


def test_checkmultisig_not_available_in_tapscript():
    with pytest.raises(AnalysisError, match="unspendable"):
        analyze_script(asm(f"1 <{PUBKEY_HEX}> 1 OP_CHECKMULTISIG"), TAPSCRIPT)


def test_checksigadd_only_in_tapscript():
    with pytest.raises(AnalysisError, match="unspendable"):
        analyze_script(asm("OP_CHECKSIGADD"), V0_ALL)


def test_absolute_locktime_requirement():
    script = asm("500 OP_CHECKLOCKTIMEVERIFY OP_DROP 1")
    (path,) = ScriptAnalyzer(script).run(V0_ALL)
    assert path.locktime_req.req == 500
    assert path.sequence_req.req is None
    text = analyze_script(script, V0_ALL)
    assert "Locktime requirement: type: height, minValue: at block 500" in text
    assert "Sequence requirement: non-final (not 0xffffffff)" in text


def test_negative_locktime_is_unspendable():
    with pytest.raises(AnalysisError, match="unspendable"):
        analyze_script(asm("-1 OP_CHECKLOCKTIMEVERIFY OP_DROP 1"), V0_ALL)


def test_mixed_locktime_types_are_unspendable():
    script = asm(
        "500 OP_CHECKLOCKTIMEVERIFY OP_DROP 600000000 OP_CHECKLOCKTIMEVERIFY OP_DROP 1"
    )
    assert ScriptAnalyzer(script).run(V0_ALL) == []


def test_empty_altstack_is_unspendable():
    assert ScriptAnalyzer(asm("OP_FROMALTSTACK")).run(LEGACY_CONSENSUS) == []


def test_altstack_round_trip():
    (path,) = ScriptAnalyzer(asm("1 OP_TOALTSTACK OP_FROMALTSTACK")).run(V0_ALL)
    assert path.spending_conditions == []
    assert path.stack_size == 0


def test_pick_with_unknown_index_is_unspendable():
    assert ScriptAnalyzer(asm("OP_PICK")).run(LEGACY_CONSENSUS) == []


def test_depth_of_empty_stack_is_zero():
    (path,) = ScriptAnalyzer(asm("OP_DEPTH 0 OP_EQUAL")).run(V0_ALL)
    assert path.stack_size == 0
    assert path.spending_conditions == []


def test_stack_size_limit():
    script = asm(" ".join(["1"] * 1001))
    assert ScriptAnalyzer(script).run(LEGACY_CONSENSUS) == []


def test_run_is_repeatable():
    analyzer = ScriptAnalyzer(asm("OP_IF 1 OP_ELSE 1 OP_ENDIF"))
    first = analyzer.run(V0_ALL)
    second = analyzer.run(V0_ALL)
    assert len(first) == 2
    assert [r.spending_conditions for r in first] == [
        r.spending_conditions for r in second
    ]
    assert [r.stack_size for r in first] == [1, 1]