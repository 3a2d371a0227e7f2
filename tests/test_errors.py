import pytest

from btcscript_analyzer.errors import ScriptError, ScriptFailure


def test_description_matches_known_text():
    assert ScriptError.OP_RETURN.description() == "OP_RETURN was encountered"
    assert ScriptError.NUM_OVERFLOW.description() == "Script number overflow"
    assert (
        ScriptError.UNKNOWN_DEPTH.description()
        == "Depth argument could not be evaluated"
    )


def test_str_is_description_for_every_member():
    for error in ScriptError:
        description = ScriptError.description(error)
        assert str(error) == description
        assert str(ScriptFailure(error)) == description


def test_descriptions_are_distinct():
    descriptions = [ScriptError.description(error) for error in ScriptError]
    assert len(descriptions) == len(set(descriptions))
    assert "unknown error" in descriptions


def test_failure_carries_error():
    failure = ScriptFailure(ScriptError.CLEANSTACK)
    assert failure.error is ScriptError.CLEANSTACK
    assert str(failure) == "Stack size must be exactly one after execution"


def test_failure_can_be_raised_and_caught():
    with pytest.raises(ScriptFailure) as info:
        raise ScriptFailure(ScriptError.TAPSCRIPT_MINIMALIF)
    assert info.value.error is ScriptError.TAPSCRIPT_MINIMALIF
    assert str(info.value) == ScriptError.TAPSCRIPT_MINIMALIF.description()