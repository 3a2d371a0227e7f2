import pytest

from btcscript_analyzer.condition_stack import ConditionStack


def test_new_stack_is_empty_and_true():
    cs = ConditionStack()
    assert cs.empty()
    assert cs.all_true()


def test_push_true_keeps_all_true():
    cs = ConditionStack()
    cs.push_back(True)
    assert not cs.empty()
    assert cs.all_true()


def test_push_false_then_pop():
    cs = ConditionStack()
    cs.push_back(True)
    cs.push_back(False)
    assert not cs.all_true()
    cs.pop_back()
    assert cs.all_true()
    cs.pop_back()
    assert cs.empty()


def test_nested_false_persists_until_first_false_popped():
    cs = ConditionStack()
    cs.push_back(False)
    cs.push_back(True)
    cs.push_back(False)
    cs.pop_back()
    assert not cs.all_true()
    cs.pop_back()
    assert not cs.all_true()
    cs.pop_back()
    assert cs.all_true()
    assert cs.empty()


def test_toggle_top():
    cs = ConditionStack()
    cs.push_back(True)
    cs.toggle_top()
    assert not cs.all_true()
    cs.toggle_top()
    assert cs.all_true()


def test_toggle_top_below_false_is_unobservable():
    cs = ConditionStack()
    cs.push_back(False)
    cs.push_back(True)
    cs.toggle_top()
    assert not cs.all_true()
    cs.toggle_top()
    assert not cs.all_true()
    cs.pop_back()
    cs.toggle_top()
    assert cs.all_true()


def test_pop_empty_raises():
    with pytest.raises(IndexError):
        ConditionStack().pop_back()


def test_toggle_empty_raises():
    with pytest.raises(IndexError):
        ConditionStack().toggle_top()