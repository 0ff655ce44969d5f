import pytest

from quiz_flow.logic import Condition, InvalidConditionError, evaluate


def cond(operator, value, field="q1"):
    return Condition(id="c1", field=field, operator=operator, value=value)


@pytest.mark.parametrize(
    "operator,value",
    [
        ("equals", "yes"),
        ("not_equals", "yes"),
        ("contains", "yes"),
        ("greater_than", 1),
        ("less_than", 1),
        ("between", [1, 5]),
    ],
)
def test_missing_field_is_false_for_every_operator(operator, value):
    assert evaluate(cond(operator, value, field="missing"), {}) is False
    assert evaluate(cond(operator, value, field="missing"), {"missing": None}) is False


def test_equals_is_strict():
    assert evaluate(cond("equals", "yes"), {"q1": "yes"}) is True
    assert evaluate(cond("equals", "1"), {"q1": 1}) is False
    assert evaluate(cond("equals", 1), {"q1": True}) is False
    assert evaluate(cond("equals", 1), {"q1": 1.0}) is True


def test_not_equals():
    assert evaluate(cond("not_equals", "yes"), {"q1": "no"}) is True
    assert evaluate(cond("not_equals", "yes"), {"q1": "yes"}) is False
    # no coercion: a number never equals its string form
    assert evaluate(cond("not_equals", "5"), {"q1": 5}) is True


def test_numeric_comparisons_coerce_both_sides():
    assert evaluate(cond("greater_than", 80), {"q1": 90}) is True
    assert evaluate(cond("greater_than", "80"), {"q1": "90"}) is True
    assert evaluate(cond("less_than", 80), {"q1": "79.5"}) is True
    assert evaluate(cond("less_than", 80), {"q1": 80}) is False


@pytest.mark.parametrize("raw", ["abc", "", [], {"a": 1}, True])
def test_non_numeric_input_never_passes(raw):
    assert evaluate(cond("greater_than", 0), {"q1": raw}) is False
    assert evaluate(cond("less_than", 0), {"q1": raw}) is False


def test_contains_list_membership():
    inputs = {"interests": ["technology", "innovation"]}
    assert evaluate(cond("contains", "technology", field="interests"), inputs) is True
    assert evaluate(cond("contains", "tech", field="interests"), inputs) is False


def test_contains_substring_on_scalars():
    assert evaluate(cond("contains", "tech"), {"q1": "fintech startup"}) is True
    assert evaluate(cond("contains", 23), {"q1": 1234}) is True
    assert evaluate(cond("contains", "zz"), {"q1": "abc"}) is False


def test_between_is_inclusive():
    c = cond("between", [18, 25])
    assert evaluate(c, {"q1": 18}) is True
    assert evaluate(c, {"q1": "25"}) is True
    assert evaluate(c, {"q1": 26}) is False
    assert evaluate(c, {"q1": "n/a"}) is False


def test_between_rejects_malformed_pairs_at_construction():
    with pytest.raises(InvalidConditionError):
        cond("between", [5, 1])
    with pytest.raises(InvalidConditionError):
        cond("between", 5)
    with pytest.raises(InvalidConditionError):
        cond("between", ["a", "b"])


def test_numeric_operator_rejects_non_numeric_value():
    with pytest.raises(InvalidConditionError):
        cond("greater_than", "lots")


def test_unknown_operator_fails_closed():
    c = cond("regex", ".*")
    assert evaluate(c, {"q1": "anything"}) is False


def test_evaluate_does_not_mutate_inputs():
    inputs = {"q1": ["a", "b"]}
    evaluate(cond("contains", "a"), inputs)
    assert inputs == {"q1": ["a", "b"]}
