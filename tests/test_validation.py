import pytest

from importexport.exceptions import ProfileValidationError
from importexport.profiles.validation import collect_violations, validate

SECTION = "profile-section"


@pytest.fixture
def rules():
    return {"field1": {"value1", "value2", "value3"}}


def test_enforce_values(rules):
    validate(SECTION, rules, {"field1": "value1"})


def test_enforce_values_missing_required(rules):
    with pytest.raises(ProfileValidationError) as exc_info:
        validate(SECTION, rules, {"field2": "value1"})

    message = str(exc_info.value)
    assert "field1" in message
    assert "required" in message
    assert "field2" not in message


def test_enforce_values_invalid_value(rules):
    with pytest.raises(ProfileValidationError) as exc_info:
        validate(SECTION, rules, {"field1": "invalidValue"})

    message = str(exc_info.value)
    assert message == (
        '"invalidValue" is not valid for "field1" in profile-section. '
        'Valid values are "value1,value2,value3".'
    )


def test_multiple_validation_errors_in_one_exception_message(rules):
    rules["field2"] = None
    fields = {"field1": "invalidValue", "field3": "any value"}

    with pytest.raises(ProfileValidationError) as exc_info:
        validate(SECTION, rules, fields)

    error = exc_info.value
    message = str(error)
    assert "field1" in message
    assert "field2" in message
    assert "field3" not in message
    assert len(message.splitlines()) == 2
    assert [v.field for v in error.violations] == ["field1", "field2"]
    assert [v.kind for v in error.violations] == ["invalid_value", "missing"]
    assert error.section == SECTION


@pytest.mark.parametrize("allowed", [None, set(), frozenset()])
def test_unrestricted_rule_accepts_any_value(allowed):
    assert collect_violations(SECTION, {"field1": allowed}, {"field1": "anything"}) == []


def test_field_names_are_case_sensitive(rules):
    violations = collect_violations(SECTION, rules, {"FIELD1": "value1"})
    assert len(violations) == 1
    assert violations[0].kind == "missing"
    assert violations[0].describe() == '"field1" is a required field in profile-section.'


def test_empty_rules_accept_anything():
    validate(SECTION, {}, {"field1": "value1"})
