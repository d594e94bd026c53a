import pytest

from lectern.entities import ErrorType
from lectern.messages import INVALID_VALUE_ERROR_MESSAGE, format_value, schema_error_message

@pytest.mark.parametrize("error_type,field_name,info,expected", [
    (ErrorType.INVALID_FIELD_VALUE_TYPE, "x", {}, INVALID_VALUE_ERROR_MESSAGE),
    (ErrorType.INVALID_ENUM_VALUE, "x", {"value": ["a"]}, INVALID_VALUE_ERROR_MESSAGE),
    (ErrorType.MISSING_REQUIRED_FIELD, "donor_id", {}, "donor_id is a required field."),
    (ErrorType.UNRECOGNIZED_FIELD, "hack", {}, "UNRECOGNIZED_FIELD"),
    (ErrorType.INVALID_BY_SCRIPT, "x", {"message": "custom"}, "custom"),
    (ErrorType.INVALID_BY_UNIQUE, "id", {"value": "1"}, "Value for id must be unique."),
    (
        ErrorType.INVALID_BY_UNIQUE_KEY, "a, b", {"value": {"a": "1", "b": 2.0}},
        "Key a: 1, b: 2 must be unique.",
    ),
    (
        ErrorType.INVALID_BY_FOREIGN_KEY, "a, b", {"value": {"a": "x", "b": ""}, "foreignSchema": "other"},
        "Record violates foreign key restriction defined for field(s) a, b. Key a: x, b:  is not present in schema other.",
    ),
])
def test_templates(error_type, field_name, info, expected):
    assert schema_error_message(error_type, field_name, info) == expected

def test_regex_with_and_without_examples():
    base = 'The value is not a permissible for this field, it must meet the regular expression: "^a$".'
    assert schema_error_message(ErrorType.INVALID_BY_REGEX, "x", {"regex": "^a$"}) == base
    assert schema_error_message(ErrorType.INVALID_BY_REGEX, "x", {"regex": "^a$", "examples": "a"}) == base + " Examples: a"

@pytest.mark.parametrize("info,bounds", [
    ({"min": 0, "exclusiveMax": 999}, ">= 0 and < 999"),
    ({"exclusiveMin": 0, "max": 1}, "> 0 and <= 1"),
    ({"min": 1.5}, ">= 1.5"),
    ({"exclusiveMax": 10}, "< 10"),
])
def test_range(info, bounds):
    expected = f"Value is out of permissible range, value must be {bounds}."
    assert schema_error_message(ErrorType.INVALID_BY_RANGE, "x", info) == expected

@pytest.mark.parametrize("value,text", [
    (None, ""), (True, "true"), (False, "false"), (3.0, "3"), (3.25, "3.25"), (["a", 1], "[a, 1]"),
])
def test_format_value(value, text):
    assert format_value(value) == text
