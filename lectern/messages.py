"""Human readable messages for validation errors, keyed by error type."""
from __future__ import annotations
from typing import Any, Callable, Dict, Mapping, Optional

from .entities import ErrorType

INVALID_VALUE_ERROR_MESSAGE = "The value is not permissible for this field."

def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    return str(value)

def _format_key(values: Mapping[str, Any]) -> str:
    return ", ".join(f"{k}: {format_value(v)}" for k, v in values.items())

def _regex_message(field_name: str, info: Mapping[str, Any]) -> str:
    msg = f'The value is not a permissible for this field, it must meet the regular expression: "{info.get("regex")}".'
    examples = info.get("examples")
    if examples:
        msg += f" Examples: {examples}"
    return msg

def _range_message(field_name: str, info: Mapping[str, Any]) -> str:
    lower = ""
    if info.get("min") is not None:
        lower = f">= {format_value(info['min'])}"
    elif info.get("exclusiveMin") is not None:
        lower = f"> {format_value(info['exclusiveMin'])}"
    upper = ""
    if info.get("max") is not None:
        upper = f"<= {format_value(info['max'])}"
    elif info.get("exclusiveMax") is not None:
        upper = f"< {format_value(info['exclusiveMax'])}"
    joiner = " and " if lower and upper else ""
    return f"Value is out of permissible range, value must be {lower}{joiner}{upper}."

def _foreign_key_message(field_name: str, info: Mapping[str, Any]) -> str:
    return (
        f"Record violates foreign key restriction defined for field(s) {field_name}. "
        f"Key {_format_key(info.get('value') or {})} is not present in schema {info.get('foreignSchema')}."
    )

_MESSAGES: Dict[ErrorType, Callable[[str, Mapping[str, Any]], str]] = {
    ErrorType.INVALID_FIELD_VALUE_TYPE: lambda name, info: INVALID_VALUE_ERROR_MESSAGE,
    ErrorType.INVALID_ENUM_VALUE: lambda name, info: INVALID_VALUE_ERROR_MESSAGE,
    ErrorType.MISSING_REQUIRED_FIELD: lambda name, info: f"{name} is a required field.",
    ErrorType.INVALID_BY_REGEX: _regex_message,
    ErrorType.INVALID_BY_RANGE: _range_message,
    ErrorType.INVALID_BY_SCRIPT: lambda name, info: str(info.get("message", "")),
    ErrorType.INVALID_BY_UNIQUE: lambda name, info: f"Value for {name} must be unique.",
    ErrorType.INVALID_BY_UNIQUE_KEY: lambda name, info: f"Key {_format_key(info.get('value') or {})} must be unique.",
    ErrorType.INVALID_BY_FOREIGN_KEY: _foreign_key_message,
}

def schema_error_message(error_type: ErrorType, field_name: str = "", info: Optional[Mapping[str, Any]] = None) -> str:
    """
    Deterministic message for an error kind and its info payload.
    Kinds without a template (UNRECOGNIZED_FIELD) use the kind name itself.
    """
    template = _MESSAGES.get(error_type)
    if template is None:
        return error_type.value
    return template(field_name, info or {})
