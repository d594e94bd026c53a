"""
Type coercion: raw strings to tagged typed values.

Fields already flagged with INVALID_FIELD_VALUE_TYPE are carried through
uncoerced (RAW), so later checks can tell them apart.
"""
from __future__ import annotations
import math, re
from typing import Any, Dict, Iterable, Optional, Set, Union

from ..entities import (
    ErrorType, FieldDefinition, SchemaDefinition, SchemaValidationError, TypedValue, ValueKind, ValueType,
)
from .common import code_text, is_all_blank, is_array_value, is_blank

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

def parse_number(text: str) -> Optional[float]:
    s = text.strip()
    if not _NUMBER_RE.match(s):
        return None
    value = float(s)
    return value if math.isfinite(value) else None

def parse_integer(text: str) -> Optional[int]:
    s = text.strip()
    if _INTEGER_RE.match(s):
        return int(s)
    value = parse_number(s)
    if value is None or not value.is_integer():
        return None
    return int(value)

def parse_boolean(text: str) -> Optional[bool]:
    s = text.strip().lower()
    if s == "true":
        return True
    if s == "false":
        return False
    return None

def is_valid_raw_value(value_type: ValueType, text: str) -> bool:
    if value_type == ValueType.STRING:
        return True
    if value_type == ValueType.INTEGER:
        return parse_integer(text) is not None
    if value_type == ValueType.NUMBER:
        return parse_number(text) is not None
    return parse_boolean(text) is not None

def _canonical_code(field: FieldDefinition, text: str) -> str:
    """The codeList entry matching `text` case-insensitively, else `text` unchanged."""
    lowered = text.lower()
    for code in field.restrictions.code_list or ():
        canonical = code_text(code)
        if canonical.lower() == lowered:
            return canonical
    return text

def coerce_scalar(field: FieldDefinition, text: Any) -> Union[str, int, float, bool, None]:
    if is_blank(text):
        return None
    if field.value_type == ValueType.STRING:
        return _canonical_code(field, text) if field.restrictions.code_list else text
    if field.value_type == ValueType.INTEGER:
        return parse_integer(text)
    if field.value_type == ValueType.NUMBER:
        return parse_number(text)
    return parse_boolean(text)

def coerce_field(field: FieldDefinition, raw: Any) -> TypedValue:
    if is_all_blank(raw):
        return TypedValue(ValueKind.EMPTY, None, field.is_array)
    kind = ValueKind.of(field.value_type)
    if field.is_array:
        elements = raw if is_array_value(raw) else [raw]
        return TypedValue(kind, tuple(coerce_scalar(field, v) for v in elements), True)
    return TypedValue(kind, coerce_scalar(field, raw), False)

def raw_value(value: Any) -> TypedValue:
    if is_array_value(value):
        return TypedValue(ValueKind.RAW, tuple(value), True)
    return TypedValue(ValueKind.RAW, value, False)

def type_error_fields(errors: Iterable[SchemaValidationError]) -> Set[str]:
    return {e.field_name for e in errors if e.error_type == ErrorType.INVALID_FIELD_VALUE_TYPE}

def coerce_record(schema: SchemaDefinition, staged: Dict[str, Any], errors: Iterable[SchemaValidationError]) -> Dict[str, TypedValue]:
    """
    Coerce every present, unflagged schema field. Flagged and unrecognized
    keys keep their raw value; missing keys stay missing.
    """
    skip = type_error_fields(errors)
    typed: Dict[str, TypedValue] = {}
    for key, value in staged.items():
        f = schema.get_field(key)
        if f is None or key in skip:
            typed[key] = raw_value(value)
        else:
            typed[key] = coerce_field(f, value)
    return typed
