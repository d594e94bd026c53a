"""
Structural checks on the raw (defaulted, not yet coerced) record.

Checks run in order; each only sees fields no earlier check has flagged,
so one bad field produces one error instead of a cascade.
"""
from __future__ import annotations
from typing import Any, Callable, List, Mapping, Sequence

from ..entities import ErrorType, FieldDefinition, SchemaDefinition, SchemaValidationError
from .coerce import is_valid_raw_value
from .common import as_list, build_error, is_all_blank, is_array_value, is_blank, unflagged_fields

RawCheck = Callable[[Mapping[str, Any], int, Sequence[FieldDefinition]], List[SchemaValidationError]]

def check_field_names(record: Mapping[str, Any], index: int, fields: Sequence[FieldDefinition]) -> List[SchemaValidationError]:
    """Every record key must be a field of the schema"""
    expected = {f.name for f in fields}
    return [
        build_error(ErrorType.UNRECOGNIZED_FIELD, key, index)
        for key in record
        if key not in expected
    ]

def check_non_array_fields(record: Mapping[str, Any], index: int, fields: Sequence[FieldDefinition]) -> List[SchemaValidationError]:
    """A non-array field must not hold an array"""
    errs: List[SchemaValidationError] = []
    for f in fields:
        value = record.get(f.name)
        if not f.is_array and is_array_value(value):
            errs.append(build_error(ErrorType.INVALID_FIELD_VALUE_TYPE, f.name, index, {"value": list(value)}))
    return errs

def check_required_fields(record: Mapping[str, Any], index: int, fields: Sequence[FieldDefinition]) -> List[SchemaValidationError]:
    """Required fields must have at least one non-blank value"""
    return [
        build_error(ErrorType.MISSING_REQUIRED_FIELD, f.name, index)
        for f in fields
        if f.restrictions.required and is_all_blank(record.get(f.name))
    ]

def check_value_types(record: Mapping[str, Any], index: int, fields: Sequence[FieldDefinition]) -> List[SchemaValidationError]:
    """Non-blank values must parse as the field's declared type"""
    errs: List[SchemaValidationError] = []
    for f in fields:
        value = record.get(f.name)
        if is_all_blank(value):
            continue
        invalid = [v for v in as_list(value) if not is_blank(v) and not is_valid_raw_value(f.value_type, v)]
        if invalid:
            errs.append(build_error(ErrorType.INVALID_FIELD_VALUE_TYPE, f.name, index, {"value": invalid}))
    return errs

RAW_CHECKS: List[RawCheck] = [
    check_field_names,
    check_non_array_fields,
    check_required_fields,
    check_value_types,
]

def run_raw_checks(schema: SchemaDefinition, record: Mapping[str, Any], index: int) -> List[SchemaValidationError]:
    errs: List[SchemaValidationError] = []
    for check in RAW_CHECKS:
        errs.extend(check(record, index, unflagged_fields(errs, schema.fields)))
    return errs
