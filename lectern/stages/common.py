from __future__ import annotations
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..entities import ErrorType, FieldDefinition, SchemaValidationError
from ..messages import format_value, schema_error_message

def build_error(error_type: ErrorType, field_name: str, index: int, info: Optional[Mapping[str, Any]] = None) -> SchemaValidationError:
    info = dict(info or {})
    return SchemaValidationError(
        error_type=error_type,
        field_name=field_name,
        index=index,
        info=info,
        message=schema_error_message(error_type, field_name, info),
    )

def is_array_value(value: Any) -> bool:
    return isinstance(value, (list, tuple))

def as_list(value: Any) -> List[Any]:
    """Normalize a scalar or array value to a list of elements."""
    if is_array_value(value):
        return list(value)
    return [value]

def is_blank(value: Any) -> bool:
    """None, or a string that is empty after stripping whitespace."""
    return value is None or (isinstance(value, str) and value.strip() == "")

def is_all_blank(value: Any) -> bool:
    """True for blank scalars and for arrays with no non-blank element."""
    return all(is_blank(v) for v in as_list(value))

def code_text(value: Any) -> str:
    """Text form used to match values against codeList entries: 1.0 is '1', True is 'true'."""
    return value if isinstance(value, str) else format_value(value)

def unflagged_fields(errors: Iterable[SchemaValidationError], fields: Sequence[FieldDefinition]) -> List[FieldDefinition]:
    """Fields that no error in `errors` has been reported against yet."""
    flagged = {e.field_name for e in errors}
    return [f for f in fields if f.name not in flagged]
