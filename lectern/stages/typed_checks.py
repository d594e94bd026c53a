"""
Semantic checks on coerced values: regex, range, enum and script predicates.

Each check dispatches on the TypedValue kind; fields that failed the raw
type check were left RAW and are excluded before these run.
"""
from __future__ import annotations
import re
from functools import partial
from typing import Any, Callable, Collection, Dict, List, Mapping, Sequence

from ..entities import ErrorType, FieldDefinition, SchemaDefinition, SchemaValidationError, TypedValue, ValueKind
from ..predicates import PredicateEvaluator
from .common import build_error, code_text, is_blank, unflagged_fields

_PATTERNS: Dict[str, re.Pattern] = {}

def compiled_regex(regex: str) -> re.Pattern:
    """Compile a field regex once per process."""
    pattern = _PATTERNS.get(regex)
    if pattern is None:
        pattern = _PATTERNS[regex] = re.compile(regex)
    return pattern

TypedCheck = Callable[[Mapping[str, TypedValue], int, Sequence[FieldDefinition]], List[SchemaValidationError]]

def check_regex(typed: Mapping[str, TypedValue], index: int, fields: Sequence[FieldDefinition]) -> List[SchemaValidationError]:
    errs: List[SchemaValidationError] = []
    for f in fields:
        regex = f.restrictions.regex
        tv = typed.get(f.name)
        if not regex or tv is None or tv.kind != ValueKind.STRING:
            continue
        pattern = compiled_regex(regex)
        invalid = [v for v in tv.elements() if not is_blank(v) and not pattern.search(v)]
        if invalid:
            info = {"value": invalid, "regex": regex}
            if f.meta.examples:
                info["examples"] = f.meta.examples
            errs.append(build_error(ErrorType.INVALID_BY_REGEX, f.name, index, info))
    return errs

def check_range(typed: Mapping[str, TypedValue], index: int, fields: Sequence[FieldDefinition]) -> List[SchemaValidationError]:
    errs: List[SchemaValidationError] = []
    for f in fields:
        rng = f.restrictions.range
        tv = typed.get(f.name)
        if rng is None or tv is None or not tv.is_numeric:
            continue
        invalid = [v for v in tv.elements() if v is not None and rng.is_out_of_range(v)]
        if invalid:
            errs.append(build_error(ErrorType.INVALID_BY_RANGE, f.name, index, {"value": invalid, **rng.as_info()}))
    return errs

def _in_code_list(code_list: Collection[Any], value: Any) -> bool:
    # compared as text: "1" matches 1, True matches only "true"
    text = code_text(value)
    return any(text == code_text(c) for c in code_list)

def check_enum(typed: Mapping[str, TypedValue], index: int, fields: Sequence[FieldDefinition]) -> List[SchemaValidationError]:
    errs: List[SchemaValidationError] = []
    for f in fields:
        code_list = f.restrictions.code_list
        tv = typed.get(f.name)
        if not code_list or tv is None or tv.kind in (ValueKind.EMPTY, ValueKind.RAW):
            continue
        invalid = [v for v in tv.elements() if not is_blank(v) and not _in_code_list(code_list, v)]
        if invalid:
            errs.append(build_error(ErrorType.INVALID_ENUM_VALUE, f.name, index, {"value": invalid}))
    return errs

def check_scripts(
    typed: Mapping[str, TypedValue],
    index: int,
    fields: Sequence[FieldDefinition],
    evaluator: PredicateEvaluator,
    row: Mapping[str, Any],
) -> List[SchemaValidationError]:
    errs: List[SchemaValidationError] = []
    for f in fields:
        if not f.restrictions.scripts:
            continue
        value = row.get(f.name)
        outcome = evaluator.run_scripts(f.restrictions.scripts, row, value, f.name)
        if not outcome.valid:
            info = {"message": outcome.message, "value": value}
            errs.append(build_error(ErrorType.INVALID_BY_SCRIPT, f.name, index, info))
    return errs

def run_typed_checks(
    schema: SchemaDefinition,
    typed: Mapping[str, TypedValue],
    row: Mapping[str, Any],
    index: int,
    evaluator: PredicateEvaluator,
) -> List[SchemaValidationError]:
    """`row` is the read-only plain view of `typed` handed to predicates."""
    checks: List[TypedCheck] = [
        check_regex,
        check_range,
        check_enum,
        partial(check_scripts, evaluator=evaluator, row=row),
    ]
    # left uncoerced by the raw type check
    fields = [f for f in schema.fields if not (f.name in typed and typed[f.name].kind == ValueKind.RAW)]
    errs: List[SchemaValidationError] = []
    for check in checks:
        errs.extend(check(typed, index, unflagged_fields(errs, fields)))
    return errs
