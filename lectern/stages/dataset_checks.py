from __future__ import annotations
from typing import Callable, List, Sequence

from ..entities import ErrorType, SchemaDefinition, SchemaValidationError, TypedDataRecord
from ..records import find_duplicate_keys, select_fields_from_dataset
from .common import build_error

DatasetCheck = Callable[[Sequence[TypedDataRecord], SchemaDefinition, str], List[SchemaValidationError]]

def check_unique(dataset: Sequence[TypedDataRecord], schema: SchemaDefinition, policy: str) -> List[SchemaValidationError]:
    """Fields marked unique must not repeat a value across the dataset"""
    errs: List[SchemaValidationError] = []
    for f in schema.fields:
        if not f.restrictions.unique:
            continue
        rows = select_fields_from_dataset(dataset, [f.name])
        for index, values in find_duplicate_keys(rows, [f.name], policy):
            errs.append(build_error(ErrorType.INVALID_BY_UNIQUE, f.name, index, {"value": values[f.name]}))
    return errs

def check_unique_key(dataset: Sequence[TypedDataRecord], schema: SchemaDefinition, policy: str) -> List[SchemaValidationError]:
    """The schema's composite uniqueKey must not repeat across the dataset"""
    key_fields = list(schema.restrictions.unique_key)
    if not key_fields:
        return []
    errs: List[SchemaValidationError] = []
    rows = select_fields_from_dataset(dataset, key_fields)
    for index, values in find_duplicate_keys(rows, key_fields, policy):
        info = {"value": values, "uniqueKeyFields": key_fields}
        errs.append(build_error(ErrorType.INVALID_BY_UNIQUE_KEY, ", ".join(key_fields), index, info))
    return errs

DATASET_CHECKS: List[DatasetCheck] = [
    check_unique,
    check_unique_key,
]

def run_dataset_checks(schema: SchemaDefinition, dataset: Sequence[TypedDataRecord], policy: str = "first-exempt") -> List[SchemaValidationError]:
    errs: List[SchemaValidationError] = []
    for check in DATASET_CHECKS:
        errs.extend(check(dataset, schema, policy))
    return errs
