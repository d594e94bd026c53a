from __future__ import annotations
from typing import List, Mapping, Sequence

from ..entities import ErrorType, ForeignKeyDefinition, SchemaDefinition, SchemaValidationError, TypedDataRecord
from ..logging import log
from ..records import KeyRow, find_missing_foreign_keys, select_fields_from_dataset
from .common import build_error

def check_foreign_key(
    schema: SchemaDefinition,
    fk: ForeignKeyDefinition,
    datasets: Mapping[str, Sequence[TypedDataRecord]],
) -> List[SchemaValidationError]:
    local_fields = fk.local_fields
    foreign_fields = fk.foreign_fields
    local_rows = select_fields_from_dataset(datasets.get(schema.name) or [], local_fields)
    foreign_rows = select_fields_from_dataset(datasets.get(fk.schema) or [], foreign_fields)
    # an all-empty foreign key row makes empty local references valid
    empty_row: KeyRow = (-1, {f: "" for f in foreign_fields})
    foreign_rows.append(empty_row)

    mappings = [(m.local, m.foreign) for m in fk.mappings]
    errs: List[SchemaValidationError] = []
    for index, values in find_missing_foreign_keys(local_rows, foreign_rows, mappings):
        info = {"value": values, "foreignSchema": fk.schema}
        errs.append(build_error(ErrorType.INVALID_BY_FOREIGN_KEY, ", ".join(local_fields), index, info))
    return errs

def run_foreign_key_checks(
    schema: SchemaDefinition,
    datasets: Mapping[str, Sequence[TypedDataRecord]],
) -> List[SchemaValidationError]:
    errs: List[SchemaValidationError] = []
    for fk in schema.foreign_keys():
        if fk.schema not in datasets:
            log().debug(f"{schema.name}: no '{fk.schema}' dataset in batch, treating it as empty")
        errs.extend(check_foreign_key(schema, fk, datasets))
    return errs
