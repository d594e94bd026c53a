"""
Entry points: validate and coerce one record, one dataset, or a batch of
named datasets against a dictionary.

Per record: raw -> defaulted -> structurally checked -> coerced ->
semantically checked. Every stage always runs; bad data is reported, never
raised. Only configuration mistakes (unknown schema, None inputs) raise.
"""
from __future__ import annotations
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .config import EngineConfig
from .entities import (
    BatchProcessingResult, DataRecord, FieldNamesByPriority, SchemaData, SchemaDefinition,
    SchemaProcessingResult, SchemasDictionary, SchemaValidationError, TypedDataRecord, TypedValue,
)
from .logging import log
from .messages import format_value
from .predicates import PredicateEvaluator
from .stages.coerce import coerce_record
from .stages.dataset_checks import run_dataset_checks
from .stages.defaults import populate_defaults
from .stages.foreign_keys import run_foreign_key_checks
from .stages.raw_checks import run_raw_checks
from .stages.typed_checks import run_typed_checks


def _check_not_none(name: str, value: Any) -> None:
    if value is None:
        raise ValueError(f"{name} must not be None")


def _as_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return format_value(value)


def _stage(record: DataRecord) -> Dict[str, Any]:
    """Private mutable copy of a raw record; the caller's record is never touched."""
    staged: Dict[str, Any] = {}
    for key, value in record.items():
        if isinstance(value, (list, tuple)):
            staged[key] = [_as_text(v) for v in value]
        else:
            staged[key] = _as_text(value)
    return staged


def _freeze(typed: Mapping[str, TypedValue]) -> TypedDataRecord:
    return MappingProxyType({key: tv.value for key, tv in typed.items()})


def _build_evaluator(evaluator: Optional[PredicateEvaluator], config: Optional[EngineConfig]) -> PredicateEvaluator:
    if evaluator is not None:
        return evaluator
    if config is not None and config.predicate_modules:
        return PredicateEvaluator.from_modules(config.predicate_modules)
    return PredicateEvaluator()


def _process_record(
    schema: SchemaDefinition,
    record: DataRecord,
    index: int,
    evaluator: PredicateEvaluator,
) -> SchemaProcessingResult:
    staged = _stage(record)
    populate_defaults(schema, staged, index)
    errors: List[SchemaValidationError] = run_raw_checks(schema, staged, index)
    if errors:
        log().debug(f"{len(errors)} structural error(s) for record #{index}")
    typed = coerce_record(schema, staged, errors)
    row = _freeze(typed)
    errors.extend(run_typed_checks(schema, typed, row, index, evaluator))
    log().debug(f"done processing record #{index} of {schema.name}, validationErrors: {len(errors)}")
    return SchemaProcessingResult(validation_errors=errors, processed_record=row)


def process(
    dictionary: SchemasDictionary,
    schema_name: str,
    record: DataRecord,
    index: int,
    *,
    evaluator: Optional[PredicateEvaluator] = None,
) -> SchemaProcessingResult:
    """Default, validate and coerce a single record at position `index`."""
    _check_not_none("dictionary", dictionary)
    _check_not_none("schema_name", schema_name)
    _check_not_none("record", record)
    schema = dictionary.get_schema(schema_name)
    return _process_record(schema, record, index, _build_evaluator(evaluator, None))


def process_records(
    dictionary: SchemasDictionary,
    schema_name: str,
    records: SchemaData,
    *,
    evaluator: Optional[PredicateEvaluator] = None,
    config: Optional[EngineConfig] = None,
) -> BatchProcessingResult:
    """Process every record of one dataset, then run the dataset-level checks."""
    _check_not_none("dictionary", dictionary)
    _check_not_none("schema_name", schema_name)
    _check_not_none("records", records)
    config = config or EngineConfig()
    schema = dictionary.get_schema(schema_name)
    evaluator = _build_evaluator(evaluator, config)

    validation_errors: List[SchemaValidationError] = []
    processed: List[TypedDataRecord] = []
    for i, record in enumerate(records):
        result = _process_record(schema, record, i, evaluator)
        validation_errors.extend(result.validation_errors)
        processed.append(result.processed_record)

    validation_errors.extend(run_dataset_checks(schema, processed, config.duplicate_policy))
    log().debug(
        f"done processing all rows of {schema_name}, validationErrors: {len(validation_errors)}, records: {len(processed)}"
    )
    return BatchProcessingResult(validation_errors=validation_errors, processed_records=processed)


def process_schemas(
    dictionary: SchemasDictionary,
    datasets: Mapping[str, SchemaData],
    *,
    evaluator: Optional[PredicateEvaluator] = None,
    config: Optional[EngineConfig] = None,
) -> Dict[str, BatchProcessingResult]:
    """
    Process several named datasets together. Record and dataset checks run
    per schema; foreign keys are then checked across the whole batch.
    """
    _check_not_none("dictionary", dictionary)
    _check_not_none("datasets", datasets)
    config = config or EngineConfig()
    # unknown names fail before any work is done
    schemas = {name: dictionary.get_schema(name) for name in datasets}
    evaluator = _build_evaluator(evaluator, config)

    record_results = {
        name: process_records(dictionary, name, records, evaluator=evaluator, config=config)
        for name, records in datasets.items()
    }
    typed_datasets = {name: r.processed_records for name, r in record_results.items()}

    results: Dict[str, BatchProcessingResult] = {}
    for name, result in record_results.items():
        fk_errors = run_foreign_key_checks(schemas[name], typed_datasets)
        results[name] = BatchProcessingResult(
            validation_errors=list(result.validation_errors) + fk_errors,
            processed_records=result.processed_records,
        )
    log().info(
        f"processed {len(datasets)} dataset(s): "
        + ", ".join(f"{n}={len(r.validation_errors)} error(s)" for n, r in results.items())
    )
    return results


def get_schema_field_names_with_priority(dictionary: SchemasDictionary, schema_name: str) -> FieldNamesByPriority:
    """Required and optional field names of a schema, in declared order."""
    schema = dictionary.get_schema(schema_name)
    names = FieldNamesByPriority()
    for f in schema.fields:
        (names.required if f.restrictions.required else names.optional).append(f.name)
    return names
