# -*- coding: utf-8 -*-
"""
Schema-driven record validation and type coercion.

Validates raw tabular records against a dictionary of schema definitions,
returning typed records plus every validation error found.
"""

from .dictionary import parse_dictionary
from .entities import (
    BatchProcessingResult, ErrorType, SchemaProcessingResult, SchemasDictionary,
    SchemaValidationError, ValueType,
)
from .errors import DictionaryFormatError, LecternError, PredicateRegistryError, SchemaNotFoundError
from .predicates import PredicateEvaluator
from .processing import get_schema_field_names_with_priority, process, process_records, process_schemas

__all__ = [
    "parse_dictionary",
    "process", "process_records", "process_schemas", "get_schema_field_names_with_priority",
    "PredicateEvaluator",
    "BatchProcessingResult", "ErrorType", "SchemaProcessingResult", "SchemasDictionary",
    "SchemaValidationError", "ValueType",
    "DictionaryFormatError", "LecternError", "PredicateRegistryError", "SchemaNotFoundError",
]
