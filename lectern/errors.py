"""
Exceptions raised for configuration mistakes.

Bad *data* never raises: it is collected into SchemaValidationError values.
These exceptions are for setup problems the caller has to fix.
"""
from __future__ import annotations
from typing import List, Optional


class LecternError(Exception):
    """Base exception for all lectern configuration errors."""


class SchemaNotFoundError(LecternError):
    """The caller referenced a schema name the dictionary does not define."""

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        super().__init__(f"no schema found for : {schema_name}")


class DictionaryFormatError(LecternError):
    """The dictionary value does not have the expected shape."""

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        self.problems = problems or []
        super().__init__(message)


class PredicateRegistryError(LecternError):
    """A configured predicate module could not be loaded."""
