"""
Value types shared by the whole engine: dictionary definitions, typed values,
validation errors and processing results.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import SchemaNotFoundError

DataRecord = Mapping[str, Union[str, Sequence[str]]]
TypedDataRecord = Mapping[str, Any]
SchemaData = Sequence[DataRecord]


class ValueType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


class ErrorType(str, Enum):
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_FIELD_VALUE_TYPE = "INVALID_FIELD_VALUE_TYPE"
    UNRECOGNIZED_FIELD = "UNRECOGNIZED_FIELD"
    INVALID_BY_REGEX = "INVALID_BY_REGEX"
    INVALID_BY_RANGE = "INVALID_BY_RANGE"
    INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"
    INVALID_BY_SCRIPT = "INVALID_BY_SCRIPT"
    INVALID_BY_UNIQUE = "INVALID_BY_UNIQUE"
    INVALID_BY_UNIQUE_KEY = "INVALID_BY_UNIQUE_KEY"
    INVALID_BY_FOREIGN_KEY = "INVALID_BY_FOREIGN_KEY"


# ---- restrictions -------------------------------------------------------------

@dataclass(frozen=True)
class RangeRestriction:
    min: Optional[float] = None
    max: Optional[float] = None
    exclusive_min: Optional[float] = None
    exclusive_max: Optional[float] = None

    def is_out_of_range(self, value: float) -> bool:
        return (
            (self.min is not None and value < self.min)
            or (self.exclusive_min is not None and value <= self.exclusive_min)
            or (self.max is not None and value > self.max)
            or (self.exclusive_max is not None and value >= self.exclusive_max)
        )

    def as_info(self) -> Dict[str, float]:
        """Active bounds only, keyed the way the dictionary spells them."""
        out: Dict[str, float] = {}
        for key, value in (
            ("min", self.min),
            ("max", self.max),
            ("exclusiveMin", self.exclusive_min),
            ("exclusiveMax", self.exclusive_max),
        ):
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class ForeignKeyMapping:
    local: str
    foreign: str


@dataclass(frozen=True)
class ForeignKeyDefinition:
    schema: str
    mappings: Tuple[ForeignKeyMapping, ...]

    @property
    def local_fields(self) -> List[str]:
        return [m.local for m in self.mappings]

    @property
    def foreign_fields(self) -> List[str]:
        return [m.foreign for m in self.mappings]


@dataclass(frozen=True)
class FieldRestrictions:
    required: bool = False
    regex: Optional[str] = None
    range: Optional[RangeRestriction] = None
    code_list: Optional[Tuple[Any, ...]] = None
    scripts: Tuple[str, ...] = ()
    unique: bool = False
    foreign_keys: Tuple[ForeignKeyDefinition, ...] = ()


@dataclass(frozen=True)
class FieldMeta:
    default: Any = None
    examples: Optional[str] = None
    core: bool = False
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    value_type: ValueType
    is_array: bool = False
    description: Optional[str] = None
    restrictions: FieldRestrictions = field(default_factory=FieldRestrictions)
    meta: FieldMeta = field(default_factory=FieldMeta)


@dataclass(frozen=True)
class SchemaRestrictions:
    unique_key: Tuple[str, ...] = ()
    foreign_keys: Tuple[ForeignKeyDefinition, ...] = ()


@dataclass(frozen=True)
class SchemaDefinition:
    name: str
    fields: Tuple[FieldDefinition, ...]
    description: Optional[str] = None
    restrictions: SchemaRestrictions = field(default_factory=SchemaRestrictions)

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def foreign_keys(self) -> List[ForeignKeyDefinition]:
        """Schema-level definitions first, then field-level ones in field order."""
        out = list(self.restrictions.foreign_keys)
        for f in self.fields:
            out.extend(f.restrictions.foreign_keys)
        return out


@dataclass(frozen=True)
class SchemasDictionary:
    name: str
    version: str
    schemas: Tuple[SchemaDefinition, ...]

    def get_schema(self, schema_name: str) -> SchemaDefinition:
        for s in self.schemas:
            if s.name == schema_name:
                return s
        raise SchemaNotFoundError(schema_name)

    def schema_names(self) -> List[str]:
        return [s.name for s in self.schemas]


# ---- typed values -------------------------------------------------------------

class ValueKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    EMPTY = "empty"   # present but blank
    RAW = "raw"       # left uncoerced (type error or unrecognized field)

    @staticmethod
    def of(value_type: ValueType) -> "ValueKind":
        return ValueKind(value_type.value)


@dataclass(frozen=True)
class TypedValue:
    """A coerced field value tagged with the kind it was coerced to."""
    kind: ValueKind
    value: Any
    is_array: bool = False

    def elements(self) -> List[Any]:
        if isinstance(self.value, tuple):
            return list(self.value)
        return [self.value]

    @property
    def is_numeric(self) -> bool:
        return self.kind in (ValueKind.INTEGER, ValueKind.NUMBER)


# ---- results ------------------------------------------------------------------

@dataclass(frozen=True)
class SchemaValidationError:
    error_type: ErrorType
    field_name: str
    index: int
    info: Mapping[str, Any]
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errorType": self.error_type.value,
            "fieldName": self.field_name,
            "index": self.index,
            "info": _plain(self.info),
            "message": self.message,
        }


@dataclass(frozen=True)
class SchemaProcessingResult:
    validation_errors: List[SchemaValidationError]
    processed_record: TypedDataRecord


@dataclass(frozen=True)
class BatchProcessingResult:
    validation_errors: List[SchemaValidationError]
    processed_records: List[TypedDataRecord]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "validationErrors": [e.to_dict() for e in self.validation_errors],
            "processedRecords": [_plain(r) for r in self.processed_records],
        }


@dataclass
class FieldNamesByPriority:
    required: List[str] = field(default_factory=list)
    optional: List[str] = field(default_factory=list)


def _plain(obj: Any) -> Any:
    """JSON-friendly copy: mappings to dicts, tuples to lists."""
    if isinstance(obj, Mapping):
        return {k: _plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_plain(v) for v in obj]
    return obj
