# -*- coding: utf-8 -*-
"""
Dictionary loading: JSON Schema shape check, then conversion of the raw
mapping into immutable SchemasDictionary entities.
"""
from __future__ import annotations
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple
from jsonschema import Draft202012Validator

from .entities import (
    FieldDefinition, FieldMeta, FieldRestrictions, ForeignKeyDefinition, ForeignKeyMapping,
    RangeRestriction, SchemaDefinition, SchemaRestrictions, SchemasDictionary, ValueType,
)
from .errors import DictionaryFormatError
from .logging import log

_DICTIONARY_SCHEMA: Dict[str, Any] = {
  "title": "Schemas Dictionary",
  "type": "object",
  "required": ["schemas"],
  "properties": {
    "name": {"type": "string"},
    "version": {"type": ["string", "number"]},
    "schemas": {"type": "array", "items": {"$ref": "#/$defs/schema"}}
  },
  "$defs": {
    "schema": {
      "type": "object",
      "required": ["name", "fields"],
      "properties": {
        "name": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "fields": {"type": "array", "items": {"$ref": "#/$defs/field"}},
        "restrictions": {
          "type": "object",
          "properties": {
            "uniqueKey": {"type": "array", "items": {"type": "string"}},
            "foreignKey": {"type": "array", "items": {"$ref": "#/$defs/foreign_key"}}
          }
        }
      }
    },
    "field": {
      "type": "object",
      "required": ["name", "valueType"],
      "properties": {
        "name": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "valueType": {"type": "string", "enum": ["string", "integer", "number", "boolean"]},
        "isArray": {"type": "boolean"},
        "restrictions": {"$ref": "#/$defs/field_restrictions"},
        "meta": {"type": "object"}
      }
    },
    "field_restrictions": {
      "type": "object",
      "properties": {
        "required": {"type": "boolean"},
        "regex": {"type": "string"},
        "range": {
          "type": "object",
          "additionalProperties": False,
          "properties": {
            "min": {"type": "number"},
            "max": {"type": "number"},
            "exclusiveMin": {"type": "number"},
            "exclusiveMax": {"type": "number"}
          }
        },
        "codeList": {"type": "array", "items": {"type": ["string", "number"]}},
        "script": {
          "oneOf": [
            {"type": "string"},
            {"type": "array", "items": {"type": "string"}}
          ]
        },
        "unique": {"type": "boolean"},
        "foreignKey": {"type": "array", "items": {"$ref": "#/$defs/foreign_key"}}
      }
    },
    "foreign_key": {
      "type": "object",
      "required": ["schema", "mappings"],
      "properties": {
        "schema": {"type": "string"},
        "mappings": {
          "type": "array",
          "minItems": 1,
          "items": {
            "type": "object",
            "required": ["local", "foreign"],
            "properties": {"local": {"type": "string"}, "foreign": {"type": "string"}}
          }
        }
      }
    }
  }
}

_VALIDATOR = Draft202012Validator(_DICTIONARY_SCHEMA)


def check_dictionary(raw: Any) -> List[str]:
    """Return shape problems of a raw dictionary value (empty list when fine)."""
    errors: List[str] = []
    for err in sorted(_VALIDATOR.iter_errors(raw), key=lambda e: list(e.absolute_path)):
        loc = "/".join(str(p) for p in err.absolute_path) or "<root>"
        errors.append(f"{loc}: {err.message}")
    if errors:
        return errors

    # semantic checks the JSON Schema cannot express
    seen_schemas = set()
    for s in raw.get("schemas", []):
        if s["name"] in seen_schemas:
            errors.append(f"schemas: duplicate schema name '{s['name']}'")
        seen_schemas.add(s["name"])
        names = [f["name"] for f in s["fields"]]
        dupes = sorted({n for n in names if names.count(n) > 1})
        for n in dupes:
            errors.append(f"{s['name']}: duplicate field name '{n}'")
        for key_field in (s.get("restrictions") or {}).get("uniqueKey", []) or []:
            if key_field not in names:
                errors.append(f"{s['name']}: uniqueKey references unknown field '{key_field}'")
        for f in s["fields"]:
            regex = (f.get("restrictions") or {}).get("regex")
            if regex is None:
                continue
            try:
                re.compile(regex)
            except re.error as e:
                errors.append(f"{s['name']}.{f['name']}: invalid regex {regex!r}: {e}")
    return errors


def parse_dictionary(raw: Mapping[str, Any]) -> SchemasDictionary:
    """Validate and convert a raw (JSON/YAML-loaded) dictionary value."""
    if raw is None:
        raise ValueError("dictionary must not be None")
    problems = check_dictionary(raw)
    if problems:
        raise DictionaryFormatError(
            f"dictionary failed shape check with {len(problems)} problem(s): {problems[0]}",
            problems,
        )
    schemas = tuple(_parse_schema(s) for s in raw["schemas"])
    dictionary = SchemasDictionary(
        name=str(raw.get("name", "")),
        version=str(raw.get("version", "")),
        schemas=schemas,
    )
    log().debug(f"loaded dictionary {dictionary.name}@{dictionary.version} ({len(schemas)} schemas)")
    return dictionary


def _parse_schema(raw: Mapping[str, Any]) -> SchemaDefinition:
    restrictions = raw.get("restrictions") or {}
    return SchemaDefinition(
        name=raw["name"],
        description=raw.get("description"),
        fields=tuple(_parse_field(f) for f in raw["fields"]),
        restrictions=SchemaRestrictions(
            unique_key=tuple(restrictions.get("uniqueKey") or ()),
            foreign_keys=_parse_foreign_keys(restrictions.get("foreignKey")),
        ),
    )


def _parse_field(raw: Mapping[str, Any]) -> FieldDefinition:
    return FieldDefinition(
        name=raw["name"],
        value_type=ValueType(raw["valueType"]),
        is_array=bool(raw.get("isArray", False)),
        description=raw.get("description"),
        restrictions=_parse_field_restrictions(raw.get("restrictions") or {}),
        meta=_parse_meta(raw.get("meta") or {}),
    )


def _parse_field_restrictions(raw: Mapping[str, Any]) -> FieldRestrictions:
    script = raw.get("script")
    # older dictionaries carry a single script string instead of a list
    scripts: Tuple[str, ...] = (script,) if isinstance(script, str) else tuple(script or ())
    code_list = raw.get("codeList")
    return FieldRestrictions(
        required=bool(raw.get("required", False)),
        regex=raw.get("regex"),
        range=_parse_range(raw.get("range")),
        code_list=tuple(code_list) if code_list else None,
        scripts=scripts,
        unique=bool(raw.get("unique", False)),
        foreign_keys=_parse_foreign_keys(raw.get("foreignKey")),
    )


def _parse_range(raw: Optional[Mapping[str, Any]]) -> Optional[RangeRestriction]:
    if not raw:
        return None
    return RangeRestriction(
        min=raw.get("min"),
        max=raw.get("max"),
        exclusive_min=raw.get("exclusiveMin"),
        exclusive_max=raw.get("exclusiveMax"),
    )


def _parse_foreign_keys(raw: Optional[List[Mapping[str, Any]]]) -> Tuple[ForeignKeyDefinition, ...]:
    out = []
    for fk in raw or []:
        mappings = tuple(ForeignKeyMapping(local=m["local"], foreign=m["foreign"]) for m in fk["mappings"])
        out.append(ForeignKeyDefinition(schema=fk["schema"], mappings=mappings))
    return tuple(out)


def _parse_meta(raw: Mapping[str, Any]) -> FieldMeta:
    examples = raw.get("examples")
    if isinstance(examples, (list, tuple)):
        examples = ", ".join(str(e) for e in examples)
    extra = {k: v for k, v in raw.items() if k not in ("default", "examples", "core")}
    return FieldMeta(
        default=raw.get("default"),
        examples=examples,
        core=bool(raw.get("core", False)),
        extra=extra,
    )
