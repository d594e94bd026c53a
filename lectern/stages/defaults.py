from __future__ import annotations
from typing import Any, Dict, List

from ..entities import SchemaDefinition
from ..logging import log
from ..messages import format_value
from .common import is_all_blank, is_array_value, is_blank

def _has_default(default: Any) -> bool:
    if default is None:
        return False
    if is_array_value(default):
        return len(default) > 0
    return not (isinstance(default, str) and default == "")

def _array_default(default: Any) -> List[str]:
    if is_array_value(default):
        return [format_value(d) for d in default]
    return [format_value(default)]

def populate_defaults(schema: SchemaDefinition, staged: Dict[str, Any], index: int) -> None:
    """
    Replace blank values with the field's declared default, in place.
    Keys missing from the record are never added.
    """
    for f in schema.fields:
        default = f.meta.default
        if not _has_default(default) or f.name not in staged:
            continue
        value = staged[f.name]
        if f.is_array:
            if is_all_blank(value):
                staged[f.name] = _array_default(default)
                log().debug(f"record #{index}: default {default!r} populated for {f.name}")
        elif not is_array_value(value) and is_blank(value):
            staged[f.name] = format_value(default)
            log().debug(f"record #{index}: default {default!r} populated for {f.name}")
