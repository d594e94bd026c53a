"""Set operations over whole datasets: key projection, duplicates, missing keys."""
from __future__ import annotations
from collections import defaultdict
from typing import Any, Dict, Hashable, List, Mapping, Sequence, Tuple

from .messages import format_value

KeyRow = Tuple[int, Dict[str, Any]]

def key_component(value: Any) -> Hashable:
    """Comparable form of a typed or raw value: blank is '', numbers compare by text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return "" if value.strip() == "" else value
    if isinstance(value, (list, tuple)):
        parts = tuple(key_component(v) for v in value)
        return "" if all(p == "" for p in parts) else parts
    return format_value(value)

def select_fields_from_dataset(dataset: Sequence[Mapping[str, Any]], fields: Sequence[str]) -> List[KeyRow]:
    """
    Project each row onto `fields`, keeping its position in the dataset.
    Absent values are projected as ''.
    """
    rows: List[KeyRow] = []
    for i, row in enumerate(dataset):
        values: Dict[str, Any] = {}
        for f in fields:
            v = row.get(f)
            values[f] = "" if v is None else v
        rows.append((i, values))
    return rows

def _key(values: Mapping[str, Any], fields: Sequence[str]) -> Tuple[Hashable, ...]:
    return tuple(key_component(values.get(f)) for f in fields)

def find_duplicate_keys(rows: Sequence[KeyRow], fields: Sequence[str], policy: str = "first-exempt") -> List[KeyRow]:
    """
    Rows whose projected key occurs more than once. With 'first-exempt' the
    first row of each group is canonical and not returned; with 'all' every
    row of the group is. Fully blank keys never count as duplicates.
    """
    groups: Dict[Tuple[Hashable, ...], List[KeyRow]] = defaultdict(list)
    for row in rows:
        key = _key(row[1], fields)
        if all(k == "" for k in key):
            continue
        groups[key].append(row)
    dupes: List[KeyRow] = []
    for group in groups.values():
        if len(group) < 2:
            continue
        dupes.extend(group[1:] if policy == "first-exempt" else group)
    dupes.sort(key=lambda r: r[0])
    return dupes

def find_missing_foreign_keys(
    local_rows: Sequence[KeyRow],
    foreign_rows: Sequence[KeyRow],
    mappings: Sequence[Tuple[str, str]],
) -> List[KeyRow]:
    """Local rows whose (local fields) key has no equal (foreign fields) key."""
    local_fields = [m[0] for m in mappings]
    foreign_fields = [m[1] for m in mappings]
    foreign_keys = {_key(values, foreign_fields) for _, values in foreign_rows}
    return [row for row in local_rows if _key(row[1], local_fields) not in foreign_keys]
