from __future__ import annotations
import csv, json
from pathlib import Path
from typing import Any, Dict, Iterable, List
import yaml

from .dictionary import parse_dictionary
from .entities import DataRecord, SchemaDefinition, SchemasDictionary

ARRAY_DELIMITER = ","

def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)

def read_json(p: Path) -> Any:
    return json.loads(Path(p).read_text(encoding="utf-8"))

def write_json(p: Path, obj: Any) -> None:
    ensure_dir(p.parent)
    p.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")

def read_yaml(p: Path) -> Any:
    return yaml.safe_load(Path(p).read_text(encoding="utf-8"))

def read_jsonl(p: Path) -> List[Dict]:
    out = []
    for i, line in enumerate(Path(p).read_text(encoding="utf-8").splitlines(), 1):
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        try:
            out.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise ValueError(f"{p}:{i}: invalid JSON: {e}") from e
    return out

def read_tsv(p: Path) -> List[Dict[str, str]]:
    """Read a tab-separated file with a header row into string-valued rows."""
    with Path(p).open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f, delimiter="\t")
        return [{k: (v if v is not None else "") for k, v in row.items() if k is not None} for row in reader]

def load_dictionary(p: Path) -> SchemasDictionary:
    """Load a dictionary from a .json, .yml or .yaml file."""
    p = Path(p)
    raw = read_yaml(p) if p.suffix.lower() in (".yml", ".yaml") else read_json(p)
    # registry exports wrap the dictionary in a one-element list
    if isinstance(raw, list) and len(raw) == 1:
        raw = raw[0]
    return parse_dictionary(raw)

def load_dataset(p: Path) -> List[Dict[str, Any]]:
    """Load raw records from .tsv, .jsonl or .json (array of objects)."""
    p = Path(p)
    suffix = p.suffix.lower()
    if suffix == ".tsv":
        return read_tsv(p)
    if suffix == ".jsonl":
        return read_jsonl(p)
    rows = read_json(p)
    if not isinstance(rows, list):
        raise ValueError(f"{p}: expected array of records, got {type(rows).__name__}")
    return rows

def split_array_cells(schema: SchemaDefinition, rows: Iterable[DataRecord]) -> List[Dict[str, Any]]:
    """Split delimited cells of array fields into lists; other cells are untouched."""
    array_fields = {f.name for f in schema.fields if f.is_array}
    out: List[Dict[str, Any]] = []
    for row in rows:
        new_row: Dict[str, Any] = {}
        for k, v in row.items():
            if k in array_fields and isinstance(v, str):
                new_row[k] = [part.strip() for part in v.split(ARRAY_DELIMITER)]
            else:
                new_row[k] = v
        out.append(new_row)
    return out
