#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
lectern CLI — validate datasets against a dictionary

Usage:
  python -m lectern validate --dictionary dictionary.json --data donor=donor.tsv --data specimen=specimen.tsv
  python -m lectern fields donor --dictionary dictionary.json
"""
from __future__ import annotations
import argparse, sys, time
from pathlib import Path
from typing import Dict, List, Tuple

from .config import EngineConfig
from .errors import LecternError
from .io import load_dataset, load_dictionary, split_array_cells, write_json
from .logging import console, log, set_verbosity
from .processing import get_schema_field_names_with_priority, process_schemas

def _parse_data_args(values: List[str]) -> List[Tuple[str, Path]]:
    out: List[Tuple[str, Path]] = []
    for v in values:
        name, sep, path = v.partition("=")
        if not sep or not name or not path:
            raise ValueError(f"--data expects SCHEMA=PATH, got {v!r}")
        out.append((name, Path(path)))
    return out

def main(argv: List[str] = None) -> int:
    ap = argparse.ArgumentParser(prog="lectern", description="Schema-driven record validation")
    sub = ap.add_subparsers(dest="cmd", required=True)

    val = sub.add_parser("validate", help="Validate one or more datasets")
    val.add_argument("--dictionary", required=True, help="Dictionary file (.json/.yml)")
    val.add_argument("--data", action="append", default=[], metavar="SCHEMA=PATH",
                     help="Dataset for a schema (.tsv/.jsonl/.json); repeatable")
    val.add_argument("--report", dest="report_dir", default=None, help="Report dir (default: LECTERN_REPORT_DIR)")
    val.add_argument("--verbose", action="store_true")

    fields = sub.add_parser("fields", help="List required and optional fields of a schema")
    fields.add_argument("schema")
    fields.add_argument("--dictionary", required=True)

    args = ap.parse_args(argv)
    cfg = EngineConfig.from_env()
    set_verbosity(args.cmd == "validate" and (args.verbose or cfg.verbose))

    try:
        if args.cmd == "validate":
            report_dir = Path(args.report_dir) if args.report_dir else cfg.report_dir
            return run_validate(Path(args.dictionary), _parse_data_args(args.data), report_dir, cfg)
        return run_fields(Path(args.dictionary), args.schema)
    except (LecternError, ValueError, OSError) as e:
        console().print(f"✗ {e}", style="red bold", markup=False)
        return 2

def run_validate(dictionary_path: Path, data: List[Tuple[str, Path]], report_dir: Path, cfg: EngineConfig) -> int:
    """Validate the datasets together and write validation.json. Non-zero when errors exist."""
    start = time.time()
    dictionary = load_dictionary(dictionary_path)
    datasets: Dict[str, list] = {}
    for name, path in data:
        schema = dictionary.get_schema(name)
        datasets[name] = split_array_cells(schema, load_dataset(path)) if path.suffix.lower() == ".tsv" else load_dataset(path)
        log().debug(f"loaded {len(datasets[name])} record(s) for {name} from {path}")

    results = process_schemas(dictionary, datasets, config=cfg)

    report = {
        "dictionary": {"name": dictionary.name, "version": dictionary.version},
        "config": cfg.as_dict(),
        "duration_ms": round((time.time() - start) * 1000, 1),
        "schemas": {name: r.to_dict() for name, r in results.items()},
        "error_count": sum(len(r.validation_errors) for r in results.values()),
    }
    report_path = report_dir / "validation.json"
    write_json(report_path, report)

    for name, r in results.items():
        if r.validation_errors:
            console().print(f"✗ {name}: {len(r.validation_errors)} error(s) in {len(r.processed_records)} record(s)", style="red")
        else:
            console().print(f"✓ {name}: {len(r.processed_records)} record(s) valid", style="green")

    if report["error_count"]:
        console().print(f"✗ Validation failed, see {report_path}")
        return 1
    console().print("✓ Validation completed cleanly")
    return 0

def run_fields(dictionary_path: Path, schema_name: str) -> int:
    dictionary = load_dictionary(dictionary_path)
    names = get_schema_field_names_with_priority(dictionary, schema_name)
    console().print(f"required: {', '.join(names.required) or '-'}")
    console().print(f"optional: {', '.join(names.optional) or '-'}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
