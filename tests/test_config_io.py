from pathlib import Path
import pytest

from lectern.config import EngineConfig, load_env
from lectern.io import load_dataset, read_json, read_jsonl, read_tsv, split_array_cells, write_json

class TestConfig:

    def test_defaults(self, tmp_path):
        cfg = EngineConfig.from_env(tmp_path)
        assert cfg.duplicate_policy == "first-exempt"
        assert cfg.predicate_modules == []
        assert cfg.report_dir == Path("build/report")
        assert cfg.verbose is False

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LECTERN_DUPLICATE_POLICY", "ALL")
        monkeypatch.setenv("LECTERN_PREDICATE_MODULES", "a.b, c ,")
        monkeypatch.setenv("LECTERN_REPORT_DIR", str(tmp_path / "out"))
        monkeypatch.setenv("LECTERN_VERBOSE", "yes")
        cfg = EngineConfig.from_env(tmp_path)
        assert cfg.as_dict() == {
            "duplicate_policy": "all",
            "predicate_modules": ["a.b", "c"],
            "report_dir": str(tmp_path / "out"),
            "verbose": True,
        }

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            EngineConfig(duplicate_policy="last-wins")

    def test_dotenv_does_not_override(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("LECTERN_REPORT_DIR=from-dotenv\nLECTERN_DUPLICATE_POLICY=all\n")
        monkeypatch.setenv("LECTERN_REPORT_DIR", "from-env")
        load_env(tmp_path)
        cfg = EngineConfig.from_env(tmp_path)
        assert cfg.report_dir == Path("from-env")
        assert cfg.duplicate_policy == "all"


class TestIO:

    def test_tsv_and_array_split(self, tmp_path, dictionary):
        p = tmp_path / "favorite_things.tsv"
        p.write_text("id\tfruit\tqWords\nA\tMango, Apple\tque\nB\t\t\n")
        rows = read_tsv(p)
        assert rows[1] == {"id": "B", "fruit": "", "qWords": ""}
        split = split_array_cells(dictionary.get_schema("favorite_things"), rows)
        assert split[0] == {"id": "A", "fruit": ["Mango", "Apple"], "qWords": ["que"]}
        assert split[1]["fruit"] == [""]

    def test_jsonl_skips_blank_and_comment_lines(self, tmp_path):
        p = tmp_path / "rows.jsonl"
        p.write_text('// header\n{"a": "1"}\n\n{"a": "2"}\n')
        assert read_jsonl(p) == [{"a": "1"}, {"a": "2"}]

    def test_jsonl_reports_bad_line(self, tmp_path):
        p = tmp_path / "rows.jsonl"
        p.write_text('{"a": "1"}\n{oops\n')
        with pytest.raises(ValueError, match=":2:"):
            read_jsonl(p)

    def test_json_dataset_must_be_array(self, tmp_path):
        p = tmp_path / "rows.json"
        p.write_text('{"a": "1"}')
        with pytest.raises(ValueError):
            load_dataset(p)

    def test_write_json_creates_parent_dirs(self, tmp_path):
        p = tmp_path / "report" / "nested" / "validation.json"
        write_json(p, {"error_count": 0, "name": "é"})
        assert read_json(p) == {"error_count": 0, "name": "é"}
