"""Pytest configuration and fixtures for lectern tests"""
import tempfile
from pathlib import Path
import pytest

from lectern.io import load_dictionary
from lectern.predicates import PredicateEvaluator

FIXTURES = Path(__file__).parent / "fixtures"

@pytest.fixture(scope="session")
def dictionary_path():
    return FIXTURES / "dictionary.json"

@pytest.fixture(scope="session")
def dictionary(dictionary_path):
    """The shared test dictionary, parsed once per session"""
    return load_dictionary(dictionary_path)

@pytest.fixture
def evaluator():
    return PredicateEvaluator()

@pytest.fixture
def temp_report_dir():
    """Create a temporary report directory for CLI tests"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)

@pytest.fixture(autouse=True)
def _clean_lectern_env(monkeypatch):
    for key in ("LECTERN_DUPLICATE_POLICY", "LECTERN_PREDICATE_MODULES", "LECTERN_REPORT_DIR", "LECTERN_VERBOSE"):
        monkeypatch.delenv(key, raising=False)

def errors_of(result, error_type=None):
    """Plain-dict view of a result's errors, optionally filtered by kind"""
    errs = [e.to_dict() for e in result.validation_errors]
    if error_type is not None:
        errs = [e for e in errs if e["errorType"] == error_type]
    return errs
