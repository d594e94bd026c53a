from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from dotenv import load_dotenv

DEFAULT_REPORT_DIR = "build/report"
DUPLICATE_POLICIES = ("first-exempt", "all")

def find_project_root(start: Optional[Path] = None) -> Path:
    """Find project root by walking up directory tree looking for pyproject.toml."""
    if start is None:
        start = Path.cwd()
    cur = start.resolve()
    while True:
        if (cur / "pyproject.toml").exists():
            return cur
        if cur.parent == cur:
            return start  # fallback: no marker found
        cur = cur.parent

def load_env(project_root: Optional[Path] = None) -> None:
    """Load environment variables from .env file if it exists."""
    if project_root is None:
        project_root = find_project_root()
    dotenv_path = project_root / ".env"
    # Load only if the file exists; do not override existing env vars
    if dotenv_path.exists():
        load_dotenv(dotenv_path, override=False)

def _env_flag(key: str) -> bool:
    return os.environ.get(key, "").strip().lower() in ("1", "true", "yes", "on")

@dataclass
class EngineConfig:
    duplicate_policy: str = "first-exempt"
    predicate_modules: List[str] = field(default_factory=list)
    report_dir: Path = Path(DEFAULT_REPORT_DIR)
    verbose: bool = False

    def __post_init__(self):
        if self.duplicate_policy not in DUPLICATE_POLICIES:
            raise ValueError(
                f"duplicate_policy must be one of {', '.join(DUPLICATE_POLICIES)}, got {self.duplicate_policy!r}"
            )

    @staticmethod
    def from_env(project_root: Optional[Path] = None) -> "EngineConfig":
        load_env(project_root)
        modules = [m.strip() for m in os.environ.get("LECTERN_PREDICATE_MODULES", "").split(",") if m.strip()]
        return EngineConfig(
            duplicate_policy=os.environ.get("LECTERN_DUPLICATE_POLICY", "first-exempt").strip().lower(),
            predicate_modules=modules,
            report_dir=Path(os.environ.get("LECTERN_REPORT_DIR", DEFAULT_REPORT_DIR)),
            verbose=_env_flag("LECTERN_VERBOSE"),
        )

    def as_dict(self) -> Dict[str, object]:
        return {
            "duplicate_policy": self.duplicate_policy,
            "predicate_modules": list(self.predicate_modules),
            "report_dir": str(self.report_dir),
            "verbose": self.verbose,
        }
