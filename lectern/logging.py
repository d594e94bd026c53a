from __future__ import annotations
import logging
from rich.console import Console
from rich.logging import RichHandler

_LOGGER = logging.getLogger("lectern")
_HANDLER = RichHandler(console=Console(stderr=True), rich_tracebacks=True, markup=True)
_FORMAT = "%(message)s"
_CONSOLE = Console()

def set_verbosity(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=_FORMAT, datefmt="[%X]", handlers=[_HANDLER], force=True)

def log() -> logging.Logger:
    return _LOGGER

def console() -> Console:
    """Rich console for styled CLI output."""
    return _CONSOLE
