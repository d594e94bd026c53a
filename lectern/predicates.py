# -*- coding: utf-8 -*-
"""
Script restrictions: a restricted expression language plus a registry of
named predicate functions.

A script entry is a single Python *expression* (no statements). Before it
is compiled, its syntax tree is checked node-by-node against a whitelist:
no attribute access, no imports, no lambdas, no names other than the
evaluation variables and the registered helper/predicate functions.

Variables available to an expression:
  row    the whole typed record (read-only mapping)
  field  the coerced value of the field being checked (alias: value)
  name   the name of the field being checked

An expression evaluates to one of:
  - a bool
  - a mapping {"valid": bool, "message": str}  (see `result(...)`)
  - a (valid, message) pair
  - a registered predicate function, which is then called as f(row, field, name)

Example (US / Canadian postal codes):

  result(matches(r"^[0-9]{5}$", field), "invalid postal code for US") if row["country"] == "US"
  else result(matches(r"^[A-Z][0-9][A-Z] ?[0-9][A-Z][0-9]$", field), "invalid postal code for CANADA")
  if row["country"] == "CANADA" else True
"""
from __future__ import annotations
import ast, importlib, re
from types import CodeType
from typing import Any, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Set

from .errors import PredicateRegistryError
from .logging import log
from .messages import INVALID_VALUE_ERROR_MESSAGE

SCRIPT_FAILURE_MESSAGE = "failed to run script validation, check script and the input"

_VARIABLES = ("row", "field", "value", "name")

_ALLOWED_NODES = (
    ast.Expression, ast.Load, ast.Store,
    ast.BoolOp, ast.And, ast.Or,
    ast.UnaryOp, ast.Not, ast.USub, ast.UAdd,
    ast.BinOp, ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Mod, ast.FloorDiv,
    ast.Compare, ast.Eq, ast.NotEq, ast.Lt, ast.LtE, ast.Gt, ast.GtE,
    ast.In, ast.NotIn, ast.Is, ast.IsNot,
    ast.IfExp, ast.Call, ast.keyword, ast.Name, ast.Constant,
    ast.Subscript, ast.Slice, ast.Tuple, ast.List, ast.Dict,
    ast.JoinedStr, ast.FormattedValue,
    ast.GeneratorExp, ast.ListComp, ast.comprehension,
)


class PredicateResult(NamedTuple):
    valid: bool
    message: str


class UnsafeExpressionError(ValueError):
    """The expression uses syntax outside the allowed grammar."""


# ---- helper functions callable from expressions -----------------------------

def _matches(pattern: str, value: Any) -> bool:
    if value is None:
        return False
    return re.search(pattern, str(value)) is not None

def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple)):
        return all(_is_empty(v) for v in value)
    return False

def _result(valid: Any, message: str = "") -> Dict[str, Any]:
    return {"valid": bool(valid), "message": message}

def _get(mapping: Mapping[str, Any], key: str, default: Any = None) -> Any:
    return mapping.get(key, default)

def _text(fn: Callable[[str], str]) -> Callable[[Any], Any]:
    return lambda v: fn(v) if isinstance(v, str) else v

HELPERS: Dict[str, Callable[..., Any]] = {
    "len": len, "str": str, "int": int, "float": float, "bool": bool,
    "abs": abs, "min": min, "max": max, "round": round,
    "any": any, "all": all, "sorted": sorted,
    "lower": _text(str.lower), "upper": _text(str.upper), "strip": _text(str.strip),
    "startswith": lambda v, p: isinstance(v, str) and v.startswith(p),
    "endswith": lambda v, s: isinstance(v, str) and v.endswith(s),
    "matches": _matches,
    "is_empty": _is_empty,
    "get": _get,
    "result": _result,
}


def _bound_names(tree: ast.AST) -> Set[str]:
    """Names bound by comprehension targets inside the expression."""
    out: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.comprehension):
            for target in ast.walk(node.target):
                if isinstance(target, ast.Name):
                    out.add(target.id)
    return out


class PredicateEvaluator:
    """
    Compiles and runs script expressions. One instance is created per batch
    (or shared explicitly by the caller); compiled code is cached per instance.
    """

    def __init__(self, predicates: Optional[Mapping[str, Callable[..., Any]]] = None):
        self._predicates: Dict[str, Callable[..., Any]] = {}
        self._compiled: Dict[str, CodeType] = {}
        for pname, fn in (predicates or {}).items():
            self.register(pname, fn)

    @staticmethod
    def from_modules(modules: Iterable[str]) -> "PredicateEvaluator":
        """Build an evaluator from modules exposing a PREDICATES mapping."""
        evaluator = PredicateEvaluator()
        for mod_name in modules:
            try:
                mod = importlib.import_module(mod_name)
            except ImportError as e:
                raise PredicateRegistryError(f"cannot import predicate module {mod_name!r}: {e}") from e
            registry = getattr(mod, "PREDICATES", None)
            if not isinstance(registry, Mapping):
                raise PredicateRegistryError(f"predicate module {mod_name!r} has no PREDICATES mapping")
            for pname, fn in registry.items():
                evaluator.register(pname, fn)
            log().debug(f"registered {len(registry)} predicate(s) from {mod_name}")
        return evaluator

    def register(self, name: str, fn: Callable[..., Any]) -> None:
        if not name.isidentifier() or name.startswith("_"):
            raise PredicateRegistryError(f"invalid predicate name {name!r}")
        if name in HELPERS or name in _VARIABLES:
            raise PredicateRegistryError(f"predicate name {name!r} shadows a built-in name")
        if not callable(fn):
            raise PredicateRegistryError(f"predicate {name!r} is not callable")
        self._predicates[name] = fn
        # names resolve at compile time
        self._compiled.clear()

    @property
    def predicate_names(self) -> List[str]:
        return sorted(self._predicates)

    def compile(self, expression: str) -> CodeType:
        code = self._compiled.get(expression)
        if code is not None:
            return code
        # parenthesized so an expression may span several lines
        tree = ast.parse(f"(\n{expression.strip()}\n)", mode="eval")
        self._check_tree(tree)
        code = compile(tree, "<predicate>", "eval")
        self._compiled[expression] = code
        return code

    def _check_tree(self, tree: ast.AST) -> None:
        known = set(_VARIABLES) | set(HELPERS) | set(self._predicates) | _bound_names(tree)
        for node in ast.walk(tree):
            if not isinstance(node, _ALLOWED_NODES):
                raise UnsafeExpressionError(f"syntax not allowed in predicate: {type(node).__name__}")
            if isinstance(node, ast.Name) and node.id not in known:
                raise UnsafeExpressionError(f"unknown name in predicate: {node.id}")
            if isinstance(node, ast.Call) and not isinstance(node.func, ast.Name):
                raise UnsafeExpressionError("only named functions may be called in a predicate")

    def evaluate(self, expression: str, row: Mapping[str, Any], value: Any, name: str) -> PredicateResult:
        """Run one expression. Raises on compile or runtime errors."""
        code = self.compile(expression)
        # one globals dict: comprehension scopes resolve names through globals
        namespace: Dict[str, Any] = {"__builtins__": {}}
        namespace.update(HELPERS)
        namespace.update(self._predicates)
        namespace.update({"row": row, "field": value, "value": value, "name": name})
        out = eval(code, namespace)  # noqa: S307 - tree checked above
        if callable(out):
            out = out(row, value, name)
        return _to_result(out)

    def run_scripts(self, scripts: Sequence[str], row: Mapping[str, Any], value: Any, name: str) -> PredicateResult:
        """
        Run the field's scripts in order, stopping at the first failure.
        Any error while compiling or running becomes a failing result.
        """
        result = PredicateResult(True, "")
        try:
            for expression in scripts:
                result = self.evaluate(expression, row, value, name)
                if not result.valid:
                    break
        except Exception as e:
            log().warning(f"failed running validation script for {name} on record {dict(row)}: {e}")
            return PredicateResult(False, SCRIPT_FAILURE_MESSAGE)
        return result


def _to_result(out: Any) -> PredicateResult:
    if isinstance(out, bool):
        return PredicateResult(out, "" if out else INVALID_VALUE_ERROR_MESSAGE)
    if isinstance(out, Mapping) and "valid" in out:
        valid = bool(out["valid"])
        message = out.get("message")
        if not message:
            message = "" if valid else INVALID_VALUE_ERROR_MESSAGE
        return PredicateResult(valid, str(message))
    if isinstance(out, (tuple, list)) and len(out) == 2:
        valid = bool(out[0])
        return PredicateResult(valid, str(out[1]) if out[1] else ("" if valid else INVALID_VALUE_ERROR_MESSAGE))
    raise TypeError(f"predicate must return a bool, a (valid, message) pair or a result mapping, got {type(out).__name__}")
