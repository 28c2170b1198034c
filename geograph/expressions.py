"""Expression sanitizing, compilation and evaluation.

User expressions arrive as loose algebraic strings (``2x^2 + a``,
``sen(x)``, ``x(A) + 1``).  They are normalised by
:func:`sanitize_expression`, parsed once with SymPy and cached, and then
evaluated either pointwise through a ``math``-backed lambda or over a whole
grid through a ``numpy``-backed lambda.  Every failure surfaces as
:class:`EvaluationError`, which callers treat as "no value this pass".
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication,
    parse_expr,
    standard_transformations,
)

from .model import Parameter

logger = logging.getLogger(__name__)


class EvaluationError(ValueError):
    """Raised when an expression cannot be evaluated in a scope."""


_TRANSFORMATIONS = standard_transformations + (implicit_multiplication, convert_xor)

_FUNCTIONS: Dict[str, object] = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "sec": lambda arg: 1 / sp.cos(arg),
    "csc": lambda arg: 1 / sp.sin(arg),
    "cot": lambda arg: 1 / sp.tan(arg),
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "arcsin": sp.asin,
    "arccos": sp.acos,
    "arctan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "sqrt": sp.sqrt,
    "exp": sp.exp,
    "log": sp.log,
    "ln": sp.log,
    "log10": lambda arg: sp.log(arg, 10),
    "log2": lambda arg: sp.log(arg, 2),
    "abs": sp.Abs,
    "Abs": sp.Abs,
    "floor": sp.floor,
    "ceil": sp.ceiling,
    "sign": sp.sign,
}

_CONSTANTS: Dict[str, object] = {
    "pi": sp.pi,
    "PI": sp.pi,
    "e": sp.E,
    "E": sp.E,
}

RESERVED_NAMES = frozenset(_FUNCTIONS) | frozenset(_CONSTANTS)

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_RELATION_RE = re.compile(r"(<=|>=|<|>)")


def sanitize_expression(expr: str) -> str:
    """Normalise localized and shorthand notation into parseable syntax."""

    if not expr:
        return ""
    clean = re.sub(r"\bsen\b", "sin", expr)
    clean = re.sub(r"\braiz\b", "sqrt", clean)
    clean = clean.replace("log_", "log")
    clean = re.sub(
        r"log\s*\(\s*([^,()]+)\s*,\s*([^)]+)\s*\)",
        r"(log(\2)/log(\1))",
        clean,
        flags=re.IGNORECASE,
    )
    clean = re.sub(r"(\d)\s*,\s*(\d)", r"\1.\2", clean)
    clean = re.sub(r"log(\d+)\s*\(([^)]+)\)", r"(log(\2)/log(\1))", clean)
    clean = re.sub(r"\b(x|y)\s*\(\s*([A-Z]\w*)\s*\)", r"\1_\2", clean)
    clean = re.sub(r"\b([A-Z]\w*)\.(x|y)\b", r"\2_\1", clean)
    clean = re.sub(r"\b(declive|slope)\s*\(\s*([a-z]\w*)\s*\)", r"declive_\2", clean)
    return clean


@dataclass
class CompiledExpression:
    """A parsed expression bound to the ordered names of its free symbols."""

    source: str
    expr: sp.Expr
    names: Tuple[str, ...]
    _scalar: Callable[..., object] = field(repr=False)
    _vector: Optional[Callable[..., object]] = field(default=None, repr=False)

    def _arguments(self, scope: Mapping[str, float], overrides: Mapping[str, object]) -> list:
        missing = [name for name in self.names if name not in overrides and name not in scope]
        if missing:
            raise EvaluationError(f"undefined symbol(s) {', '.join(missing)} in '{self.source}'")
        return [overrides[name] if name in overrides else scope[name] for name in self.names]

    def evaluate(self, scope: Mapping[str, float], **overrides: float) -> float:
        args = self._arguments(scope, overrides)
        try:
            value = self._scalar(*args)
        except (ArithmeticError, ValueError, TypeError, NameError) as exc:
            raise EvaluationError(f"cannot evaluate '{self.source}': {exc}") from exc
        if isinstance(value, complex):
            if abs(value.imag) > 1e-12:
                raise EvaluationError(f"'{self.source}' is not real at this point")
            value = value.real
        try:
            result = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise EvaluationError(f"'{self.source}' did not produce a number") from exc
        if not math.isfinite(result):
            raise EvaluationError(f"'{self.source}' is not finite at this point")
        return result

    def evaluate_grid(
        self, scope: Mapping[str, float], xs: np.ndarray, ys: np.ndarray
    ) -> np.ndarray:
        if self._vector is None:
            symbols = [sp.Symbol(name) for name in self.names]
            self._vector = sp.lambdify(symbols, self.expr, modules="numpy")
        args = self._arguments(scope, {"x": xs, "y": ys})
        try:
            with np.errstate(all="ignore"):
                raw = np.asarray(self._vector(*args))
        except (ArithmeticError, ValueError, TypeError, NameError) as exc:
            raise EvaluationError(f"cannot sample '{self.source}': {exc}") from exc
        if np.iscomplexobj(raw):
            raw = np.where(np.abs(raw.imag) > 1e-12, np.nan, raw.real)
        values = np.array(np.broadcast_to(raw.astype(float), np.shape(xs)), dtype=float)
        values[~np.isfinite(values)] = np.nan
        return values


def _local_namespace(text: str, extra: Optional[Mapping[str, object]] = None) -> Dict[str, object]:
    namespace: Dict[str, object] = {}
    for name in _IDENTIFIER_RE.findall(text):
        if extra and name in extra:
            namespace[name] = extra[name]
        elif name in _FUNCTIONS:
            namespace[name] = _FUNCTIONS[name]
        elif name in _CONSTANTS:
            namespace[name] = _CONSTANTS[name]
        else:
            namespace[name] = sp.Symbol(name)
    return namespace


def parse_sympy(expr: str, extra_names: Optional[Mapping[str, object]] = None) -> sp.Expr:
    """Parse a sanitized expression string into a SymPy expression.

    Identifiers that are neither known functions nor constants become plain
    symbols; ``extra_names`` can bind additional names (e.g. ``I``).
    """

    text = sanitize_expression(expr).strip()
    if not text:
        raise EvaluationError("empty expression")
    namespace = _local_namespace(text, extra_names)
    try:
        parsed = parse_expr(text, local_dict=namespace, transformations=_TRANSFORMATIONS)
    except Exception as exc:
        raise EvaluationError(f"cannot parse '{expr}': {exc}") from exc
    if not isinstance(parsed, sp.Expr):
        raise EvaluationError(f"'{expr}' is not an algebraic expression")
    return parsed


@lru_cache(maxsize=1024)
def compile_expression(expr: str) -> CompiledExpression:
    """Parse and compile ``expr``; results are cached by source text."""

    parsed = parse_sympy(expr)
    names = tuple(sorted(symbol.name for symbol in parsed.free_symbols))
    symbols = [sp.Symbol(name) for name in names]
    scalar = sp.lambdify(symbols, parsed, modules="math")
    logger.debug("Compiled expression %r with symbols %s", expr, names)
    return CompiledExpression(source=expr, expr=parsed, names=names, _scalar=scalar)


def evaluate(expr: str, scope: Mapping[str, float], **overrides: float) -> float:
    """Evaluate ``expr`` in ``scope``; raise :class:`EvaluationError` on failure."""

    return compile_expression(expr).evaluate(scope, **overrides)


def try_evaluate(expr: str, scope: Mapping[str, float], **overrides: float) -> Optional[float]:
    try:
        return evaluate(expr, scope, **overrides)
    except EvaluationError as exc:
        logger.debug("Evaluation failed: %s", exc)
        return None


def evaluate_grid(
    expr: str, scope: Mapping[str, float], xs: np.ndarray, ys: np.ndarray
) -> np.ndarray:
    """Sample ``expr`` over matching ``xs``/``ys`` arrays, NaN where undefined."""

    return compile_expression(expr).evaluate_grid(scope, xs, ys)


def free_symbol_names(expr: str) -> Tuple[str, ...]:
    return compile_expression(expr).names


def substitute_parameters(expr: str, parameters: Iterable[Parameter]) -> str:
    """Textually replace each parameter name by its parenthesised value."""

    result = sanitize_expression(expr)
    for param in parameters:
        value = float(param.value)
        text = str(int(value)) if value.is_integer() else repr(value)
        result = re.sub(rf"\b{re.escape(param.name)}\b", f"({text})", result)
    return result


def parameter_scope(parameters: Sequence[Parameter]) -> Dict[str, float]:
    return {param.name: float(param.value) for param in parameters}


def split_relation(expr: str) -> Tuple[str, Optional[str]]:
    """Turn ``lhs op rhs`` into ``((lhs) - (rhs), op)``.

    Returns the expression unchanged with ``None`` when it holds no relation.
    """

    match = _RELATION_RE.search(expr)
    if match:
        parts = expr.split(match.group(1))
        if len(parts) == 2:
            return f"({parts[0].strip()}) - ({parts[1].strip()})", match.group(1)
        return expr, match.group(1)
    if "=" in expr:
        parts = expr.split("=")
        if len(parts) == 2:
            return f"({parts[0].strip()}) - ({parts[1].strip()})", "="
    return expr, None


__all__ = [
    "CompiledExpression",
    "EvaluationError",
    "RESERVED_NAMES",
    "compile_expression",
    "evaluate",
    "evaluate_grid",
    "free_symbol_names",
    "parameter_scope",
    "parse_sympy",
    "sanitize_expression",
    "split_relation",
    "substitute_parameters",
    "try_evaluate",
]
