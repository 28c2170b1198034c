"""Computer-algebra capability consumed by the symbolic solvers."""

from __future__ import annotations

import logging
import math
from typing import List, Protocol

import sympy as sp

from .expressions import EvaluationError, parse_sympy

logger = logging.getLogger(__name__)

# names SymPy emits in printed results that user input never binds
_CAS_NAMES = {
    "I": sp.I,
    "oo": sp.oo,
    "zoo": sp.zoo,
    "re": sp.re,
    "im": sp.im,
    "LambertW": sp.LambertW,
}


class CasError(RuntimeError):
    """Raised when the computer-algebra backend cannot complete an operation."""


class ComputerAlgebra(Protocol):
    """Narrow string-in, string-out CAS interface."""

    def differentiate(self, expr: str, var: str) -> str: ...

    def integrate(self, expr: str, var: str) -> str: ...

    def solve(self, expr: str, var: str) -> List[str]: ...

    def substitute(self, expr: str, var: str, value: str) -> str: ...

    def to_decimal(self, expr: str) -> float: ...

    def to_display_form(self, expr: str) -> str: ...


class SympyCAS:
    """:class:`ComputerAlgebra` backed by SymPy."""

    def _parse(self, expr: str) -> sp.Expr:
        try:
            return parse_sympy(expr, _CAS_NAMES)
        except EvaluationError as exc:
            raise CasError(str(exc)) from exc

    def differentiate(self, expr: str, var: str) -> str:
        parsed = self._parse(expr)
        return str(sp.diff(parsed, sp.Symbol(var)))

    def integrate(self, expr: str, var: str) -> str:
        parsed = self._parse(expr)
        result = sp.integrate(parsed, sp.Symbol(var))
        if result.has(sp.Integral):
            raise CasError(f"no closed-form antiderivative for '{expr}'")
        return str(result)

    def solve(self, expr: str, var: str) -> List[str]:
        parsed = self._parse(expr)
        try:
            roots = sp.solve(parsed, sp.Symbol(var))
        except (NotImplementedError, ValueError, TypeError) as exc:
            raise CasError(f"cannot solve '{expr}' for {var}: {exc}") from exc
        logger.debug("CAS solve %r -> %s", expr, roots)
        return [str(root) for root in roots]

    def substitute(self, expr: str, var: str, value: str) -> str:
        parsed = self._parse(expr)
        replacement = self._parse(value)
        return str(parsed.subs(sp.Symbol(var), replacement))

    def to_decimal(self, expr: str) -> float:
        parsed = self._parse(expr)
        try:
            value = complex(sp.N(parsed))
        except (TypeError, ValueError) as exc:
            raise CasError(f"'{expr}' has no numeric value") from exc
        if abs(value.imag) > 1e-12:
            return math.nan
        return value.real

    def to_display_form(self, expr: str) -> str:
        return sp.latex(self._parse(expr))


_DEFAULT_CAS = SympyCAS()


def default_cas() -> ComputerAlgebra:
    return _DEFAULT_CAS


__all__ = ["CasError", "ComputerAlgebra", "SympyCAS", "default_cas"]
