"""Intersections of two explicit curves."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

import numpy as np
import sympy as sp
from scipy.optimize import brentq

from ..cas import CasError, ComputerAlgebra, default_cas
from ..expressions import CompiledExpression, EvaluationError, compile_expression, substitute_parameters
from ..formatting import best_display, format_decimal, format_nicest
from ..model import CurveDefinition, Parameter, RootResult
from .config import EngineConfig, active_config
from .utils import parameters_then_scope

logger = logging.getLogger(__name__)

_LONG_DIGITS_RE = re.compile(r"\d{5,}")
_ROOT_RESIDUAL = 1e-6


@dataclass
class _Candidate:
    x: float
    y: float
    latex: Optional[str] = None


class _CandidateSet:
    """Accepts candidate roots once per fingerprint, with ``y`` from curve A."""

    def __init__(self, curve_a: CompiledExpression, scope: Dict[str, float], decimals: int) -> None:
        self._curve_a = curve_a
        self._scope = scope
        self._decimals = decimals
        self._seen: Set[str] = set()
        self.items: List[_Candidate] = []

    def add(self, x: float, latex: Optional[str] = None) -> None:
        if not math.isfinite(x):
            return
        fingerprint = f"{x:.{self._decimals}f}"
        if fingerprint in self._seen:
            return
        self._seen.add(fingerprint)
        try:
            y = self._curve_a.evaluate(self._scope, x=x)
        except EvaluationError as exc:
            logger.debug("Dropped intersection candidate x=%.6g: %s", x, exc)
            return
        self.items.append(_Candidate(x=x, y=y, latex=latex))


def _symbolic_roots(cas: ComputerAlgebra, difference: str, candidates: _CandidateSet) -> None:
    try:
        roots = cas.solve(difference, "x")
    except (CasError, EvaluationError) as exc:
        logger.debug("CAS could not solve %r: %s", difference, exc)
        return
    for root in roots:
        try:
            x = cas.to_decimal(root)
            latex = cas.to_display_form(root)
        except (CasError, EvaluationError) as exc:
            logger.debug("Skipping CAS root %r: %s", root, exc)
            continue
        if not math.isfinite(x):
            continue
        candidates.add(x, None if _LONG_DIGITS_RE.search(latex) else latex)


def _scan_roots(
    difference: CompiledExpression,
    scope: Mapping[str, float],
    bounds: Tuple[float, float],
    cfg: EngineConfig,
    candidates: _CandidateSet,
) -> None:
    """Bracket sign changes of ``difference`` over ``bounds`` and refine them with Brent's method."""

    lo, hi = float(min(bounds)), float(max(bounds))
    if not hi > lo:
        return
    xs = np.linspace(lo, hi, cfg.intersection_scan_samples + 1)
    try:
        values = difference.evaluate_grid(scope, xs, np.zeros_like(xs))
    except EvaluationError as exc:
        logger.debug("Intersection scan unavailable: %s", exc)
        return

    def g(x: float) -> float:
        return difference.evaluate(scope, x=x)

    # a run of zero samples is an overlap, not a crossing
    zero = values == 0.0
    before = np.concatenate(([False], zero[:-1]))
    after = np.concatenate((zero[1:], [False]))
    roots: List[float] = [float(x) for x in xs[zero & ~before & ~after]]

    for left, right, v_left, v_right in zip(xs[:-1], xs[1:], values[:-1], values[1:]):
        if not (np.isfinite(v_left) and np.isfinite(v_right)):
            continue
        if v_left * v_right >= 0.0:
            continue
        try:
            root = brentq(g, float(left), float(right), xtol=1e-12)
            residual = abs(g(root))
        except (ValueError, RuntimeError, EvaluationError) as exc:
            logger.debug("Brent refinement failed on [%.4g, %.4g]: %s", left, right, exc)
            continue
        # sign changes across poles are not roots
        if residual < _ROOT_RESIDUAL:
            roots.append(float(root))
    for root in sorted(roots):
        candidates.add(root)


def _intersection_label(candidate: _Candidate, precision: int) -> str:
    x_text = candidate.latex or format_nicest(candidate.x, precision)
    heuristic = best_display(candidate.y, "", precision)
    if "\\" in heuristic or "pi" in heuristic:
        y_text = heuristic
    else:
        y_text = f"\\approx {format_decimal(candidate.y, precision)}"
    return f"I({x_text}, {y_text})"


def solve_intersection(
    curve_a: CurveDefinition,
    curve_b: CurveDefinition,
    parameters: Sequence[Parameter],
    precision: int = 2,
    bounds: Tuple[float, float] = (-10.0, 10.0),
    near_x: Optional[float] = None,
    scope: Optional[Mapping[str, float]] = None,
    cas: Optional[ComputerAlgebra] = None,
) -> List[RootResult]:
    """Intersect two distinct explicit curves.

    Coinciding curves have no isolated intersections and yield nothing.
    Otherwise the CAS solves ``a - b = 0`` first; when it yields nothing usable the
    difference is scanned across ``bounds``.  With ``near_x`` only the
    closest candidate survives, and only within the proximity threshold.
    """

    if curve_a.id == curve_b.id:
        return []
    if curve_a.kind != "explicit" or curve_b.kind != "explicit":
        logger.debug("Intersection of %s and %s skipped: both curves must be explicit", curve_a.name, curve_b.name)
        return []

    cas = cas or default_cas()
    cfg = active_config()
    combined = parameters_then_scope(parameters, scope)
    try:
        expr_a = substitute_parameters(curve_a.expression, parameters)
        expr_b = substitute_parameters(curve_b.expression, parameters)
        difference = f"({expr_a}) - ({expr_b})"
        compiled_a = compile_expression(expr_a)
        compiled_difference = compile_expression(difference)
    except EvaluationError as exc:
        logger.debug("Intersection of %s and %s skipped: %s", curve_a.name, curve_b.name, exc)
        return []
    if sp.simplify(compiled_difference.expr) == 0:
        logger.debug("Curves %s and %s coincide; no isolated intersections", curve_a.name, curve_b.name)
        return []

    candidates = _CandidateSet(compiled_a, combined, cfg.intersection_fingerprint_decimals)
    _symbolic_roots(cas, difference, candidates)
    if not candidates.items:
        _scan_roots(compiled_difference, combined, bounds, cfg, candidates)

    chosen = candidates.items
    if near_x is not None:
        chosen = sorted(chosen, key=lambda item: abs(item.x - near_x))
        if chosen and abs(chosen[0].x - near_x) < cfg.intersection_proximity:
            chosen = chosen[:1]
        else:
            chosen = []

    return [RootResult(x=item.x, y=item.y, latex=_intersection_label(item, precision)) for item in chosen]


__all__ = ["solve_intersection"]
