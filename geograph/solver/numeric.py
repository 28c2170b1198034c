"""Newton-Raphson search for the zero, minimum or maximum nearest a target."""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from ..expressions import EvaluationError, compile_expression
from ..formatting import best_display
from ..model import CriticalKind, Parameter, RootResult
from .config import EngineConfig, active_config
from .utils import RealFunc, centered_difference, scope_then_parameters, second_difference

logger = logging.getLogger(__name__)


def critical_label(subtype: CriticalKind, x_text: str, y_text: str) -> str:
    if subtype == "zero":
        return f"P({x_text}, 0)"
    if subtype == "max":
        return f"\\text{{Max}}({x_text}, {y_text})"
    return f"\\text{{Min}}({x_text}, {y_text})"


def _newton(g: RealFunc, start: float, cfg: EngineConfig) -> Optional[float]:
    """Return a root of ``g`` reached from ``start`` or ``None``.

    Raises :class:`EvaluationError` when ``g`` leaves its domain.
    """

    h = cfg.derivative_step
    current = start
    for iteration in range(cfg.newton_max_iterations):
        value = g(current)
        if abs(value) < cfg.newton_tolerance:
            return current
        slope = centered_difference(g, current, h)
        if abs(slope) < cfg.singular_derivative:
            logger.debug("Newton stopped at x=%.6g: near-singular derivative %.3g", current, slope)
            return None
        candidate = current - value / slope
        if abs(candidate - current) < cfg.step_tolerance:
            return candidate
        if abs(candidate) > cfg.divergence_limit:
            logger.debug("Newton diverged after %d iterations (x=%.3g)", iteration + 1, candidate)
            return None
        current = candidate
    logger.debug("Newton did not converge from x=%.6g", start)
    return None


def solve_numeric(
    expression: str,
    subtype: CriticalKind,
    target_x: float,
    parameters: Sequence[Parameter],
    precision: int = 2,
    scope: Optional[Mapping[str, float]] = None,
) -> Optional[RootResult]:
    """Locate the zero, minimum or maximum of ``expression`` nearest ``target_x``.

    For extrema Newton runs on the centred-difference derivative and the
    candidate is rejected when its curvature contradicts ``subtype``.
    Returns ``None`` whenever the search fails for any reason.
    """

    cfg = active_config()
    h = cfg.derivative_step
    try:
        compiled = compile_expression(expression)
    except EvaluationError as exc:
        logger.debug("Numeric solve skipped: %s", exc)
        return None
    values = scope_then_parameters(parameters, scope)

    def f(x: float) -> float:
        return compiled.evaluate(values, x=x)

    if subtype == "zero":
        g = f
    else:

        def g(x: float) -> float:
            return centered_difference(f, x, h)

    try:
        root = _newton(g, float(target_x), cfg)
        if root is None:
            return None
        y = f(root)
        if subtype != "zero":
            curvature = second_difference(f, root, h)
            if subtype == "max" and curvature > cfg.curvature_tolerance:
                logger.debug("Rejected max candidate at x=%.6g (curvature %.3g)", root, curvature)
                return None
            if subtype == "min" and curvature < -cfg.curvature_tolerance:
                logger.debug("Rejected min candidate at x=%.6g (curvature %.3g)", root, curvature)
                return None
    except EvaluationError as exc:
        logger.debug("Numeric solve of %r aborted: %s", expression, exc)
        return None

    label = critical_label(subtype, best_display(root, "", precision), best_display(y, "", precision))
    return RootResult(x=root, y=y, latex=label)


__all__ = ["critical_label", "solve_numeric"]
