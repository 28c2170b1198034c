"""CAS-backed enumeration of all zeros and extrema of an explicit curve."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Set

from ..cas import CasError, ComputerAlgebra, default_cas
from ..expressions import EvaluationError, substitute_parameters
from ..formatting import best_display
from ..model import CriticalKind, Parameter, RootResult
from .config import active_config
from .numeric import critical_label

logger = logging.getLogger(__name__)


def _classify(
    cas: ComputerAlgebra, second_derivative: str, root: str, subtype: CriticalKind, threshold: float
) -> bool:
    curvature = cas.to_decimal(cas.substitute(second_derivative, "x", root))
    if subtype == "max":
        return curvature < -threshold
    return curvature > threshold


def solve_symbolic(
    expression: str,
    subtype: CriticalKind,
    parameters: Sequence[Parameter],
    precision: int = 2,
    cas: Optional[ComputerAlgebra] = None,
) -> List[RootResult]:
    """Return every zero (or classified extremum) the CAS can find.

    Parameter values are substituted before solving.  Roots without a finite
    real value are dropped, and so are extrema whose second derivative does
    not agree with ``subtype``.
    """

    cas = cas or default_cas()
    cfg = active_config()
    try:
        target = substitute_parameters(expression, parameters)
        if subtype == "zero":
            equation = target
            second = ""
        else:
            equation = cas.differentiate(target, "x")
            second = cas.differentiate(equation, "x")
        roots = cas.solve(equation, "x")
    except (CasError, EvaluationError) as exc:
        logger.debug("Symbolic %s search for %r failed: %s", subtype, expression, exc)
        return []

    results: List[RootResult] = []
    seen: Set[float] = set()
    for root in roots:
        try:
            x = cas.to_decimal(root)
            if not math.isfinite(x):
                continue
            fingerprint = round(x, cfg.intersection_fingerprint_decimals)
            if fingerprint in seen:
                continue
            if subtype == "zero":
                y, y_text = 0.0, "0"
            else:
                if not _classify(cas, second, root, subtype, cfg.curvature_tolerance):
                    logger.debug("Discarded %s candidate x=%s (curvature mismatch)", subtype, root)
                    continue
                y_expr = cas.substitute(target, "x", root)
                y = cas.to_decimal(y_expr)
                if not math.isfinite(y):
                    continue
                y_text = best_display(y, cas.to_display_form(y_expr), precision)
            x_text = best_display(x, cas.to_display_form(root), precision)
        except (CasError, EvaluationError) as exc:
            logger.debug("Skipping root %r: %s", root, exc)
            continue
        seen.add(fingerprint)
        results.append(RootResult(x=x, y=y, latex=critical_label(subtype, x_text, y_text)))
    return results


__all__ = ["solve_symbolic"]
