"""Derivative and integral curves kept in sync with their parent."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from .cas import CasError, ComputerAlgebra, default_cas
from .expressions import sanitize_expression
from .model import CurveDefinition, CurveKind, DerivationKind
from .solver.config import active_config

logger = logging.getLogger(__name__)


def _derived_expression(cas: ComputerAlgebra, parent_expression: str, derivation: DerivationKind) -> str:
    source = sanitize_expression(parent_expression)
    if derivation == "derivative":
        return cas.differentiate(source, "x")
    if derivation == "integral":
        return cas.integrate(source, "x")
    raise ValueError(f"unknown derivation {derivation!r}")


def derive_curve(
    parent: CurveDefinition,
    derivation: DerivationKind,
    new_id: int,
    name: str,
    cas: Optional[ComputerAlgebra] = None,
) -> Optional[CurveDefinition]:
    """Build the derivative or antiderivative of ``parent``; ``None`` if the CAS cannot."""

    cas = cas or default_cas()
    try:
        expression = _derived_expression(cas, parent.expression, derivation)
    except CasError as exc:
        logger.debug("No %s for %s: %s", derivation, parent.name, exc)
        return None
    logger.info("Derived %s = %s from %s", name, expression, parent.name)
    return CurveDefinition(
        id=new_id,
        name=name,
        expression=expression,
        kind="explicit",
        derived_from=parent.id,
        derivation=derivation,
    )


def _cascade(
    curves: List[CurveDefinition],
    parent_id: int,
    parent_expression: str,
    depth: int,
    cas: ComputerAlgebra,
) -> List[CurveDefinition]:
    if depth > active_config().derivation_max_depth:
        logger.debug("Derivation cascade stopped at depth %d below curve %s", depth, parent_id)
        return curves
    children = [curve for curve in curves if curve.derived_from == parent_id and curve.derivation]
    for child in children:
        try:
            expression = _derived_expression(cas, parent_expression, child.derivation)  # type: ignore[arg-type]
        except CasError as exc:
            logger.debug("Kept %s unchanged: %s", child.name, exc)
            continue
        if expression == child.expression:
            continue
        curves = [replace(curve, expression=expression) if curve.id == child.id else curve for curve in curves]
        curves = _cascade(curves, child.id, expression, depth + 1, cas)
    return curves


def update_curve_expression(
    curves: Sequence[CurveDefinition],
    curve_id: int,
    expression: str,
    cas: Optional[ComputerAlgebra] = None,
    kind: Optional[CurveKind] = None,
) -> List[CurveDefinition]:
    """Set a curve's expression and refresh every curve derived from it.

    Editing a derived curve detaches it from its parent.
    """

    cas = cas or default_cas()
    clean = sanitize_expression(expression)
    updated = [
        replace(curve, expression=clean, kind=kind or curve.kind, derived_from=None, derivation=None)
        if curve.id == curve_id
        else curve
        for curve in curves
    ]
    if not clean:
        return updated
    return _cascade(updated, curve_id, clean, 0, cas)


__all__ = ["derive_curve", "update_curve_expression"]
