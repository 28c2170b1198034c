"""Bounded fixed-point resolution of construction objects into points."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from ..cas import ComputerAlgebra
from ..consistency import check_scene
from ..expressions import EvaluationError, evaluate
from ..formatting import point_caption
from ..logging_utils import debug_log_call
from ..model import (
    Construction,
    CriticalPoint,
    CurveDefinition,
    ExpressionPoint,
    FreePoint,
    IntersectionPoint,
    ObjectId,
    Parameter,
    PointOnCurve,
    ResolvedPoint,
    sub_result_id,
)
from .config import active_config
from .intersection import solve_intersection
from .numeric import solve_numeric
from .scope import build_scope
from .symbolic import solve_symbolic
from .utils import find_curve

logger = logging.getLogger(__name__)

_POINT_PRODUCING = (ExpressionPoint, PointOnCurve, IntersectionPoint, CriticalPoint)


def _captioned(
    obj_id: ObjectId, x: float, y: float, label: Optional[str], index: int, precision: int
) -> ResolvedPoint:
    latex = point_caption(label, x, y, precision) if label else None
    return ResolvedPoint(id=obj_id, x=x, y=y, label=label, origin_index=index, latex=latex)


def _explicit_curve(curves: Sequence[CurveDefinition], curve_id: int) -> Optional[CurveDefinition]:
    curve = find_curve(curves, curve_id)
    if curve is None or curve.kind != "explicit":
        return None
    return curve


def _within_domain(curve: CurveDefinition, x: float, scope: Mapping[str, float]) -> bool:
    """Raise :class:`EvaluationError` when a bound cannot be evaluated."""

    if curve.domain_min and x < evaluate(curve.domain_min, scope):
        return False
    if curve.domain_max and x > evaluate(curve.domain_max, scope):
        return False
    return True


class _SceneResolver:
    """Holds the inputs of one pass; ``attempt`` tries a single construction."""

    def __init__(
        self,
        curves: Sequence[CurveDefinition],
        parameters: Sequence[Parameter],
        constructions: Sequence[Construction],
        precision: int,
        bounds: Tuple[float, float],
        cas: Optional[ComputerAlgebra],
    ) -> None:
        self.curves = curves
        self.parameters = parameters
        self.constructions = constructions
        self.precision = precision
        self.bounds = bounds
        self.cas = cas

    def attempt(
        self, obj: Construction, index: int, points: Sequence[ResolvedPoint]
    ) -> Optional[List[ResolvedPoint]]:
        """Return the points ``obj`` settles to, or ``None`` to retry next round."""

        scope = build_scope(self.parameters, points, self.constructions, self.curves)
        try:
            if isinstance(obj, ExpressionPoint):
                return self._expression_point(obj, index, scope)
            if isinstance(obj, PointOnCurve):
                return self._point_on_curve(obj, index, scope)
        except EvaluationError as exc:
            logger.debug("Object %s unresolved this round: %s", obj.id, exc)
            return None
        if isinstance(obj, IntersectionPoint):
            return self._intersection(obj, index, scope)
        if isinstance(obj, CriticalPoint):
            return self._critical(obj, index, scope)
        return None

    def _expression_point(
        self, obj: ExpressionPoint, index: int, scope: Dict[str, float]
    ) -> List[ResolvedPoint]:
        x = evaluate(obj.x_expr, scope) if obj.x_expr else float(obj.x)
        y = evaluate(obj.y_expr, scope) if obj.y_expr else float(obj.y)
        return [_captioned(obj.id, x, y, obj.label, index, self.precision)]

    def _point_on_curve(
        self, obj: PointOnCurve, index: int, scope: Dict[str, float]
    ) -> Optional[List[ResolvedPoint]]:
        curve = _explicit_curve(self.curves, obj.curve_id)
        if curve is None:
            return None
        x = float(obj.x)
        if not _within_domain(curve, x, scope):
            logger.debug("Point %s at x=%.6g lies outside the domain of %s", obj.id, x, curve.name)
            return None
        y = evaluate(curve.expression, scope, x=x)
        return [_captioned(obj.id, x, y, obj.label, index, self.precision)]

    def _intersection(
        self, obj: IntersectionPoint, index: int, scope: Dict[str, float]
    ) -> Optional[List[ResolvedPoint]]:
        curve_a = find_curve(self.curves, obj.curve_id_a)
        curve_b = find_curve(self.curves, obj.curve_id_b)
        if curve_a is None or curve_b is None:
            return None
        results = solve_intersection(
            curve_a,
            curve_b,
            self.parameters,
            self.precision,
            self.bounds,
            near_x=obj.near_x,
            scope=scope,
            cas=self.cas,
        )
        if not results:
            return None
        first = results[0]
        return [ResolvedPoint(obj.id, first.x, first.y, obj.label, index, first.latex)]

    def _critical(
        self, obj: CriticalPoint, index: int, scope: Dict[str, float]
    ) -> Optional[List[ResolvedPoint]]:
        curve = _explicit_curve(self.curves, obj.curve_id)
        if curve is None:
            return None
        if obj.near_x is not None:
            found = solve_numeric(
                curve.expression, obj.subtype, obj.near_x, self.parameters, self.precision, scope
            )
            if found is None:
                return None
            return [ResolvedPoint(obj.id, found.x, found.y, obj.label, index, found.latex)]

        # settles even when empty so the results are never produced twice
        results = solve_symbolic(curve.expression, obj.subtype, self.parameters, self.precision, cas=self.cas)
        return [
            ResolvedPoint(
                id=sub_result_id(obj.id, n),
                x=result.x,
                y=result.y,
                label=f"{obj.label}_{n + 1}" if obj.label else None,
                origin_index=index,
                latex=result.latex,
            )
            for n, result in enumerate(results)
        ]


@debug_log_call(logger, log_result=False)
def resolve_scene(
    curves: Sequence[CurveDefinition],
    parameters: Sequence[Parameter],
    constructions: Sequence[Construction],
    precision: int = 2,
    bounds: Tuple[float, float] = (-10.0, 10.0),
    cas: Optional[ComputerAlgebra] = None,
) -> List[ResolvedPoint]:
    """Resolve every point-producing construction reachable within the round cap.

    Free points come first.  Each later round retries the still-pending
    objects against a fresh scope and the loop stops as soon as a round adds
    nothing, so cycles and missing references simply stay unresolved.
    """

    cfg = active_config()
    if logger.isEnabledFor(logging.DEBUG):
        for warning in check_scene(curves, constructions):
            logger.debug("Scene warning [%s] %s", warning.kind, warning.message)

    points: List[ResolvedPoint] = []
    settled: Set[ObjectId] = set()
    for index, obj in enumerate(constructions):
        if isinstance(obj, FreePoint) and obj.id not in settled:
            settled.add(obj.id)
            points.append(_captioned(obj.id, float(obj.x), float(obj.y), obj.label, index, precision))

    pending = [(index, obj) for index, obj in enumerate(constructions) if isinstance(obj, _POINT_PRODUCING)]
    resolver = _SceneResolver(curves, parameters, constructions, precision, bounds, cas)
    for round_no in range(cfg.max_resolution_rounds):
        added = 0
        for index, obj in pending:
            if obj.id in settled:
                continue
            produced = resolver.attempt(obj, index, points)
            if produced is None:
                continue
            settled.add(obj.id)
            points.extend(produced)
            added += len(produced)
        logger.debug("Resolution round %d added %d point(s)", round_no + 1, added)
        if not added:
            break

    unresolved = [obj.id for _, obj in pending if obj.id not in settled]
    if unresolved:
        logger.debug("Unresolved after fixed point: %s", ", ".join(unresolved))
    return points


__all__ = ["resolve_scene"]
