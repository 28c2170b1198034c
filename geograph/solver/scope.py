"""Name -> value scope assembled for each resolution pass.

A scope holds every parameter by name, ``x_<label>``/``y_<label>`` for each
labelled resolved point and the slope of each labelled line-like, tangent or
slope object under four aliases.  Slopes may depend on other slopes (a slope
value of a tangent whose curve mentions another line's slope), so the
evaluation threads an immutable ``visiting`` set through the recursion; an
object already on the chain is skipped instead of re-entered.
"""

from __future__ import annotations

import logging
import math
from typing import AbstractSet, Collection, Dict, FrozenSet, Iterable, Optional, Sequence

from ..expressions import EvaluationError, compile_expression
from ..model import (
    LINE_LIKE_TYPES,
    SLOPE_BEARING_TYPES,
    Construction,
    CurveDefinition,
    ObjectId,
    Parameter,
    ResolvedPoint,
    SlopeValue,
    TangentLine,
)
from .config import active_config
from .utils import centered_difference, find_curve, find_point, is_finite

logger = logging.getLogger(__name__)

_VERTICAL_EPS = 1e-9


def slope_aliases(label: str) -> tuple:
    return (label, f"declive_{label}", f"slope_{label}", f"m_{label}")


def find_construction(constructions: Iterable[Construction], obj_id: ObjectId) -> Optional[Construction]:
    key = str(obj_id)
    for obj in constructions:
        if obj.id == key:
            return obj
    return None


def tangent_anchor(tangent: TangentLine, points: Sequence[ResolvedPoint]) -> Optional[float]:
    """Anchor ``x`` of a tangent: the referenced point's ``x`` when available."""

    if tangent.through_vertex_id is not None:
        point = find_point(points, tangent.through_vertex_id)
        if point is not None:
            return point.x
    return tangent.x


def object_slope(
    obj: Construction,
    parameters: Sequence[Parameter],
    points: Sequence[ResolvedPoint],
    constructions: Sequence[Construction],
    curves: Sequence[CurveDefinition],
    visiting: FrozenSet[ObjectId] = frozenset(),
) -> Optional[float]:
    """Slope of a line-like, tangent or slope object; ``inf`` for vertical lines."""

    if obj.id in visiting:
        return None
    if isinstance(obj, SlopeValue):
        target = find_construction(constructions, obj.target_id)
        if target is None:
            return None
        return object_slope(target, parameters, points, constructions, curves, visiting | {obj.id})
    if isinstance(obj, LINE_LIKE_TYPES):
        if len(obj.vertex_ids) != 2:
            return None
        start = find_point(points, obj.vertex_ids[0])
        end = find_point(points, obj.vertex_ids[1])
        if start is None or end is None:
            return None
        dx = end.x - start.x
        if abs(dx) < _VERTICAL_EPS:
            return math.inf
        return (end.y - start.y) / dx
    if isinstance(obj, TangentLine):
        curve = find_curve(curves, obj.curve_id)
        anchor = tangent_anchor(obj, points)
        if curve is None or anchor is None or curve.kind != "explicit" or not curve.expression:
            return None
        try:
            compiled = compile_expression(curve.expression)
            scope = build_scope(
                parameters,
                points,
                constructions,
                curves,
                visiting | {obj.id},
                names=compiled.names,
            )
            return centered_difference(
                lambda t: compiled.evaluate(scope, x=t), anchor, active_config().derivative_step
            )
        except EvaluationError as exc:
            logger.debug("Tangent %s slope unavailable: %s", obj.id, exc)
            return None
    return None


def build_scope(
    parameters: Sequence[Parameter],
    points: Sequence[ResolvedPoint],
    constructions: Sequence[Construction],
    curves: Sequence[CurveDefinition],
    visiting: AbstractSet[ObjectId] = frozenset(),
    *,
    names: Optional[Collection[str]] = None,
) -> Dict[str, float]:
    """Build the flat scope for one resolution step.

    ``names`` limits slope evaluation to objects whose aliases are requested;
    parameters and point coordinates are always included.
    """

    visiting = frozenset(visiting)
    scope: Dict[str, float] = {param.name: float(param.value) for param in parameters}
    for point in points:
        if point.label:
            scope[f"x_{point.label}"] = point.x
            scope[f"y_{point.label}"] = point.y

    for obj in constructions:
        if not obj.label or obj.id in visiting or not isinstance(obj, SLOPE_BEARING_TYPES):
            continue
        aliases = slope_aliases(obj.label)
        if names is not None and not any(alias in names for alias in aliases):
            continue
        slope = object_slope(obj, parameters, points, constructions, curves, visiting)
        if not is_finite(slope):
            continue
        for alias in aliases:
            scope[alias] = slope
    return scope


__all__ = [
    "build_scope",
    "find_construction",
    "object_slope",
    "slope_aliases",
    "tangent_anchor",
]
