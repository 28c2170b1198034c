"""Geometry of resolved line-likes, tangents and polygons."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import List, Literal, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .expressions import EvaluationError, evaluate
from .formatting import format_decimal
from .model import LINE_LIKE_TYPES, CurveDefinition, LineLike, Polygon, ResolvedPoint, TangentLine
from .solver.config import active_config
from .solver.scope import tangent_anchor
from .solver.utils import centered_difference, coerce_float, find_curve, find_point

logger = logging.getLogger(__name__)

LineKind = Literal["line", "ray", "segment"]
Coord = Tuple[float, float]

_VERTICAL_EPS = 1e-9
_SLOPE_EPS = 1e-9


def equation_string(
    slope: float, intercept: Optional[float], vertical_x: Optional[float] = None, precision: int = 2
) -> str:
    """``y = mx + b`` (or ``x = c``) with unit and zero terms elided."""

    if vertical_x is not None or not math.isfinite(slope):
        return f"x = {format_decimal(vertical_x if vertical_x is not None else math.nan, precision)}"
    b = intercept or 0.0
    if abs(slope) < _SLOPE_EPS:
        m_text = ""
    elif abs(slope - 1) < _SLOPE_EPS:
        m_text = "x"
    elif abs(slope + 1) < _SLOPE_EPS:
        m_text = "-x"
    else:
        m_text = f"{format_decimal(slope, precision)}x"
    if abs(b) > _SLOPE_EPS:
        sign = "+" if b > 0 else "-"
        magnitude = format_decimal(abs(b), precision)
        if m_text:
            b_text = f" {sign} {magnitude}"
        else:
            b_text = magnitude if b > 0 else f"-{magnitude}"
    else:
        b_text = "" if m_text else "0"
    return f"y = {m_text}{b_text}"


def project_point_to_line(point: Coord, anchor: Coord, direction: Coord, *, clamp: Optional[str] = None) -> Coord:
    """Project ``point`` onto ``anchor + t * direction``, clamping ``t`` for rays and segments."""

    dir_vec = np.asarray(direction, dtype=float)
    denom = float(np.dot(dir_vec, dir_vec))
    if denom <= 1e-12:
        return float(anchor[0]), float(anchor[1])
    rel = np.asarray(point, dtype=float) - np.asarray(anchor, dtype=float)
    t = float(np.dot(rel, dir_vec) / denom)
    if clamp == "segment":
        t = min(max(t, 0.0), 1.0)
    elif clamp == "ray":
        t = max(t, 0.0)
    foot = np.asarray(anchor, dtype=float) + dir_vec * t
    return float(foot[0]), float(foot[1])


@dataclass(frozen=True)
class LineGeometry:
    """A line, ray or segment through two resolved points."""

    start: Coord
    end: Coord
    kind: LineKind = "line"

    @property
    def is_vertical(self) -> bool:
        return abs(self.end[0] - self.start[0]) < _VERTICAL_EPS

    @property
    def slope(self) -> float:
        if self.is_vertical:
            return math.inf
        return (self.end[1] - self.start[1]) / (self.end[0] - self.start[0])

    @property
    def intercept(self) -> Optional[float]:
        if self.is_vertical:
            return None
        return self.start[1] - self.slope * self.start[0]

    def equation(self, precision: int = 2) -> str:
        if self.is_vertical:
            return equation_string(math.inf, None, self.start[0], precision)
        return equation_string(self.slope, self.intercept, None, precision)

    def project(self, x: float, y: float) -> Coord:
        clamp = None if self.kind == "line" else self.kind
        direction = (self.end[0] - self.start[0], self.end[1] - self.start[1])
        return project_point_to_line((x, y), self.start, direction, clamp=clamp)

    def extent(self, x_min: float, x_max: float, y_min: float, y_max: float) -> Tuple[Coord, Coord]:
        """Endpoints to draw inside the given world window."""

        if self.kind == "segment":
            return self.start, self.end
        if self.is_vertical:
            x = self.start[0]
            if self.kind == "ray":
                return self.start, (x, y_max if self.end[1] >= self.start[1] else y_min)
            return (x, y_min), (x, y_max)
        m, b = self.slope, self.intercept or 0.0
        left = (x_min, m * x_min + b)
        right = (x_max, m * x_max + b)
        if self.kind == "ray":
            return self.start, right if self.end[0] >= self.start[0] else left
        return left, right


@dataclass(frozen=True)
class TangentGeometry:
    x: float
    y: float
    slope: float

    @property
    def intercept(self) -> float:
        return self.y - self.slope * self.x

    def equation(self, precision: int = 2) -> str:
        return equation_string(self.slope, self.intercept, None, precision)


@dataclass(frozen=True)
class LineEquation:
    slope: float
    intercept: float
    vertical_x: Optional[float] = None

    @property
    def is_vertical(self) -> bool:
        return self.vertical_x is not None


def line_geometry(obj: LineLike, points: Sequence[ResolvedPoint]) -> Optional[LineGeometry]:
    if not isinstance(obj, LINE_LIKE_TYPES) or len(obj.vertex_ids) != 2:
        return None
    start = find_point(points, obj.vertex_ids[0])
    end = find_point(points, obj.vertex_ids[1])
    if start is None or end is None:
        return None
    kind: LineKind = type(obj).__name__.lower()  # type: ignore[assignment]
    return LineGeometry((start.x, start.y), (end.x, end.y), kind)


def tangent_geometry(
    tangent: TangentLine,
    curves: Sequence[CurveDefinition],
    points: Sequence[ResolvedPoint],
    scope: Mapping[str, float],
) -> Optional[TangentGeometry]:
    curve = find_curve(curves, tangent.curve_id)
    anchor = tangent_anchor(tangent, points)
    if curve is None or curve.kind != "explicit" or anchor is None:
        return None
    try:
        y = evaluate(curve.expression, scope, x=anchor)
        slope = centered_difference(
            lambda t: evaluate(curve.expression, scope, x=t), anchor, active_config().derivative_step
        )
    except EvaluationError as exc:
        logger.debug("Tangent %s has no geometry: %s", tangent.id, exc)
        return None
    return TangentGeometry(anchor, y, slope)


def polygon_vertices(polygon: Polygon, points: Sequence[ResolvedPoint]) -> Optional[List[Coord]]:
    """Vertex coordinates in order, or ``None`` while any vertex is unresolved."""

    if len(polygon.vertex_ids) < 3:
        return None
    coords: List[Coord] = []
    for vertex_id in polygon.vertex_ids:
        point = find_point(points, vertex_id)
        if point is None:
            return None
        coords.append((point.x, point.y))
    return coords


def parse_line_equation(text: str) -> Optional[LineEquation]:
    """Read ``y = <expr in x>`` (linear) or ``x = <number>``."""

    clean = re.sub(r"\s+", "", text or "").lower()
    if clean.startswith("x="):
        value = coerce_float(clean.split("=", 1)[1])
        if value is None:
            return None
        return LineEquation(math.inf, math.nan, value)
    if clean.startswith("y="):
        rhs = clean.split("=", 1)[1]
        try:
            y0 = evaluate(rhs, {}, x=0.0)
            y1 = evaluate(rhs, {}, x=1.0)
        except EvaluationError as exc:
            logger.debug("Cannot read line equation %r: %s", text, exc)
            return None
        return LineEquation(y1 - y0, y0)
    return None


def project_onto_equation(x: float, y: float, equation: Union[str, LineEquation]) -> Optional[Coord]:
    """Foot of the perpendicular from ``(x, y)`` to the line."""

    line = parse_line_equation(equation) if isinstance(equation, str) else equation
    if line is None:
        return None
    if line.is_vertical:
        return float(line.vertical_x), y  # type: ignore[arg-type]
    return project_point_to_line((x, y), (0.0, line.intercept), (1.0, line.slope))


__all__ = [
    "LineEquation",
    "LineGeometry",
    "TangentGeometry",
    "equation_string",
    "line_geometry",
    "parse_line_equation",
    "polygon_vertices",
    "project_onto_equation",
    "project_point_to_line",
    "tangent_geometry",
]
