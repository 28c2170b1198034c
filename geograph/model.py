"""Core data structures shared by the resolver, the solvers and the pruner."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple, Union

CurveKind = Literal["explicit", "implicit", "inequality", "vertical", "empty"]
DerivationKind = Literal["derivative", "integral"]
CriticalKind = Literal["zero", "min", "max"]
ObjectId = str


@dataclass(frozen=True)
class Parameter:
    """Named scalar controlled by a slider."""

    name: str
    value: float
    min: float = -5.0
    max: float = 5.0
    step: float = 0.1


@dataclass(frozen=True)
class CurveDefinition:
    """A user function: ``expression`` in ``x`` (and ``y`` for relations)."""

    id: int
    name: str
    expression: str
    kind: CurveKind = "explicit"
    domain_min: Optional[str] = None
    domain_max: Optional[str] = None
    derived_from: Optional[int] = None
    derivation: Optional[DerivationKind] = None


@dataclass(frozen=True)
class FreePoint:
    id: ObjectId
    x: float
    y: float
    label: Optional[str] = None


@dataclass(frozen=True)
class ExpressionPoint:
    """Point whose coordinates are expressions over other named objects.

    A missing expression falls back to the stored coordinate.
    """

    id: ObjectId
    x_expr: Optional[str] = None
    y_expr: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    label: Optional[str] = None


@dataclass(frozen=True)
class PointOnCurve:
    id: ObjectId
    curve_id: int
    x: float
    label: Optional[str] = None


@dataclass(frozen=True)
class TangentLine:
    id: ObjectId
    curve_id: int
    x: Optional[float] = None
    through_vertex_id: Optional[ObjectId] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class Line:
    id: ObjectId
    vertex_ids: Tuple[ObjectId, ...]
    label: Optional[str] = None


@dataclass(frozen=True)
class Ray:
    id: ObjectId
    vertex_ids: Tuple[ObjectId, ...]
    label: Optional[str] = None


@dataclass(frozen=True)
class Segment:
    id: ObjectId
    vertex_ids: Tuple[ObjectId, ...]
    label: Optional[str] = None


@dataclass(frozen=True)
class Polygon:
    id: ObjectId
    vertex_ids: Tuple[ObjectId, ...]
    label: Optional[str] = None


@dataclass(frozen=True)
class IntersectionPoint:
    id: ObjectId
    curve_id_a: int
    curve_id_b: int
    near_x: Optional[float] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class CriticalPoint:
    """Zero, minimum or maximum of a curve.

    Without ``near_x`` every qualifying point is produced.
    """

    id: ObjectId
    curve_id: int
    subtype: CriticalKind
    near_x: Optional[float] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class SlopeValue:
    id: ObjectId
    target_id: ObjectId
    label: Optional[str] = None


Construction = Union[
    FreePoint,
    ExpressionPoint,
    PointOnCurve,
    TangentLine,
    Line,
    Ray,
    Segment,
    Polygon,
    IntersectionPoint,
    CriticalPoint,
    SlopeValue,
]

LineLike = Union[Line, Ray, Segment]
LINE_LIKE_TYPES = (Line, Ray, Segment)
SLOPE_BEARING_TYPES = (Line, Ray, Segment, TangentLine, SlopeValue)


@dataclass(frozen=True)
class ResolvedPoint:
    """Concrete coordinates produced by one resolution pass."""

    id: ObjectId
    x: float
    y: float
    label: Optional[str] = None
    origin_index: int = 0
    latex: Optional[str] = None


@dataclass(frozen=True)
class RootResult:
    """A located zero, extremum or intersection with its display caption."""

    x: float
    y: float
    latex: str


def references(obj: Construction) -> Tuple[ObjectId, ...]:
    """Return the construction ids ``obj`` depends on."""

    if isinstance(obj, (Line, Ray, Segment, Polygon)):
        return tuple(obj.vertex_ids)
    if isinstance(obj, SlopeValue):
        return (obj.target_id,)
    if isinstance(obj, TangentLine):
        return (obj.through_vertex_id,) if obj.through_vertex_id is not None else ()
    if isinstance(obj, (FreePoint, ExpressionPoint, PointOnCurve, IntersectionPoint, CriticalPoint)):
        return ()
    raise TypeError(f"unknown construction type {type(obj).__name__}")


def referenced_curves(obj: Construction) -> Tuple[int, ...]:
    """Return the curve ids ``obj`` depends on."""

    if isinstance(obj, (PointOnCurve, TangentLine, CriticalPoint)):
        return (obj.curve_id,)
    if isinstance(obj, IntersectionPoint):
        return (obj.curve_id_a, obj.curve_id_b)
    if isinstance(obj, (FreePoint, ExpressionPoint, Line, Ray, Segment, Polygon, SlopeValue)):
        return ()
    raise TypeError(f"unknown construction type {type(obj).__name__}")


def sub_result_id(parent_id: ObjectId, index: int) -> ObjectId:
    return f"{parent_id}-{index}"


__all__ = [
    "CurveKind",
    "DerivationKind",
    "CriticalKind",
    "ObjectId",
    "Parameter",
    "CurveDefinition",
    "FreePoint",
    "ExpressionPoint",
    "PointOnCurve",
    "TangentLine",
    "Line",
    "Ray",
    "Segment",
    "Polygon",
    "IntersectionPoint",
    "CriticalPoint",
    "SlopeValue",
    "Construction",
    "LineLike",
    "LINE_LIKE_TYPES",
    "SLOPE_BEARING_TYPES",
    "ResolvedPoint",
    "RootResult",
    "references",
    "referenced_curves",
    "sub_result_id",
]
