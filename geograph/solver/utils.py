"""Utility helpers shared across solver modules."""

from __future__ import annotations

import math
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence

from ..model import CurveDefinition, Parameter, ResolvedPoint

RealFunc = Callable[[float], float]


def coerce_float(text: str) -> Optional[float]:
    """Parse a finite decimal literal such as ``"3"`` or ``"-2.5"``; ``None`` otherwise."""

    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def centered_difference(func: RealFunc, x: float, h: float) -> float:
    return (func(x + h) - func(x - h)) / (2.0 * h)


def second_difference(func: RealFunc, x: float, h: float) -> float:
    return (func(x + h) - 2.0 * func(x) + func(x - h)) / (h * h)


def find_curve(curves: Iterable[CurveDefinition], curve_id: int) -> Optional[CurveDefinition]:
    for curve in curves:
        if curve.id == curve_id:
            return curve
    return None


def find_point(points: Iterable[ResolvedPoint], point_id: object) -> Optional[ResolvedPoint]:
    key = str(point_id)
    for point in points:
        if point.id == key:
            return point
    return None


def parameters_then_scope(
    parameters: Sequence[Parameter], scope: Optional[Mapping[str, float]]
) -> Dict[str, float]:
    """Scope entries layered over parameter values."""

    combined: Dict[str, float] = {param.name: float(param.value) for param in parameters}
    if scope:
        combined.update(scope)
    return combined


def scope_then_parameters(
    parameters: Sequence[Parameter], scope: Optional[Mapping[str, float]]
) -> Dict[str, float]:
    """Parameter values layered over scope entries."""

    combined: Dict[str, float] = dict(scope or {})
    combined.update({param.name: float(param.value) for param in parameters})
    return combined


__all__ = [
    "RealFunc",
    "centered_difference",
    "coerce_float",
    "find_curve",
    "find_point",
    "is_finite",
    "parameters_then_scope",
    "scope_then_parameters",
    "second_difference",
]
