"""Marching-squares extraction of implicit curves and inequality regions.

The field ``F(x, y)`` is sampled on a square screen-space grid.  Cell
corners are numbered clockwise from the top-left (``TL=1, TR=2, BR=4,
BL=8``) and a corner's bit is set when it is "inside".  Inequalities yield
filled polygons per cell plus a boundary outline; equalities yield the
outline only.  Cells touching an undefined sample are skipped.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .expressions import EvaluationError, compile_expression, split_relation
from .logging_utils import debug_log_call
from .solver.config import active_config

logger = logging.getLogger(__name__)

ScreenPoint = Tuple[float, float]
Segment2D = Tuple[ScreenPoint, ScreenPoint]

_DEGENERATE_EPS = 1e-9
_INEQUALITIES = ("<", "<=", ">", ">=")

# corner/edge keys: TL TR BR BL are cell corners, T R B L the interpolated edge points
_FILL_CASES: Dict[int, Tuple[Tuple[str, ...], ...]] = {
    1: (("TL", "T", "L"),),
    2: (("TR", "R", "T"),),
    3: (("TL", "TR", "R", "L"),),
    4: (("R", "BR", "B"),),
    5: (("TL", "T", "L"), ("R", "BR", "B")),
    6: (("TR", "BR", "B", "T"),),
    7: (("TL", "TR", "BR", "B", "L"),),
    8: (("L", "B", "BL"),),
    9: (("TL", "T", "B", "BL"),),
    10: (("TR", "R", "T"), ("L", "B", "BL")),
    11: (("TL", "TR", "R", "B", "BL"),),
    12: (("L", "R", "BR", "BL"),),
    13: (("TL", "T", "R", "BR", "BL"),),
    14: (("T", "TR", "BR", "BL", "L"),),
    15: (("TL", "TR", "BR", "BL"),),
}

_OUTLINE_CASES: Dict[int, Tuple[Tuple[str, str], ...]] = {
    1: (("L", "T"),),
    2: (("T", "R"),),
    3: (("L", "R"),),
    4: (("R", "B"),),
    5: (("L", "T"), ("R", "B")),
    6: (("T", "B"),),
    7: (("L", "B"),),
    8: (("L", "B"),),
    9: (("B", "T"),),
    10: (("B", "R"), ("T", "L")),
    11: (("B", "R"),),
    12: (("R", "L"),),
    13: (("R", "T"),),
    14: (("T", "L"),),
}


@dataclass(frozen=True)
class Viewport:
    """World window centred on ``(center_x, center_y)`` with pixels-per-unit scales."""

    center_x: float
    center_y: float
    scale_x: float
    scale_y: float
    width: int
    height: int

    def world_to_screen(self, x: float, y: float) -> ScreenPoint:
        return (
            (x - self.center_x) * self.scale_x + self.width / 2,
            self.height / 2 - (y - self.center_y) * self.scale_y,
        )

    def screen_to_world(self, sx: float, sy: float) -> ScreenPoint:
        return (
            (sx - self.width / 2) / self.scale_x + self.center_x,
            (self.height / 2 - sy) / self.scale_y + self.center_y,
        )

    def x_bounds(self) -> Tuple[float, float]:
        left, _ = self.screen_to_world(0.0, 0.0)
        right, _ = self.screen_to_world(float(self.width), 0.0)
        return left, right


@dataclass
class ContourResult:
    segments: List[Segment2D] = field(default_factory=list)
    polygons: List[List[ScreenPoint]] = field(default_factory=list)
    dashed: bool = False
    operator: Optional[str] = None


def interpolation_fraction(a: float, b: float) -> float:
    """Fraction along ``a -> b`` where the field crosses zero; ``0.5`` when flat."""

    if abs(b - a) < _DEGENERATE_EPS:
        return 0.5
    return -a / (b - a)


def _membership(operator: Optional[str]) -> Callable[[np.ndarray], np.ndarray]:
    if operator is not None and "<" in operator:
        return lambda values: values < 0
    return lambda values: values > 0


def _cell_cases(inside: np.ndarray) -> np.ndarray:
    return (
        inside[:-1, :-1].astype(np.int8)
        | (inside[:-1, 1:].astype(np.int8) << 1)
        | (inside[1:, 1:].astype(np.int8) << 2)
        | (inside[1:, :-1].astype(np.int8) << 3)
    )


def _cell_points(values: np.ndarray, row: int, col: int, res: float) -> Dict[str, ScreenPoint]:
    v0 = float(values[row, col])
    v1 = float(values[row, col + 1])
    v2 = float(values[row + 1, col + 1])
    v3 = float(values[row + 1, col])
    x0, y0 = col * res, row * res
    return {
        "TL": (x0, y0),
        "TR": (x0 + res, y0),
        "BR": (x0 + res, y0 + res),
        "BL": (x0, y0 + res),
        "T": (x0 + interpolation_fraction(v0, v1) * res, y0),
        "R": (x0 + res, y0 + interpolation_fraction(v1, v2) * res),
        "B": (x0 + interpolation_fraction(v3, v2) * res, y0 + res),
        "L": (x0, y0 + interpolation_fraction(v0, v3) * res),
    }


def sample_field(
    expression: str, viewport: Viewport, scope: Mapping[str, float], cell_size: int
) -> np.ndarray:
    """Sample ``expression`` at every grid node; rows follow screen ``y``."""

    cols = math.ceil(viewport.width / cell_size) + 1
    rows = math.ceil(viewport.height / cell_size) + 1
    sx = np.arange(cols, dtype=float) * cell_size
    sy = np.arange(rows, dtype=float) * cell_size
    wx = (sx - viewport.width / 2) / viewport.scale_x + viewport.center_x
    wy = (viewport.height / 2 - sy) / viewport.scale_y + viewport.center_y
    grid_x, grid_y = np.meshgrid(wx, wy)
    return compile_expression(expression).evaluate_grid(scope, grid_x, grid_y)


def march(values: np.ndarray, operator: Optional[str], cell_size: float) -> ContourResult:
    """Run the case tables over a sampled field."""

    is_inequality = operator in _INEQUALITIES
    result = ContourResult(operator=operator, dashed=operator in ("<", ">"))
    if values.shape[0] < 2 or values.shape[1] < 2:
        return result

    defined = np.isfinite(values)
    usable = defined[:-1, :-1] & defined[:-1, 1:] & defined[1:, 1:] & defined[1:, :-1]
    filled = np.nan_to_num(values, nan=0.0)

    inside = _membership(operator)(filled) & defined
    region_cases = _cell_cases(inside)
    outline_cases = region_cases if is_inequality else _cell_cases((filled > 0) & defined)

    for row, col in zip(*np.nonzero(usable & ((region_cases != 0) | (outline_cases != 0)))):
        points = _cell_points(values, int(row), int(col), cell_size)
        if is_inequality:
            for shape in _FILL_CASES.get(int(region_cases[row, col]), ()):
                result.polygons.append([points[key] for key in shape])
        for start, end in _OUTLINE_CASES.get(int(outline_cases[row, col]), ()):
            result.segments.append((points[start], points[end]))
    return result


@debug_log_call(logger, log_result=False)
def extract_contour(
    expression: str,
    viewport: Viewport,
    scope: Mapping[str, float],
    cell_size: Optional[int] = None,
) -> ContourResult:
    """Trace ``F(x, y) [op] 0`` across the viewport in screen coordinates.

    ``expression`` may hold a relation (``x^2 + y^2 = 4``, ``y < x``) or a
    bare field, which is treated as ``= 0``.  An expression that cannot be
    sampled yields an empty result.
    """

    res = int(cell_size or active_config().contour_cell_size)
    field_expr, operator = split_relation(expression)
    try:
        values = sample_field(field_expr, viewport, scope, res)
    except EvaluationError as exc:
        logger.debug("Contour of %r unavailable: %s", expression, exc)
        return ContourResult(operator=operator, dashed=operator in ("<", ">"))
    result = march(values, operator, float(res))
    logger.debug(
        "Contour of %r: %d segments, %d fill polygons", expression, len(result.segments), len(result.polygons)
    )
    return result


def segments_to_world(segments: Sequence[Segment2D], viewport: Viewport) -> List[Segment2D]:
    return [(viewport.screen_to_world(*start), viewport.screen_to_world(*end)) for start, end in segments]


__all__ = [
    "ContourResult",
    "Viewport",
    "extract_contour",
    "interpolation_fraction",
    "march",
    "sample_field",
    "segments_to_world",
]
