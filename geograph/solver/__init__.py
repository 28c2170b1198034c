"""Solver façade: scene resolution plus the standalone root and intersection finders."""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence, Tuple

from ..cas import ComputerAlgebra
from ..model import (
    Construction,
    CriticalKind,
    CurveDefinition,
    Parameter,
    ResolvedPoint,
    RootResult,
)
from .config import EngineConfig, get_engine_config, set_engine_config
from .intersection import solve_intersection as _solve_intersection
from .numeric import solve_numeric as _solve_numeric
from .resolver import resolve_scene as _resolve_scene
from .symbolic import solve_symbolic as _solve_symbolic

logger = logging.getLogger(__name__)


def resolve_scene(
    curves: Sequence[CurveDefinition],
    parameters: Sequence[Parameter],
    constructions: Sequence[Construction],
    precision: int = 2,
    bounds: Tuple[float, float] = (-10.0, 10.0),
    cas: Optional[ComputerAlgebra] = None,
) -> List[ResolvedPoint]:
    """Return the concrete points of the scene for the current inputs."""

    logger.info(
        "Resolving scene with %d curves, %d parameters and %d constructions",
        len(curves),
        len(parameters),
        len(constructions),
    )
    points = _resolve_scene(curves, parameters, constructions, precision, bounds, cas)
    logger.info("Resolved %d points", len(points))
    return points


def solve_numeric(
    expression: str,
    subtype: CriticalKind,
    target_x: float,
    parameters: Sequence[Parameter],
    precision: int = 2,
    scope: Optional[Mapping[str, float]] = None,
) -> Optional[RootResult]:
    logger.info("Searching %s of %r near x=%s", subtype, expression, target_x)
    return _solve_numeric(expression, subtype, target_x, parameters, precision, scope)


def solve_symbolic(
    expression: str,
    subtype: CriticalKind,
    parameters: Sequence[Parameter],
    precision: int = 2,
    cas: Optional[ComputerAlgebra] = None,
) -> List[RootResult]:
    results = _solve_symbolic(expression, subtype, parameters, precision, cas=cas)
    logger.info("Symbolic %s search for %r found %d result(s)", subtype, expression, len(results))
    return results


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
    results = _solve_intersection(
        curve_a, curve_b, parameters, precision, bounds, near_x=near_x, scope=scope, cas=cas
    )
    logger.info("Intersection of %s and %s: %d candidate(s)", curve_a.name, curve_b.name, len(results))
    return results


__all__ = [
    "EngineConfig",
    "get_engine_config",
    "resolve_scene",
    "set_engine_config",
    "solve_intersection",
    "solve_numeric",
    "solve_symbolic",
]
