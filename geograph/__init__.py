"""Dependency-resolved geometric and numeric engine for an interactive grapher."""

from .cas import CasError, ComputerAlgebra, SympyCAS, default_cas
from .consistency import SceneWarning, check_scene
from .contour import ContourResult, Viewport, extract_contour
from .curves import derive_curve, update_curve_expression
from .expressions import (
    EvaluationError,
    compile_expression,
    evaluate,
    evaluate_grid,
    sanitize_expression,
    split_relation,
    substitute_parameters,
    try_evaluate,
)
from .formatting import best_display, format_decimal, format_nicest, point_caption
from .geometry import (
    LineEquation,
    LineGeometry,
    TangentGeometry,
    line_geometry,
    parse_line_equation,
    polygon_vertices,
    project_onto_equation,
    tangent_geometry,
)
from .labels import next_line_label, next_point_label
from .logging_utils import configure_logging
from .model import (
    Construction,
    CriticalPoint,
    CurveDefinition,
    ExpressionPoint,
    FreePoint,
    IntersectionPoint,
    Line,
    Parameter,
    PointOnCurve,
    Polygon,
    Ray,
    ResolvedPoint,
    RootResult,
    Segment,
    SlopeValue,
    TangentLine,
    references,
)
from .parameters import detect_parameters, remove_parameter, set_parameter
from .pruning import prune_dependents, remove_with_dependents
from .solver import (
    EngineConfig,
    get_engine_config,
    resolve_scene,
    set_engine_config,
    solve_intersection,
    solve_numeric,
    solve_symbolic,
)
from .solver.scope import build_scope, object_slope

__all__ = [
    "CasError",
    "ComputerAlgebra",
    "Construction",
    "ContourResult",
    "CriticalPoint",
    "CurveDefinition",
    "EngineConfig",
    "EvaluationError",
    "ExpressionPoint",
    "FreePoint",
    "IntersectionPoint",
    "Line",
    "LineEquation",
    "LineGeometry",
    "Parameter",
    "PointOnCurve",
    "Polygon",
    "Ray",
    "ResolvedPoint",
    "RootResult",
    "SceneWarning",
    "Segment",
    "SlopeValue",
    "SympyCAS",
    "TangentGeometry",
    "TangentLine",
    "Viewport",
    "best_display",
    "build_scope",
    "check_scene",
    "compile_expression",
    "configure_logging",
    "default_cas",
    "derive_curve",
    "detect_parameters",
    "evaluate",
    "evaluate_grid",
    "extract_contour",
    "format_decimal",
    "format_nicest",
    "get_engine_config",
    "line_geometry",
    "next_line_label",
    "next_point_label",
    "object_slope",
    "parse_line_equation",
    "point_caption",
    "polygon_vertices",
    "project_onto_equation",
    "prune_dependents",
    "references",
    "remove_parameter",
    "remove_with_dependents",
    "resolve_scene",
    "sanitize_expression",
    "set_engine_config",
    "set_parameter",
    "solve_intersection",
    "solve_numeric",
    "solve_symbolic",
    "split_relation",
    "substitute_parameters",
    "tangent_geometry",
    "try_evaluate",
    "update_curve_expression",
]
