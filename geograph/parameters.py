"""Slider parameters: detection of free symbols, upsert and removal."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Mapping, Optional, Sequence, Set, Union

from .expressions import RESERVED_NAMES, EvaluationError, evaluate, free_symbol_names, parameter_scope
from .model import Construction, CurveDefinition, Parameter
from .solver.scope import slope_aliases

logger = logging.getLogger(__name__)

DEFAULT_VALUE = 1.0
DEFAULT_RANGE = (-5.0, 5.0)
DEFAULT_STEP = 0.1
NEW_RANGE_HALF_WIDTH = 5.0

_RELATION_RE = re.compile(r"[=<>]=?")
_NON_PARAMETERS = frozenset({"x", "y", "pi", "e", "i", "inf", "NaN", "phi"})


def _label_names(constructions: Iterable[Construction]) -> Set[str]:
    names: Set[str] = set()
    for obj in constructions:
        if not obj.label:
            continue
        names.add(obj.label)
        names.update(slope_aliases(obj.label))
        names.add(f"x_{obj.label}")
        names.add(f"y_{obj.label}")
    return names


def detect_parameters(
    expression: str,
    parameters: Sequence[Parameter],
    curves: Sequence[CurveDefinition],
    constructions: Sequence[Construction],
    ignore: Iterable[str] = (),
) -> List[Parameter]:
    """Return new parameters for the unknown free symbols of ``expression``.

    Relations are read as a single expression so both sides contribute.
    """

    if not expression or not expression.strip():
        return []
    text = _RELATION_RE.sub("+", expression)
    try:
        symbols = free_symbol_names(text)
    except EvaluationError as exc:
        logger.debug("Parameter detection skipped for %r: %s", expression, exc)
        return []

    excluded = set(_NON_PARAMETERS) | set(RESERVED_NAMES) | set(ignore)
    excluded.update(curve.name for curve in curves)
    excluded.update(param.name for param in parameters)
    excluded.update(_label_names(constructions))

    found = [
        Parameter(name, DEFAULT_VALUE, DEFAULT_RANGE[0], DEFAULT_RANGE[1], DEFAULT_STEP)
        for name in symbols
        if name not in excluded and not name.startswith("var_")
    ]
    if found:
        logger.info("Detected new parameter(s): %s", ", ".join(param.name for param in found))
    return found


def set_parameter(
    parameters: Sequence[Parameter],
    name: str,
    value: Union[float, str],
    scope: Optional[Mapping[str, float]] = None,
) -> List[Parameter]:
    """Insert or update ``name``; string values are evaluated first.

    A new parameter gets a slider range centred on its value.  Raises
    :class:`EvaluationError` when a string value cannot be evaluated.
    """

    if isinstance(value, str):
        values = dict(parameter_scope(parameters))
        values.update(scope or {})
        number = evaluate(value, values)
    else:
        number = float(value)

    if any(param.name == name for param in parameters):
        return [
            Parameter(p.name, number, p.min, p.max, p.step) if p.name == name else p for p in parameters
        ]
    created = Parameter(name, number, number - NEW_RANGE_HALF_WIDTH, number + NEW_RANGE_HALF_WIDTH, DEFAULT_STEP)
    return list(parameters) + [created]


def remove_parameter(parameters: Sequence[Parameter], name: str) -> List[Parameter]:
    return [param for param in parameters if param.name != name]


__all__ = ["detect_parameters", "remove_parameter", "set_parameter"]
