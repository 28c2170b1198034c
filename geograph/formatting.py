"""Numeric display heuristics shared by the solvers."""

from __future__ import annotations

import math
import re
from fractions import Fraction
from typing import Optional

ZERO_EPS = 1e-10
SNAP_EPS = 1e-3
PI_DENOMINATORS = (1, 2, 3, 4, 5, 6, 8, 10, 12, 24)
MAX_FRACTION_DENOMINATOR = 20
MAX_FRACTION_NUMERATOR = 1000
DEFAULT_PRECISION = 4

_LONG_DIGITS_RE = re.compile(r"\d{5,}")


def format_decimal(value: float, precision: int = DEFAULT_PRECISION) -> str:
    """Round to ``precision`` decimals and drop trailing zeros."""

    if abs(value) < ZERO_EPS:
        return "0"
    text = f"{value:.{max(int(precision), 0)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in {"-0", ""}:
        return "0"
    return text


def _pi_multiple(value: float) -> Optional[str]:
    for denom in PI_DENOMINATORS:
        ratio = value * denom / math.pi
        n = round(ratio)
        if abs(ratio - n) >= SNAP_EPS:
            continue
        if n == 0:
            return "0"
        numerator = "\\pi" if abs(n) == 1 else f"{abs(n)}\\pi"
        sign = "-" if n < 0 else ""
        if denom == 1:
            return f"{sign}{numerator}"
        return f"{sign}\\frac{{{numerator}}}{{{denom}}}"
    return None


def _small_fraction(value: float) -> Optional[str]:
    frac = Fraction(value).limit_denominator(MAX_FRACTION_DENOMINATOR - 1)
    if abs(float(frac) - value) > 1e-9:
        return None
    if abs(frac.numerator) >= MAX_FRACTION_NUMERATOR:
        return None
    if frac.denominator == 1:
        return str(frac.numerator)
    sign = "-" if frac < 0 else ""
    return f"{sign}\\frac{{{abs(frac.numerator)}}}{{{frac.denominator}}}"


def format_nicest(value: float, precision: Optional[int] = None) -> str:
    """Render ``value`` as an integer, a multiple of pi, a small fraction or a decimal."""

    if abs(value) < ZERO_EPS:
        return "0"
    if not math.isfinite(value):
        return str(value)
    nearest = round(value)
    if abs(value - nearest) < SNAP_EPS:
        return str(int(nearest))
    pi_form = _pi_multiple(value)
    if pi_form is not None:
        return pi_form
    fraction = _small_fraction(value)
    if fraction is not None:
        return fraction
    return format_decimal(value, DEFAULT_PRECISION if precision is None else precision)


def best_display(value: float, symbolic: str = "", precision: Optional[int] = None) -> str:
    """Prefer the heuristic's exact forms, then a short CAS form, then decimals."""

    heuristic = format_nicest(value, precision)
    if "\\" in heuristic or "pi" in heuristic:
        return heuristic
    if symbolic and len(symbolic) < 20 and not _LONG_DIGITS_RE.search(symbolic):
        return symbolic
    return heuristic


def point_caption(label: str, x: float, y: float, precision: int = DEFAULT_PRECISION) -> str:
    return f"{label}({format_decimal(x, precision)}, {format_decimal(y, precision)})"


__all__ = [
    "DEFAULT_PRECISION",
    "PI_DENOMINATORS",
    "best_display",
    "format_decimal",
    "format_nicest",
    "point_caption",
]
