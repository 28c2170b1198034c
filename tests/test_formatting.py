import math

import pytest

from geograph.formatting import best_display, format_decimal, format_nicest, point_caption


@pytest.mark.parametrize(
    "value, expected",
    [
        (math.pi / 2, "\\frac{\\pi}{2}"),
        (-math.pi, "-\\pi"),
        (3 * math.pi / 4, "\\frac{3\\pi}{4}"),
        (1e-8, "0"),
        (2.0004, "2"),
        (-5.0, "-5"),
        (1 / 3, "\\frac{1}{3}"),
        (-0.5, "-\\frac{1}{2}"),
    ],
)
def test_format_nicest(value, expected):
    assert format_nicest(value) == expected


def test_format_nicest_falls_back_to_decimals():
    assert format_nicest(0.123456, precision=3) == "0.123"
    assert format_nicest(1.23456789) == "1.2346"


def test_format_nicest_is_stable_across_calls():
    results = {format_nicest(1 / 3, precision=4) for _ in range(5)}
    assert len(results) == 1


def test_format_nicest_handles_non_finite_values():
    assert format_nicest(math.inf) == "inf"


@pytest.mark.parametrize(
    "value, precision, expected",
    [
        (2.5, 2, "2.5"),
        (3.14159, 2, "3.14"),
        (-1e-12, 4, "0"),
        (-0.0001, 2, "0"),
        (7.0, 3, "7"),
    ],
)
def test_format_decimal(value, precision, expected):
    assert format_decimal(value, precision) == expected


def test_best_display_prefers_exact_heuristic_forms():
    assert best_display(0.5, "1/2") == "\\frac{1}{2}"
    assert best_display(math.pi, "pi") == "\\pi"


def test_best_display_uses_short_symbolic_form():
    assert best_display(math.sqrt(2), "\\sqrt{2}") == "\\sqrt{2}"


def test_best_display_rejects_long_digit_runs():
    assert best_display(1.23456789, "\\frac{123456789}{100000000}") == "1.2346"


def test_point_caption():
    assert point_caption("A", 1.0, 2.5, 2) == "A(1, 2.5)"
