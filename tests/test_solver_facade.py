import logging

import pytest

import geograph
from geograph.model import CriticalPoint, CurveDefinition, FreePoint, Parameter


def test_top_level_exports():
    for name in geograph.__all__:
        assert hasattr(geograph, name), name


def test_resolve_scene_logs_summary(caplog):
    curves = [CurveDefinition(1, "f", "x^2 - a")]
    constructions = [
        FreePoint("A", 0.0, 0.0, label="A"),
        CriticalPoint("Z", curve_id=1, subtype="zero", near_x=3.0, label="Z"),
    ]
    with caplog.at_level(logging.INFO, logger="geograph.solver"):
        points = geograph.resolve_scene(curves, [Parameter("a", 4.0)], constructions)

    assert [point.id for point in points] == ["A", "Z"]
    assert points[1].x == pytest.approx(2.0, abs=1e-6)
    messages = [record.getMessage() for record in caplog.records]
    assert "Resolving scene with 1 curves, 1 parameters and 2 constructions" in messages
    assert "Resolved 2 points" in messages


def test_standalone_solvers_are_exposed(caplog):
    with caplog.at_level(logging.INFO, logger="geograph.solver"):
        numeric = geograph.solve_numeric("x^2 - 9", "zero", 2.0, [])
        symbolic = geograph.solve_symbolic("x^2 - 9", "zero", [])
        crossing = geograph.solve_intersection(
            CurveDefinition(1, "f", "x"), CurveDefinition(2, "g", "3"), []
        )

    assert numeric.x == pytest.approx(3.0, abs=1e-6)
    assert sorted(item.x for item in symbolic) == pytest.approx([-3.0, 3.0])
    assert [item.x for item in crossing] == pytest.approx([3.0])
    assert any("found 2 result(s)" in record.getMessage() for record in caplog.records)
