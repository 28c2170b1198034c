import pytest

from geograph.model import (
    CriticalPoint,
    CurveDefinition,
    ExpressionPoint,
    FreePoint,
    IntersectionPoint,
    Line,
    Parameter,
    PointOnCurve,
    Polygon,
    SlopeValue,
    TangentLine,
)
from geograph.solver.resolver import resolve_scene


def _by_id(points):
    return {point.id: point for point in points}


def _parabola(cid: int = 1, expression: str = "x^2", **kwargs) -> CurveDefinition:
    return CurveDefinition(id=cid, name=f"f{cid}", expression=expression, **kwargs)


def _rich_scene():
    curves = [_parabola(1, "x^2 - 4"), _parabola(2, "x")]
    params = [Parameter("a", 2.0)]
    constructions = [
        FreePoint("A", 1.0, 2.0, label="A"),
        ExpressionPoint("B", x_expr="x_A + a", y_expr="y_A", label="B"),
        PointOnCurve("C", curve_id=1, x=3.0, label="C"),
        CriticalPoint("Z", curve_id=1, subtype="zero", label="Z"),
        IntersectionPoint("I", curve_id_a=1, curve_id_b=2, near_x=3.0, label="I"),
        Line("r", ("A", "B"), label="r"),
    ]
    return curves, params, constructions


def test_resolution_is_idempotent():
    curves, params, constructions = _rich_scene()
    first = resolve_scene(curves, params, constructions)
    second = resolve_scene(curves, params, constructions)
    assert first == second
    assert len(first) == 6


def test_free_points_come_first_with_captions():
    constructions = [
        ExpressionPoint("B", x_expr="x_A + 1", y_expr="y_A * 2", label="B"),
        FreePoint("A", 1.0, 2.0, label="A"),
    ]
    points = resolve_scene([], [], constructions)
    assert [point.id for point in points] == ["A", "B"]
    assert points[0].latex == "A(1, 2)"
    assert points[0].origin_index == 1
    assert (points[1].x, points[1].y) == (2.0, 4.0)


def test_dependencies_resolve_across_rounds():
    constructions = [
        ExpressionPoint("C", x_expr="x_B + 1", y_expr="y_B", label="C"),
        ExpressionPoint("B", x_expr="x_A + 1", y_expr="y_A", label="B"),
        FreePoint("A", 0.0, 5.0, label="A"),
    ]
    resolved = _by_id(resolve_scene([], [], constructions))
    assert resolved["C"].x == 2.0
    assert resolved["C"].y == 5.0


def test_round_cap_bounds_long_chains():
    constructions = [FreePoint("P0", 0.0, 0.0, label="P0")]
    for idx in range(1, 8):
        constructions.append(
            ExpressionPoint(f"P{idx}", x_expr=f"x_P{idx - 1} + 1", y_expr="0", label=f"P{idx}")
        )
    constructions = [constructions[0]] + list(reversed(constructions[1:]))
    resolved = _by_id(resolve_scene([], [], constructions))
    assert {f"P{idx}" for idx in range(6)} <= set(resolved)
    assert "P6" not in resolved
    assert "P7" not in resolved


def test_mutual_references_stay_unresolved():
    constructions = [
        ExpressionPoint("PA", x_expr="x_PB", y_expr="0", label="PA"),
        ExpressionPoint("PB", x_expr="x_PA", y_expr="0", label="PB"),
    ]
    assert resolve_scene([], [], constructions) == []


def test_expression_point_without_expressions_uses_stored_coordinates():
    points = resolve_scene([], [], [ExpressionPoint("E", x=3.0, y=-1.0)])
    assert (points[0].x, points[0].y) == (3.0, -1.0)
    assert points[0].latex is None


def test_point_on_curve_respects_domain_and_reappears():
    curves = [_parabola(1, "x^2", domain_min="0", domain_max="a")]
    constructions = [PointOnCurve("P", curve_id=1, x=2.0, label="P")]

    narrow = resolve_scene(curves, [Parameter("a", 1.0)], constructions)
    assert narrow == []

    wide = resolve_scene(curves, [Parameter("a", 3.0)], constructions)
    assert len(wide) == 1
    assert wide[0].y == pytest.approx(4.0)
    assert wide[0].latex == "P(2, 4)"


def test_point_on_curve_outside_function_domain_is_dropped():
    curves = [_parabola(1, "sqrt(x)")]
    assert resolve_scene(curves, [], [PointOnCurve("P", curve_id=1, x=-1.0)]) == []


def test_dangling_references_fail_quietly():
    constructions = [
        PointOnCurve("P", curve_id=99, x=1.0),
        IntersectionPoint("I", curve_id_a=1, curve_id_b=98),
        CriticalPoint("Z", curve_id=97, subtype="zero"),
        Line("r", ("missing", "also-missing"), label="r"),
        ExpressionPoint("E", x_expr="m_r", y_expr="0"),
    ]
    assert resolve_scene([_parabola()], [], constructions) == []


def test_multi_result_critical_points_get_indexed_ids():
    curves = [_parabola(1, "x^2 - 4")]
    constructions = [CriticalPoint("Z", curve_id=1, subtype="zero", label="Z")]
    points = resolve_scene(curves, [], constructions)
    assert [point.id for point in points] == ["Z-0", "Z-1"]
    assert [point.label for point in points] == ["Z_1", "Z_2"]
    assert sorted(point.x for point in points) == pytest.approx([-2.0, 2.0])


def test_multi_result_critical_points_are_produced_once():
    curves = [_parabola(1, "x^2 - 4")]
    constructions = [
        CriticalPoint("Z", curve_id=1, subtype="zero", label="Z"),
        ExpressionPoint("late", x_expr="x_B", y_expr="0"),
        ExpressionPoint("B", x_expr="x_A", y_expr="0", label="B"),
        FreePoint("A", 1.0, 1.0, label="A"),
    ]
    ids = [point.id for point in resolve_scene(curves, [], constructions)]
    assert len(ids) == len(set(ids))
    assert ids.count("Z-0") == 1


def test_anchored_critical_point_uses_newton():
    curves = [_parabola(1, "x^2 - 4")]
    constructions = [CriticalPoint("Z", curve_id=1, subtype="zero", near_x=-5.0, label="Z")]
    points = resolve_scene(curves, [], constructions)
    assert [point.id for point in points] == ["Z"]
    assert points[0].x == pytest.approx(-2.0, abs=1e-6)
    assert points[0].latex == "P(-2, 0)"


def test_intersection_point_takes_nearest_candidate():
    curves = [_parabola(1, "x^2"), _parabola(2, "x")]
    constructions = [IntersectionPoint("I", curve_id_a=1, curve_id_b=2, near_x=0.9, label="I")]
    points = resolve_scene(curves, [], constructions)
    assert len(points) == 1
    assert points[0].x == pytest.approx(1.0)
    assert points[0].latex.startswith("I(")


def test_line_slopes_feed_expression_points():
    constructions = [
        FreePoint("A", 0.0, 0.0, label="A"),
        FreePoint("B", 1.0, 2.0, label="B"),
        Line("r", ("A", "B"), label="r"),
        SlopeValue("s", target_id="r", label="k"),
        ExpressionPoint("C", x_expr="m_r", y_expr="declive(r) + k", label="C"),
        Polygon("poly", ("A", "B", "C")),
    ]
    resolved = _by_id(resolve_scene([], [], constructions))
    assert resolved["C"].x == pytest.approx(2.0)
    assert resolved["C"].y == pytest.approx(4.0)
    assert set(resolved) == {"A", "B", "C"}


def test_tangent_through_resolved_point_feeds_scope_next_round():
    curves = [_parabola(1, "x^2")]
    constructions = [
        ExpressionPoint("Q", x_expr="t", y_expr="0", label="Q"),
        PointOnCurve("P", curve_id=1, x=3.0, label="P"),
        TangentLine("t", curve_id=1, through_vertex_id="P", label="t"),
    ]
    resolved = _by_id(resolve_scene(curves, [], constructions))
    assert resolved["Q"].x == pytest.approx(6.0, abs=1e-4)


def test_non_explicit_curves_are_skipped():
    curves = [_parabola(1, "x^2 + y^2 = 1", kind="implicit")]
    constructions = [
        PointOnCurve("P", curve_id=1, x=0.0),
        CriticalPoint("Z", curve_id=1, subtype="zero"),
    ]
    assert resolve_scene(curves, [], constructions) == []


def test_intersection_of_coinciding_curves_stays_unresolved():
    curves = [_parabola(1, "x"), _parabola(2, "abs(x) - abs(x) + x")]
    constructions = [
        IntersectionPoint("I", curve_id_a=1, curve_id_b=2, label="I"),
        IntersectionPoint("J", curve_id_a=1, curve_id_b=2, near_x=0.0, label="J"),
    ]
    assert resolve_scene(curves, [], constructions) == []
