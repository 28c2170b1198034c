from geograph.model import (
    FreePoint,
    IntersectionPoint,
    Line,
    Polygon,
    Segment,
    SlopeValue,
    TangentLine,
)
from geograph.pruning import prune_dependents, remove_with_dependents


def _scene():
    return [
        FreePoint("A", 0.0, 0.0, label="A"),
        FreePoint("B", 1.0, 1.0, label="B"),
        FreePoint("C", 2.0, 0.0, label="C"),
        Line("L", ("A", "B"), label="r"),
        SlopeValue("S", target_id="L", label="m"),
        Segment("BC", ("B", "C")),
        IntersectionPoint("I", curve_id_a=1, curve_id_b=2),
    ]


def test_removing_endpoint_cascades_to_line_and_slope():
    removed = prune_dependents("A", _scene())
    assert removed[0] == "A"
    assert set(removed) == {"A", "L", "S"}


def test_shared_vertex_removes_every_user():
    assert set(prune_dependents("B", _scene())) == {"B", "L", "S", "BC"}


def test_closure_does_not_depend_on_list_order():
    scene = list(reversed(_scene()))
    assert set(prune_dependents("A", scene)) == {"A", "L", "S"}


def test_unknown_target_returns_only_itself():
    assert prune_dependents("nope", _scene()) == ["nope"]


def test_independent_objects_are_kept():
    assert prune_dependents("I", _scene()) == ["I"]


def test_polygons_and_tangents_follow_their_points():
    scene = _scene() + [
        Polygon("P", ("A", "B", "C")),
        TangentLine("T", curve_id=1, through_vertex_id="C", label="t"),
        SlopeValue("TS", target_id="T"),
    ]
    assert set(prune_dependents("C", scene)) == {"C", "BC", "P", "T", "TS"}


def test_remove_with_dependents_leaves_no_dangling_reference():
    remaining = remove_with_dependents("A", _scene())
    ids = {obj.id for obj in remaining}
    assert ids == {"B", "C", "BC", "I"}
