from typing import List

import pytest

from geograph.cas import CasError, SympyCAS
from geograph.curves import derive_curve, update_curve_expression
from geograph.model import CurveDefinition


class _NoIntegralCAS(SympyCAS):
    def integrate(self, expr: str, var: str) -> str:
        raise CasError("no antiderivative")


def _by_id(curves: List[CurveDefinition]):
    return {curve.id: curve for curve in curves}


def test_derivative_curve():
    child = derive_curve(CurveDefinition(1, "f", "x^2"), "derivative", 2, "f'")
    assert child.expression == "2*x"
    assert child.derived_from == 1
    assert child.derivation == "derivative"
    assert child.kind == "explicit"


def test_integral_curve():
    child = derive_curve(CurveDefinition(1, "f", "2*x"), "integral", 2, "F")
    assert child.expression == "x**2"
    assert child.derivation == "integral"


def test_derivation_failure_returns_none():
    assert derive_curve(CurveDefinition(1, "f", "x"), "integral", 2, "F", cas=_NoIntegralCAS()) is None
    assert derive_curve(CurveDefinition(1, "f", "x^x"), "integral", 2, "F") is None


def test_unknown_derivation_is_rejected():
    with pytest.raises(ValueError):
        derive_curve(CurveDefinition(1, "f", "x"), "limit", 2, "g")  # type: ignore[arg-type]


def test_editing_parent_refreshes_descendants():
    curves = [
        CurveDefinition(1, "f", "x^2"),
        CurveDefinition(2, "g", "2*x", derived_from=1, derivation="derivative"),
        CurveDefinition(3, "h", "2", derived_from=2, derivation="derivative"),
        CurveDefinition(4, "k", "x", kind="explicit"),
    ]
    updated = _by_id(update_curve_expression(curves, 1, "x^3"))
    assert updated[1].expression == "x^3"
    assert updated[2].expression == "3*x**2"
    assert updated[3].expression == "6*x"
    assert updated[4].expression == "x"


def test_editing_derived_curve_detaches_it():
    curves = [
        CurveDefinition(1, "f", "x^2"),
        CurveDefinition(2, "g", "2*x", derived_from=1, derivation="derivative"),
    ]
    updated = _by_id(update_curve_expression(curves, 2, "sen(x)"))
    assert updated[2].expression == "sin(x)"
    assert updated[2].derived_from is None
    assert updated[2].derivation is None

    again = _by_id(update_curve_expression(list(updated.values()), 1, "x^4"))
    assert again[2].expression == "sin(x)"


def test_cascade_depth_is_bounded():
    curves = [CurveDefinition(0, "f0", "x")]
    for level in range(1, 8):
        curves.append(CurveDefinition(level, f"f{level}", "0", derived_from=level - 1, derivation="derivative"))
    updated = _by_id(update_curve_expression(curves, 0, "x^8"))
    assert updated[1].expression == "8*x**7"
    assert updated[6].expression == "20160*x**2"
    assert updated[7].expression == "0"


def test_failing_cas_keeps_child_unchanged():
    curves = [
        CurveDefinition(1, "f", "x"),
        CurveDefinition(2, "F", "x**2/2", derived_from=1, derivation="integral"),
        CurveDefinition(3, "g", "1", derived_from=1, derivation="derivative"),
    ]
    updated = _by_id(update_curve_expression(curves, 1, "3*x", cas=_NoIntegralCAS()))
    assert updated[2].expression == "x**2/2"
    assert updated[3].expression == "3"


def test_kind_can_change_with_expression():
    curves = [CurveDefinition(1, "c", "x")]
    updated = update_curve_expression(curves, 1, "x^2 + y^2 = 1", kind="implicit")
    assert updated[0].kind == "implicit"
