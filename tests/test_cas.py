import math

import pytest

from geograph.cas import CasError, SympyCAS, default_cas


@pytest.fixture
def cas():
    return SympyCAS()


def test_differentiate_and_integrate(cas):
    assert cas.differentiate("x^3", "x") == "3*x**2"
    assert cas.integrate("3*x^2", "x") == "x**3"


def test_integral_without_closed_form_raises(cas):
    with pytest.raises(CasError):
        cas.integrate("x^x", "x")


def test_solve_returns_every_root(cas):
    assert sorted(cas.solve("x^2 - 4", "x")) == ["-2", "2"]


def test_substitute_and_to_decimal(cas):
    assert cas.substitute("x^2 + 1", "x", "3") == "10"
    assert cas.to_decimal("sqrt(2)") == pytest.approx(math.sqrt(2))


def test_complex_values_become_nan(cas):
    assert math.isnan(cas.to_decimal("2*I"))


def test_display_form_is_latex(cas):
    assert cas.to_display_form("sqrt(2)/2") == "\\frac{\\sqrt{2}}{2}"


def test_unparseable_input_raises_cas_error(cas):
    with pytest.raises(CasError):
        cas.differentiate("(x +", "x")


def test_default_cas_is_shared():
    assert default_cas() is default_cas()
