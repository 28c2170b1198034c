import pytest

from geograph.model import ExpressionPoint, FreePoint
from geograph.solver import EngineConfig, get_engine_config, resolve_scene, set_engine_config


@pytest.fixture
def restore_config():
    saved = get_engine_config()
    yield
    set_engine_config(saved)


def test_defaults():
    config = EngineConfig()
    assert config.max_resolution_rounds == 5
    assert config.newton_max_iterations == 30
    assert config.newton_tolerance == pytest.approx(1e-7)
    assert config.intersection_proximity == pytest.approx(5.0)
    assert config.derivation_max_depth == 5
    assert config.contour_cell_size == 8


def test_get_returns_a_copy(restore_config):
    config = get_engine_config()
    config.max_resolution_rounds = 1
    assert get_engine_config().max_resolution_rounds == 5


@pytest.mark.parametrize(
    "overrides",
    [{"max_resolution_rounds": 0}, {"newton_tolerance": -1.0}, {"contour_cell_size": 0}],
)
def test_invalid_values_are_rejected(restore_config, overrides):
    with pytest.raises(ValueError):
        set_engine_config(EngineConfig(**overrides))


def test_round_cap_is_configurable(restore_config):
    constructions = [
        ExpressionPoint("C", x_expr="x_B + 1", y_expr="0", label="C"),
        ExpressionPoint("B", x_expr="x_A + 1", y_expr="0", label="B"),
        FreePoint("A", 0.0, 0.0, label="A"),
    ]
    set_engine_config(EngineConfig(max_resolution_rounds=1))
    assert [point.id for point in resolve_scene([], [], constructions)] == ["A", "B"]

    set_engine_config(EngineConfig())
    assert [point.id for point in resolve_scene([], [], constructions)] == ["A", "B", "C"]
