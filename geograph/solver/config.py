"""Configuration helpers for solver components."""

from __future__ import annotations

import copy
from dataclasses import dataclass, fields


@dataclass
class EngineConfig:
    """Bounds and tolerances of the best-effort resolution pipeline."""

    max_resolution_rounds: int = 5
    newton_max_iterations: int = 30
    newton_tolerance: float = 1e-7
    derivative_step: float = 1e-5
    singular_derivative: float = 1e-9
    divergence_limit: float = 1e6
    step_tolerance: float = 1e-9
    curvature_tolerance: float = 1e-5
    intersection_proximity: float = 5.0
    intersection_fingerprint_decimals: int = 3
    intersection_scan_samples: int = 400
    derivation_max_depth: int = 5
    contour_cell_size: int = 8


_POSITIVE_FIELDS = (
    "max_resolution_rounds",
    "newton_max_iterations",
    "derivative_step",
    "intersection_scan_samples",
    "contour_cell_size",
)

_ENGINE_CONFIG = EngineConfig()


def _validate(config: EngineConfig) -> None:
    for name in _POSITIVE_FIELDS:
        value = getattr(config, name)
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value!r}")
    for item in fields(config):
        if getattr(config, item.name) < 0:
            raise ValueError(f"{item.name} must not be negative")


def get_engine_config() -> EngineConfig:
    return copy.deepcopy(_ENGINE_CONFIG)


def set_engine_config(config: EngineConfig) -> None:
    global _ENGINE_CONFIG
    _validate(config)
    _ENGINE_CONFIG = copy.deepcopy(config)


def active_config() -> EngineConfig:
    """Return the installed configuration without copying (read-only use)."""

    return _ENGINE_CONFIG


__all__ = ["EngineConfig", "active_config", "get_engine_config", "set_engine_config"]
