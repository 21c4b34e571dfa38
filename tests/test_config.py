"""Tests for configuration parsing and validation."""

import json

import pytest

from config import Palette, SimulationConfig
from errors import InvalidConfiguration
from utils import load_config


def test_defaults_match_original_application() -> None:
    config = SimulationConfig()
    assert config.g == 1.2
    assert config.friction == 0.005
    assert config.particle_count == 200
    assert config.collision_elasticity == 0.7
    assert config.mouse_strength == 10000
    assert config.palette is Palette.FIREWORKS
    assert not config.paused


def test_from_dict_parses_palette_and_numbers() -> None:
    config = SimulationConfig.from_dict({"g": "2.5", "particle_count": 30, "palette": "Ocean"})
    assert config.g == 2.5
    assert config.particle_count == 30
    assert config.palette is Palette.OCEAN


@pytest.mark.parametrize("params", [
    {"g": -1.0},
    {"friction": 1.0},
    {"friction": -0.1},
    {"particle_count": -5},
    {"collision_elasticity": float("nan")},
    {"mouse_strength": float("inf")},
    {"palette": "sepia"},
    {"g": "heavy"},
    {"paused": "false"},
    {"show_trails": 1},
])
def test_from_dict_rejects_invalid_values(params) -> None:
    with pytest.raises(InvalidConfiguration):
        SimulationConfig.from_dict(params)


def test_with_changes_returns_new_value() -> None:
    config = SimulationConfig()
    changed = config.with_changes(g=0.3)
    assert changed.g == 0.3
    assert config.g == 1.2


def test_palette_cycles() -> None:
    assert Palette.FIREWORKS.next() is Palette.CYBERPUNK
    assert Palette.MONOCHROME.next() is Palette.FIREWORKS


def test_load_config_merges_with_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"simulation": {"g": 0.4}, "run_control": {"strategy": "sequential"}}))

    config = load_config(str(path))

    assert config["simulation"] == {"g": 0.4}
    assert config["run_control"]["strategy"] == "sequential"
    assert config["run_control"]["log_throttle_steps"] == 300
    assert config["logging"]["level"] == "INFO"


def test_load_config_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "absent.json"))


def test_from_dict_accepts_real_booleans() -> None:
    config = SimulationConfig.from_dict({"paused": True, "show_trails": False})
    assert config.paused is True
    assert config.show_trails is False
