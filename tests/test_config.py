import dataclasses

import pytest

from minesweeper_hints import DIFFICULTY_PRESETS, EngineConfig


def test_defaults():
    config = EngineConfig()

    assert config.max_component_size == 20
    assert config.timeout == 5.0
    assert config.fallback_probability == 0.5
    assert config.early_game_fraction == 0.1
    assert config.corner_factor == 0.8
    assert config.edge_factor == 0.9
    assert config.edge_adjustment is True


def test_config_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        EngineConfig().timeout = 1.0  # type: ignore[misc]


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_component_size": 0},
        {"timeout": 0},
        {"timeout": -2.0},
        {"fallback_probability": 1.5},
        {"early_game_fraction": -0.1},
        {"corner_factor": 2.0},
        {"edge_factor": -1.0},
        {"deadline_check_interval": 0},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValueError):
        EngineConfig(**overrides)


def test_from_env_reads_prefixed_variables():
    environ = {
        "MINESWEEPER_HINTS_MAX_COMPONENT_SIZE": "12",
        "MINESWEEPER_HINTS_TIMEOUT": "none",
        "MINESWEEPER_HINTS_EDGE_ADJUSTMENT": "off",
        "MINESWEEPER_HINTS_CORNER_FACTOR": " 0.5 ",
        "UNRELATED": "1",
    }

    config = EngineConfig.from_env(environ=environ)

    assert config.max_component_size == 12
    assert config.timeout is None
    assert config.edge_adjustment is False
    assert config.corner_factor == 0.5
    assert config.edge_factor == 0.9


def test_from_env_custom_prefix():
    config = EngineConfig.from_env("HINTS_", {"HINTS_TIMEOUT": "2.5", "HINTS_EDGE_ADJUSTMENT": "yes"})
    assert config.timeout == 2.5
    assert config.edge_adjustment is True


def test_from_env_reads_process_environment(monkeypatch):
    monkeypatch.setenv("MINESWEEPER_HINTS_FALLBACK_PROBABILITY", "0.25")
    assert EngineConfig.from_env().fallback_probability == 0.25


def test_from_env_rejects_bad_values():
    with pytest.raises(ValueError):
        EngineConfig.from_env(environ={"MINESWEEPER_HINTS_MAX_COMPONENT_SIZE": "many"})
    with pytest.raises(ValueError):
        EngineConfig.from_env(environ={"MINESWEEPER_HINTS_TIMEOUT": "-1"})


def test_difficulty_presets():
    assert DIFFICULTY_PRESETS["beginner"] == (9, 9, 10)
    assert DIFFICULTY_PRESETS["intermediate"] == (16, 16, 40)
    assert DIFFICULTY_PRESETS["expert"] == (30, 16, 99)
