from __future__ import annotations

import json
from pathlib import Path

import pytest

from intensity_matrix.settings import (
    DEFAULT_SETTINGS_NAME,
    SETTINGS_PROFILES,
    EngineSettings,
    load_settings,
    resolve_settings,
)


def test_default_settings_carry_engine_constants():
    settings = SETTINGS_PROFILES[DEFAULT_SETTINGS_NAME]

    assert settings.search_step == pytest.approx(1e-7)
    assert settings.iteration_cap == 1_000_000
    assert settings.clamp_min == 0.0
    assert settings.clamp_max == 10000.0
    assert settings.density_scale == 255.0
    assert resolve_settings(None) is settings


@pytest.mark.parametrize(
    "overrides",
    [
        {"search_step": 0.0},
        {"iteration_cap": 0},
        {"fallback_limit": -1},
        {"integral_tolerance": 0.5},
        {"density_scale": 0.0},
        {"clamp_min": 10.0, "clamp_max": 10.0},
    ],
)
def test_invalid_settings_rejected(overrides):
    with pytest.raises(ValueError):
        EngineSettings(**overrides)


def test_settings_are_immutable():
    settings = EngineSettings()

    with pytest.raises(AttributeError):
        settings.search_step = 1.0  # type: ignore[misc]


def test_load_settings_from_mapping_with_profile_and_hyphens():
    settings = load_settings({"profile": "exact", "clamp-max": 500.0})

    assert settings.name == "exact"
    assert settings.integral_tolerance == 0.0
    assert settings.clamp_max == 500.0


def test_load_settings_rejects_unknown_keys():
    with pytest.raises(ValueError, match="Unknown setting"):
        load_settings({"colour_space": "rgb"})


def test_load_settings_rejects_unknown_profile():
    with pytest.raises(ValueError, match="Unknown settings profile"):
        load_settings({"profile": "turbo"})


def test_load_settings_validates_values():
    with pytest.raises(ValueError):
        load_settings({"search-step": 5.0})


def test_load_settings_from_json_file(tmp_path: Path):
    path = tmp_path / "engine.json"
    path.write_text(json.dumps({"profile": "fast", "density-scale": 65535.0}))

    settings = load_settings(path)

    assert settings.name == "fast"
    assert settings.density_scale == 65535.0
    assert settings.iteration_cap == SETTINGS_PROFILES["fast"].iteration_cap


def test_load_settings_from_yaml_file(tmp_path: Path):
    pytest.importorskip("yaml")
    path = tmp_path / "engine.yaml"
    path.write_text("iteration-cap: 5000\nclamp_max: 4096.0\n")

    settings = load_settings(path)

    assert settings.iteration_cap == 5000
    assert settings.clamp_max == 4096.0


def test_load_settings_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.json")


def test_load_settings_requires_mapping(tmp_path: Path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]")

    with pytest.raises(ValueError, match="mapping"):
        load_settings(path)


def test_empty_yaml_file_yields_defaults(tmp_path: Path):
    pytest.importorskip("yaml")
    path = tmp_path / "empty.yml"
    path.write_text("")

    assert load_settings(path) == SETTINGS_PROFILES[DEFAULT_SETTINGS_NAME]


def test_load_settings_rejects_non_string_keys():
    with pytest.raises(ValueError, match="must be strings"):
        load_settings({1: 2})
