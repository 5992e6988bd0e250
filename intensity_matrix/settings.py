"""Numeric settings for the matrix engine.

Every constant the transforms depend on (the adaptive search step, its
iteration cap, the resampling clamp bounds, the density normalisation) lives
on :class:`EngineSettings`. Named presets cover the common trade-offs:

- **default**: 1e-7 search step, 1,000,000 candidates before the width-only
  fallback, integrality tolerant to floating-point noise
- **exact**: same search, but direct-mode dimensions snap only on an exactly
  zero fraction
- **fast**: a coarser, much shorter search for interactive use

Example Usage
-------------

    from intensity_matrix import SETTINGS_PROFILES, load_settings

    settings = SETTINGS_PROFILES["fast"]
    custom = load_settings({"profile": "exact", "clamp-max": 65536.0})
"""
from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

try:  # pragma: no cover - optional dependency
    import yaml
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    yaml = None

LOGGER = logging.getLogger("intensity_matrix")


@dataclasses.dataclass(frozen=True)
class EngineSettings:
    """Configuration constants for scaling, clamping and density projection.

    Attributes:
        name: Preset identifier.
        search_step: Magnitude of each adaptive scale-factor increment.
        iteration_cap: Candidates tested before the width-only fallback applies.
        fallback_limit: Extra candidates allowed after the cap before the
            search gives up and keeps its last candidate.
        integral_tolerance: Distance to the nearest integer still treated as
            integral (0.0 requires an exact zero fraction). The adjusted
            search adds this to half a step of the product.
        clamp_min: Lowest resampled value kept; smaller values become 0.
        clamp_max: Exclusive upper bound for resampled values.
        density_scale: Divisor turning mean intensity into a density ratio.
    """

    name: str = "default"
    search_step: float = 1e-7
    iteration_cap: int = 1_000_000
    fallback_limit: int = 10_000_000
    integral_tolerance: float = 1e-9
    clamp_min: float = 0.0
    clamp_max: float = 10000.0
    density_scale: float = 255.0

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        def ensure_range(name: str, value: float, minimum: float, maximum: float) -> None:
            if not (minimum <= value <= maximum):
                raise ValueError(f"{name} must be between {minimum} and {maximum}, got {value}")

        ensure_range("search_step", self.search_step, 1e-12, 0.1)
        ensure_range("iteration_cap", self.iteration_cap, 1, 1_000_000_000)
        ensure_range("fallback_limit", self.fallback_limit, 0, 1_000_000_000)
        ensure_range("integral_tolerance", self.integral_tolerance, 0.0, 0.01)
        ensure_range("density_scale", self.density_scale, 1e-6, float("inf"))
        if self.clamp_max <= self.clamp_min:
            raise ValueError(
                f"clamp_max must be greater than clamp_min, got {self.clamp_min}..{self.clamp_max}"
            )


DEFAULT_SETTINGS_NAME = "default"

SETTINGS_PROFILES: Dict[str, EngineSettings] = {
    "default": EngineSettings(),
    "exact": EngineSettings(name="exact", integral_tolerance=0.0),
    "fast": EngineSettings(
        name="fast",
        search_step=1e-4,
        iteration_cap=10_000,
        fallback_limit=100_000,
        integral_tolerance=1e-6,
    ),
}


def resolve_settings(settings: Optional[EngineSettings]) -> EngineSettings:
    if settings is None:
        return SETTINGS_PROFILES[DEFAULT_SETTINGS_NAME]
    return settings


def _read_config(path: Path) -> Mapping[str, Any]:
    """Parse a JSON or YAML (``.yaml``/``.yml``) settings file into a mapping."""
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    text = path.read_text()
    if path.suffix.lower() in {".yaml", ".yml"}:
        if yaml is None:
            raise RuntimeError("YAML settings files require the optional 'pyyaml' dependency")
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if not isinstance(data, (Mapping, type(None))):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return data or {}


def load_settings(source: Union[Mapping[str, Any], str, Path]) -> EngineSettings:
    """Build :class:`EngineSettings` from a mapping or a JSON/YAML file.

    A ``profile`` key selects the preset the remaining keys override.

    Args:
        source: Mapping of setting names to values, or a path to a file
            containing one.

    Returns:
        Validated settings instance.

    Raises:
        FileNotFoundError: If *source* names a missing file.
        ValueError: On non-mapping files, unknown profiles or keys, or
            out-of-range values.
    """
    raw = _read_config(Path(source)) if isinstance(source, (str, Path)) else source
    if not all(isinstance(key, str) for key in raw):
        raise ValueError("Setting names must be strings")
    values = {key.replace("-", "_"): value for key, value in raw.items()}

    profile_name = values.pop("profile", DEFAULT_SETTINGS_NAME)
    if profile_name not in SETTINGS_PROFILES:
        raise ValueError(f"Unknown settings profile: {profile_name!r}")
    base = SETTINGS_PROFILES[profile_name]

    known = {field.name for field in dataclasses.fields(EngineSettings)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown setting(s): {', '.join(unknown)}")

    LOGGER.debug("Loading settings from profile '%s' with overrides %s", profile_name, values)
    return dataclasses.replace(base, **values)


__all__ = [
    "DEFAULT_SETTINGS_NAME",
    "EngineSettings",
    "SETTINGS_PROFILES",
    "load_settings",
    "resolve_settings",
]
