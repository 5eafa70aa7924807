"""Load, validate, and hot-reload the Cyclewise energy engine configuration.

The config lives in ``energy_config.yaml`` alongside this module.  At startup
it is loaded once and cached.  Call ``reload_energy_config()`` to re-read from
disk after a calibration change, no restart required.

Usage::

    from cyclewise.engine.config_loader import get_energy_config

    config = get_energy_config()
    config.base_energy("luteal")          # 55
    config.boost.overloaded_below         # 55
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger("cyclewise.engine.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "energy_config.yaml"

PHASE_NAMES = ("menstrual", "follicular", "ovulation", "luteal")


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class CycleConfig:
    """Cycle phase banding settings."""

    ovulation_window_days: int = 2
    default_phase: str = "follicular"
    min_cycle_days: int = 21
    max_cycle_days: int = 45
    min_menstrual_days: int = 3
    max_menstrual_days: int = 7


@dataclass
class EventImpactConfig:
    """Conversion of event coefficients into energy points."""

    points_per_coefficient: float = 50.0
    default_stress_level: int = 3


@dataclass
class ModifierConfig:
    """Self-report modifiers applied on top of the phase base energy."""

    neutral_level: int = 3
    sleep_points_per_level: float = 5.0
    stress_points_per_level: float = -3.0
    wellness_pivot: float = 60.0
    wellness_factor: float = 0.3


@dataclass
class CoefficientConfig:
    """Reference-table matching and estimation fallbacks."""

    match_threshold: float = 0.70
    fallback_coefficient: float = -0.2
    stress_divisor: float = 5.0
    fuzzy_score_cutoff: float = 85.0
    memo_size: int = 1024


@dataclass
class ForecastConfig:
    default_days: int = 7
    max_days: int = 30


@dataclass
class BoostConfig:
    """Thresholds for the boost rescheduling heuristic.

    Attributes:
        overloaded_below:      Days scoring strictly below this are overloaded.
        high_energy_above:     Days scoring strictly above this can take load.
        min_energy_cost:       Events must cost strictly more points than this.
        max_duration_minutes:  Longer events are never proposed for moving.
        max_suggested_slots:   How many target days to offer.
        fallback_to_best_future_days: Offer the best later days when none
                               clears ``high_energy_above``.
    """

    overloaded_below: float = 55.0
    high_energy_above: float = 70.0
    min_energy_cost: float = 5.0
    max_duration_minutes: float = 180.0
    max_suggested_slots: int = 3
    fallback_to_best_future_days: bool = False


@dataclass
class WellnessIndexConfig:
    """Weights for the self-reported wellness index."""

    energy_weight: float = 30.0
    sleep_weight: float = 20.0
    stress_weight: float = 20.0
    tag_cap: float = 15.0
    rest_band_max: int = 30
    stable_band_max: int = 60
    mood_weights: dict[str, float] = field(default_factory=dict)
    symptom_weights: dict[str, float] = field(default_factory=dict)


@dataclass
class EnergyConfig:
    """Complete, validated energy engine configuration.

    This is the single in-memory representation of energy_config.yaml.
    Every calculator in the engine reads its constants from this object.
    """

    version: str
    cycle: CycleConfig
    phase_base_energy: dict[str, float]
    events: EventImpactConfig
    modifiers: ModifierConfig
    coefficients: CoefficientConfig
    forecast: ForecastConfig
    boost: BoostConfig
    wellness_index: WellnessIndexConfig
    _raw: dict = field(default_factory=dict, repr=False)

    def base_energy(self, phase: str) -> float:
        """Return the 0–100 baseline energy for a cycle phase."""
        return self.phase_base_energy[getattr(phase, "value", phase)]


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when energy_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    try:
        import yaml  # pyyaml
    except ImportError as exc:
        raise ImportError(
            "pyyaml is required for config loading. Install with: pip install pyyaml"
        ) from exc

    if not path.exists():
        raise FileNotFoundError(f"Energy config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> EnergyConfig:
    """Validate the raw YAML dict and construct an EnergyConfig.

    Missing optional keys fall back to the dataclass defaults.  All problems
    are collected and reported together.

    Raises:
        ConfigValidationError: If required fields are missing or invalid.
    """
    errors: list[str] = []

    def _number(section: dict, key: str, default: float, where: str) -> float:
        value = section.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            errors.append(f"{where}.{key} must be a number, got {value!r}")
            return default

    def _flag(section: dict, key: str, default: bool, where: str) -> bool:
        value = section.get(key, default)
        if not isinstance(value, bool):
            errors.append(f"{where}.{key} must be true or false, got {value!r}")
            return default
        return value

    def _weights(section: Any, where: str) -> dict[str, float]:
        if section is None:
            return {}
        if not isinstance(section, dict):
            errors.append(f"{where} must be a mapping of tag→weight")
            return {}
        weights: dict[str, float] = {}
        for tag, value in section.items():
            try:
                weights[str(tag).lower()] = float(value)
            except (TypeError, ValueError):
                errors.append(f"{where}.{tag} must be a number, got {value!r}")
        return weights

    version = str(raw.get("version", "1.0"))

    # ── Cycle ──
    c_raw = raw.get("cycle", {}) or {}
    cl_raw = c_raw.get("cycle_length", {}) or {}
    ml_raw = c_raw.get("menstrual_length", {}) or {}
    default_phase = c_raw.get("default_phase", "follicular")
    if default_phase not in PHASE_NAMES:
        errors.append(f"cycle.default_phase must be one of {PHASE_NAMES}, got {default_phase!r}")
    cycle = CycleConfig(
        ovulation_window_days=int(_number(c_raw, "ovulation_window_days", 2, "cycle")),
        default_phase=default_phase,
        min_cycle_days=int(_number(cl_raw, "min_days", 21, "cycle.cycle_length")),
        max_cycle_days=int(_number(cl_raw, "max_days", 45, "cycle.cycle_length")),
        min_menstrual_days=int(_number(ml_raw, "min_days", 3, "cycle.menstrual_length")),
        max_menstrual_days=int(_number(ml_raw, "max_days", 7, "cycle.menstrual_length")),
    )
    if cycle.ovulation_window_days < 1:
        errors.append("cycle.ovulation_window_days must be at least 1")

    # ── Phase base energy ──
    pb_raw = raw.get("phase_base_energy", {}) or {}
    phase_base_energy: dict[str, float] = {}
    for phase in PHASE_NAMES:
        if phase not in pb_raw:
            errors.append(f"Missing required key '{phase}' in section 'phase_base_energy'")
            continue
        value = _number(pb_raw, phase, 0.0, "phase_base_energy")
        if not (0.0 <= value <= 100.0):
            errors.append(f"phase_base_energy.{phase} = {value} is out of range [0, 100]")
        phase_base_energy[phase] = value

    # ── Events ──
    ev_raw = raw.get("events", {}) or {}
    events = EventImpactConfig(
        points_per_coefficient=_number(ev_raw, "points_per_coefficient", 50.0, "events"),
        default_stress_level=int(_number(ev_raw, "default_stress_level", 3, "events")),
    )

    # ── Modifiers ──
    mod_raw = raw.get("modifiers", {}) or {}
    modifiers = ModifierConfig(
        neutral_level=int(_number(mod_raw, "neutral_level", 3, "modifiers")),
        sleep_points_per_level=_number(mod_raw, "sleep_points_per_level", 5.0, "modifiers"),
        stress_points_per_level=_number(mod_raw, "stress_points_per_level", -3.0, "modifiers"),
        wellness_pivot=_number(mod_raw, "wellness_pivot", 60.0, "modifiers"),
        wellness_factor=_number(mod_raw, "wellness_factor", 0.3, "modifiers"),
    )

    # ── Coefficients ──
    co_raw = raw.get("coefficients", {}) or {}
    coefficients = CoefficientConfig(
        match_threshold=_number(co_raw, "match_threshold", 0.70, "coefficients"),
        fallback_coefficient=_number(co_raw, "fallback_coefficient", -0.2, "coefficients"),
        stress_divisor=_number(co_raw, "stress_divisor", 5.0, "coefficients"),
        fuzzy_score_cutoff=_number(co_raw, "fuzzy_score_cutoff", 85.0, "coefficients"),
        memo_size=int(_number(co_raw, "memo_size", 1024, "coefficients")),
    )
    if not (0.0 < coefficients.match_threshold <= 1.0):
        errors.append(
            f"coefficients.match_threshold = {coefficients.match_threshold} is out of range (0, 1]"
        )
    if not (-1.0 <= coefficients.fallback_coefficient <= 1.0):
        errors.append(
            f"coefficients.fallback_coefficient = {coefficients.fallback_coefficient} "
            "is out of range [-1, 1]"
        )
    if coefficients.stress_divisor == 0:
        errors.append("coefficients.stress_divisor must not be zero")
    if not (0.0 < coefficients.fuzzy_score_cutoff <= 100.0):
        errors.append(
            f"coefficients.fuzzy_score_cutoff = {coefficients.fuzzy_score_cutoff} "
            "is out of range (0, 100]"
        )
    if coefficients.memo_size < 1:
        errors.append("coefficients.memo_size must be at least 1")

    # ── Forecast ──
    fc_raw = raw.get("forecast", {}) or {}
    forecast = ForecastConfig(
        default_days=int(_number(fc_raw, "default_days", 7, "forecast")),
        max_days=int(_number(fc_raw, "max_days", 30, "forecast")),
    )
    if not (1 <= forecast.default_days <= forecast.max_days):
        errors.append("forecast.default_days must be between 1 and forecast.max_days")

    # ── Boost ──
    b_raw = raw.get("boost", {}) or {}
    boost = BoostConfig(
        overloaded_below=_number(b_raw, "overloaded_below", 55.0, "boost"),
        high_energy_above=_number(b_raw, "high_energy_above", 70.0, "boost"),
        min_energy_cost=_number(b_raw, "min_energy_cost", 5.0, "boost"),
        max_duration_minutes=_number(b_raw, "max_duration_minutes", 180.0, "boost"),
        max_suggested_slots=int(_number(b_raw, "max_suggested_slots", 3, "boost")),
        fallback_to_best_future_days=_flag(b_raw, "fallback_to_best_future_days", False, "boost"),
    )
    if boost.overloaded_below > boost.high_energy_above:
        errors.append("boost.overloaded_below must not exceed boost.high_energy_above")
    if boost.max_suggested_slots < 1:
        errors.append("boost.max_suggested_slots must be at least 1")

    # ── Wellness index ──
    wi_raw = raw.get("wellness_index", {}) or {}
    w_raw = wi_raw.get("weights", {}) or {}
    bands_raw = wi_raw.get("bands", {}) or {}
    wellness_index = WellnessIndexConfig(
        energy_weight=_number(w_raw, "energy", 30.0, "wellness_index.weights"),
        sleep_weight=_number(w_raw, "sleep_quality", 20.0, "wellness_index.weights"),
        stress_weight=_number(w_raw, "stress", 20.0, "wellness_index.weights"),
        tag_cap=_number(wi_raw, "tag_cap", 15.0, "wellness_index"),
        rest_band_max=int(_number(bands_raw, "rest", 30, "wellness_index.bands")),
        stable_band_max=int(_number(bands_raw, "stable", 60, "wellness_index.bands")),
        mood_weights=_weights(wi_raw.get("mood_weights"), "wellness_index.mood_weights"),
        symptom_weights=_weights(wi_raw.get("symptom_weights"), "wellness_index.symptom_weights"),
    )

    if errors:
        raise ConfigValidationError(
            f"energy_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return EnergyConfig(
        version=version,
        cycle=cycle,
        phase_base_energy=phase_base_energy,
        events=events,
        modifiers=modifiers,
        coefficients=coefficients,
        forecast=forecast,
        boost=boost,
        wellness_index=wellness_index,
        _raw=raw,
    )


def load_energy_config(path: Path | None = None) -> EnergyConfig:
    """Load and validate the energy config from disk.

    Args:
        path: Override path to YAML. Uses the bundled energy_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded energy config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: EnergyConfig | None = None
_config_lock = threading.Lock()


def get_energy_config() -> EnergyConfig:
    """Return the global EnergyConfig singleton, loading it on first call."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_energy_config()
    return _config


def reload_energy_config(path: Path | None = None) -> EnergyConfig:
    """Reload the energy config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_energy_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded energy config: %s → %s", old_version, new_config.version)
    return new_config
