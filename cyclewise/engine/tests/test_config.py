"""Tests for energy_config.yaml loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from cyclewise.engine.config_loader import (
    ConfigValidationError,
    EnergyConfig,
    _validate_and_build,
    get_energy_config,
    load_energy_config,
    reload_energy_config,
)

_MINIMAL = {
    "version": "1.0",
    "phase_base_energy": {"menstrual": 40, "follicular": 70, "ovulation": 85, "luteal": 55},
}


class TestConfigLoading:
    """Tests for loading the bundled energy_config.yaml."""

    def test_load_default_config(self, energy_config: EnergyConfig) -> None:
        assert energy_config.version == "1.0"

    def test_phase_base_energy(self, energy_config: EnergyConfig) -> None:
        assert energy_config.base_energy("menstrual") == 40
        assert energy_config.base_energy("follicular") == 70
        assert energy_config.base_energy("ovulation") == 85
        assert energy_config.base_energy("luteal") == 55

    def test_modifier_constants(self, energy_config: EnergyConfig) -> None:
        mc = energy_config.modifiers
        assert mc.neutral_level == 3
        assert mc.sleep_points_per_level == 5
        assert mc.stress_points_per_level == -3
        assert mc.wellness_pivot == 60
        assert mc.wellness_factor == pytest.approx(0.3)
        assert energy_config.events.points_per_coefficient == 50

    def test_coefficient_settings(self, energy_config: EnergyConfig) -> None:
        cc = energy_config.coefficients
        assert cc.match_threshold == pytest.approx(0.70)
        assert cc.fallback_coefficient == pytest.approx(-0.2)
        assert cc.fuzzy_score_cutoff == 85
        assert cc.memo_size == 1024

    def test_boost_thresholds(self, energy_config: EnergyConfig) -> None:
        bc = energy_config.boost
        assert bc.overloaded_below == 55
        assert bc.high_energy_above == 70
        assert bc.min_energy_cost == 5
        assert bc.max_duration_minutes == 180
        assert bc.max_suggested_slots == 3
        assert bc.fallback_to_best_future_days is False

    def test_wellness_tag_weights(self, energy_config: EnergyConfig) -> None:
        wi = energy_config.wellness_index
        assert wi.mood_weights["happy"] == 20
        assert wi.mood_weights["irritable"] == -12
        assert wi.symptom_weights["bloating"] == -8
        assert wi.tag_cap == 15

    def test_singleton_returns_same_object(self) -> None:
        assert get_energy_config() is get_energy_config()


class TestConfigValidation:
    """Tests for config validation logic."""

    def test_valid_minimal_config_uses_defaults(self) -> None:
        config = _validate_and_build(dict(_MINIMAL))
        assert config.forecast.default_days == 7
        assert config.cycle.default_phase == "follicular"
        assert config.wellness_index.mood_weights == {}

    def test_missing_phase_raises(self) -> None:
        raw = {"phase_base_energy": {"menstrual": 40, "follicular": 70, "ovulation": 85}}
        with pytest.raises(ConfigValidationError, match="luteal"):
            _validate_and_build(raw)

    def test_out_of_range_base_energy_raises(self) -> None:
        raw = dict(_MINIMAL, phase_base_energy={**_MINIMAL["phase_base_energy"], "ovulation": 120})
        with pytest.raises(ConfigValidationError, match="out of range"):
            _validate_and_build(raw)

    def test_non_numeric_threshold_raises(self) -> None:
        raw = dict(_MINIMAL, boost={"overloaded_below": "low"})
        with pytest.raises(ConfigValidationError, match="overloaded_below"):
            _validate_and_build(raw)

    @pytest.mark.parametrize("value", ["false", "yes", 0, 1])
    def test_non_boolean_fallback_flag_raises(self, value: object) -> None:
        raw = dict(_MINIMAL, boost={"fallback_to_best_future_days": value})
        with pytest.raises(ConfigValidationError, match="fallback_to_best_future_days"):
            _validate_and_build(raw)

    def test_boolean_fallback_flag_accepted(self) -> None:
        raw = dict(_MINIMAL, boost={"fallback_to_best_future_days": True})
        assert _validate_and_build(raw).boost.fallback_to_best_future_days is True

    @pytest.mark.parametrize("cutoff", [0, 101, "high"])
    def test_bad_fuzzy_cutoff_raises(self, cutoff: object) -> None:
        raw = dict(_MINIMAL, coefficients={"fuzzy_score_cutoff": cutoff})
        with pytest.raises(ConfigValidationError, match="fuzzy_score_cutoff"):
            _validate_and_build(raw)

    def test_inverted_boost_thresholds_raise(self) -> None:
        raw = dict(_MINIMAL, boost={"overloaded_below": 80, "high_energy_above": 70})
        with pytest.raises(ConfigValidationError, match="must not exceed"):
            _validate_and_build(raw)

    def test_unknown_default_phase_raises(self) -> None:
        raw = dict(_MINIMAL, cycle={"default_phase": "winter"})
        with pytest.raises(ConfigValidationError, match="default_phase"):
            _validate_and_build(raw)

    def test_errors_are_collected(self) -> None:
        raw = {
            "phase_base_energy": {},
            "coefficients": {"match_threshold": 2.0},
        }
        with pytest.raises(ConfigValidationError) as exc_info:
            _validate_and_build(raw)
        assert "5 validation error(s)" in str(exc_info.value)

    def test_hot_reload(self, tmp_path: Path) -> None:
        config_file = tmp_path / "energy_config.yaml"
        config_file.write_text(
            """
version: "2.0-test"
phase_base_energy:
  menstrual: 35
  follicular: 70
  ovulation: 85
  luteal: 50
"""
        )
        try:
            new_config = reload_energy_config(path=config_file)
            assert new_config.version == "2.0-test"
            assert get_energy_config().base_energy("luteal") == 50
        finally:
            reload_energy_config()

    def test_malformed_yaml_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "energy_config.yaml"
        config_file.write_text("phase_base_energy: [unclosed")
        with pytest.raises(ConfigValidationError, match="YAML parse error"):
            load_energy_config(path=config_file)

    def test_load_nonexistent_file_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_energy_config(path=Path("/nonexistent/path/energy_config.yaml"))
