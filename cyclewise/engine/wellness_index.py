"""Symptom wellness index.

A 0–100 score derived from one day's self-report::

    score = (energy / 5) * 30
          + (sleep_quality / 5) * 20
          + ((6 - stress_level) / 5) * 20
          + clamp(sum(mood weights), -15, 15)
          + clamp(sum(symptom weights), -15, 15)

Unknown mood or symptom tags carry no weight.  Weights, caps and bands come
from the ``wellness_index`` section of energy_config.yaml.
"""

from __future__ import annotations

from typing import Iterable

from cyclewise.engine.base import SymptomLog, clamp, round_half_up
from cyclewise.engine.config_loader import WellnessIndexConfig, get_energy_config


def _tag_total(tags: Iterable[str], weights: dict[str, float], cap: float) -> float:
    total = sum(weights.get(tag.lower(), 0.0) for tag in tags)
    return clamp(total, -cap, cap)


def calculate_wellness_index(
    energy: int,
    sleep_quality: int,
    stress_level: int,
    mood: Iterable[str] = (),
    physical_symptoms: Iterable[str] = (),
    config: WellnessIndexConfig | None = None,
) -> int:
    """Return the 0–100 wellness index for one day's self-report."""
    cfg = config or get_energy_config().wellness_index

    score = (
        (energy / 5) * cfg.energy_weight
        + (sleep_quality / 5) * cfg.sleep_weight
        + ((6 - stress_level) / 5) * cfg.stress_weight
        + _tag_total(mood, cfg.mood_weights, cfg.tag_cap)
        + _tag_total(physical_symptoms, cfg.symptom_weights, cfg.tag_cap)
    )
    return int(clamp(round_half_up(score), 0, 100))


def wellness_index_for_log(log: SymptomLog, config: WellnessIndexConfig | None = None) -> int:
    return calculate_wellness_index(
        log.energy,
        log.sleep_quality,
        log.stress_level,
        log.mood,
        log.physical_symptoms,
        config=config,
    )


def wellness_band(index: int, config: WellnessIndexConfig | None = None) -> str:
    """Map an index to 'rest' (<=30), 'stable' (<=60) or 'thriving'."""
    cfg = config or get_energy_config().wellness_index
    if index <= cfg.rest_band_max:
        return "rest"
    if index <= cfg.stable_band_max:
        return "stable"
    return "thriving"
