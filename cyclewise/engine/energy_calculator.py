"""Daily energy calculator.

Combines the phase baseline, calendar event impacts and self-report
modifiers into a clamped 0–100 energy score::

    final = clamp(base + events + sleep + stress + wellness, 0, 100)

    events   = Σ round(final_impact * 50)
    sleep    = round((sleep_quality - 3) * 5)      # 0 without a log
    stress   = round((stress_level - 3) * -3)      # 0 without a log
    wellness = round((wellness_index - 60) * 0.3)  # 0 without a log

All constants live in energy_config.yaml.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from cyclewise.engine.base import (
    CalendarEvent,
    CycleProfile,
    DayForecast,
    EventImpact,
    SymptomLog,
    clamp,
    round_half_up,
)
from cyclewise.engine.coefficients import EventCoefficientResolver
from cyclewise.engine.config_loader import EnergyConfig, get_energy_config
from cyclewise.engine.cycle_phase import CyclePhaseResolver
from cyclewise.engine.wellness_index import wellness_index_for_log

logger = logging.getLogger("cyclewise.engine.energy")


class DailyEnergyCalculator:
    """Score one calendar date.

    Usage::

        calc = DailyEnergyCalculator(EventCoefficientResolver(StaticCoefficientEstimator()))
        day = calc.calculate(
            target_date=date(2024, 1, 8),
            profile=CycleProfile(start_date=date(2024, 1, 1)),
            events=[standup],
            symptom_log=log,
        )
        print(day.final_energy, day.cycle_phase)
    """

    def __init__(
        self,
        coefficient_resolver: EventCoefficientResolver | None = None,
        config: EnergyConfig | None = None,
        phase_resolver: CyclePhaseResolver | None = None,
    ) -> None:
        self._config = config or get_energy_config()
        self._coefficients = coefficient_resolver or EventCoefficientResolver(config=self._config)
        self._phases = phase_resolver or CyclePhaseResolver(self._config)

    @property
    def phase_resolver(self) -> CyclePhaseResolver:
        return self._phases

    def _event_impacts(
        self,
        events: Sequence[CalendarEvent],
        phase,
        stress_level: int,
    ) -> list[EventImpact]:
        points_per = self._config.events.points_per_coefficient
        impacts: list[EventImpact] = []
        for event in events:
            bucket = event.time_of_day
            result = self._coefficients.resolve(event.title, phase, bucket, stress_level)
            impacts.append(
                EventImpact(
                    name=event.title,
                    impact=round_half_up(result.final_impact * points_per),
                    event_id=event.id,
                    time_of_day=bucket,
                    coefficient=result.final_impact,
                    is_estimate=result.is_estimate,
                )
            )
        return impacts

    def calculate(
        self,
        target_date: date,
        profile: CycleProfile | None,
        events: Sequence[CalendarEvent] = (),
        symptom_log: SymptomLog | None = None,
    ) -> DayForecast:
        """Compute the energy breakdown for ``target_date``.

        Args:
            target_date: Date to score.
            profile:     The user's cycle profile; None uses the default phase.
            events:      Events starting on ``target_date``.
            symptom_log: That day's self-report, if any.

        Returns:
            DayForecast with a 0–100 ``final_energy``.
        """
        cycle_day = self._phases.resolve(target_date, profile)
        phase = cycle_day.phase
        base_energy = round_half_up(self._config.base_energy(phase))

        stress_level = (
            symptom_log.stress_level
            if symptom_log is not None
            else self._config.events.default_stress_level
        )
        impacts = self._event_impacts(events, phase, stress_level)
        events_total = sum(item.impact for item in impacts)

        sleep_mod = stress_mod = wellness_mod = 0
        if symptom_log is not None:
            mc = self._config.modifiers
            wellness_index = symptom_log.wellness_index
            if wellness_index is None:
                wellness_index = wellness_index_for_log(symptom_log, self._config.wellness_index)
            sleep_mod = round_half_up((symptom_log.sleep_quality - mc.neutral_level) * mc.sleep_points_per_level)
            stress_mod = round_half_up((symptom_log.stress_level - mc.neutral_level) * mc.stress_points_per_level)
            wellness_mod = round_half_up((wellness_index - mc.wellness_pivot) * mc.wellness_factor)

        final = int(clamp(base_energy + events_total + sleep_mod + stress_mod + wellness_mod, 0, 100))

        logger.debug(
            "Energy for %s: %d (%s) base=%d events=%d sleep=%d stress=%d wellness=%d",
            target_date, final, phase.value, base_energy,
            events_total, sleep_mod, stress_mod, wellness_mod,
        )

        return DayForecast(
            date=target_date,
            cycle_phase=phase,
            base_energy=base_energy,
            final_energy=final,
            day_in_cycle=cycle_day.day_in_cycle,
            events=impacts,
            events_impact_total=events_total,
            sleep_modifier=sleep_mod,
            stress_modifier=stress_mod,
            wellness_modifier=wellness_mod,
        )
