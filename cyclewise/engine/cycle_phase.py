"""Cycle phase resolver.

Maps any calendar date onto a cycle day and one of four phases using the
user's last known period start and cycle lengths.  Dates before the start
date wrap backwards into earlier cycles.

Phase bands, checked in order:

    1 .. menstrual_length                     → menstrual
    menstrual_length + 1 .. ovulation_day - 1 → follicular
    ovulation_day .. ovulation_day + window-1 → ovulation
    everything else                           → luteal

where ``ovulation_day = round(cycle_length / 2)``.  When the period is long
relative to the cycle the follicular band is empty and days fall through to
the ovulation or luteal bands; this is intentional.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from cyclewise.engine.base import CycleDay, CycleProfile, Phase, round_half_up
from cyclewise.engine.config_loader import CycleConfig, EnergyConfig, get_energy_config

logger = logging.getLogger("cyclewise.engine.cycle_phase")


class CyclePhaseResolver:
    """Resolve cycle day and phase for a date.

    Usage::

        resolver = CyclePhaseResolver()
        profile = CycleProfile(start_date=date(2024, 1, 1), cycle_length_days=28)
        resolver.resolve(date(2024, 1, 14), profile)
        # CycleDay(day_in_cycle=14, phase=Phase.ovulation)
    """

    def __init__(self, config: EnergyConfig | None = None) -> None:
        self._config = config or get_energy_config()

    @property
    def _cycle_config(self) -> CycleConfig:
        return self._config.cycle

    @staticmethod
    def day_in_cycle(query_date: date, profile: CycleProfile) -> int:
        """Return the 1-indexed cycle day for ``query_date``.

        Python's modulo is non-negative for a positive divisor, so dates
        before ``profile.start_date`` land in the previous cycle.
        """
        diff_days = (query_date - profile.start_date).days
        return diff_days % profile.cycle_length_days + 1

    @staticmethod
    def ovulation_day(profile: CycleProfile) -> int:
        return round_half_up(profile.cycle_length_days / 2)

    def phase_for_day(self, cycle_day: int, profile: CycleProfile) -> Phase:
        """Return the phase for a 1-indexed cycle day."""
        ovulation_day = self.ovulation_day(profile)
        window = self._cycle_config.ovulation_window_days

        if cycle_day <= profile.menstrual_length_days:
            return Phase.menstrual
        if profile.menstrual_length_days + 1 <= cycle_day <= ovulation_day - 1:
            return Phase.follicular
        if ovulation_day <= cycle_day <= ovulation_day + window - 1:
            return Phase.ovulation
        return Phase.luteal

    def resolve(self, query_date: date, profile: CycleProfile | None) -> CycleDay:
        """Return the cycle day and phase for ``query_date``.

        Without a profile the configured default phase is returned and
        ``day_in_cycle`` is None.
        """
        if profile is None:
            logger.debug("No cycle profile; using default phase for %s", query_date)
            return CycleDay(day_in_cycle=None, phase=Phase(self._cycle_config.default_phase))

        cycle_day = self.day_in_cycle(query_date, profile)
        return CycleDay(day_in_cycle=cycle_day, phase=self.phase_for_day(cycle_day, profile))

    def next_period_start(self, query_date: date, profile: CycleProfile) -> date:
        """Return the first day of the next period strictly after ``query_date``."""
        return query_date + timedelta(days=self.days_until_next_period(query_date, profile))

    def days_until_next_period(self, query_date: date, profile: CycleProfile) -> int:
        """Days from ``query_date`` until the next cycle day 1 (1 on the last cycle day)."""
        cycle_day = self.day_in_cycle(query_date, profile)
        return profile.cycle_length_days - cycle_day + 1
