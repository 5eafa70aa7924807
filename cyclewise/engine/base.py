"""Canonical data models for the Cyclewise energy engine.

These types are the single source of truth passed between the phase
resolver, the coefficient resolver, the daily calculator, the forecaster
and the boost heuristic.  The API layer converts its pydantic models into
these dataclasses before calling the engine.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

logger = logging.getLogger("cyclewise.engine")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Phase(str, Enum):
    menstrual = "menstrual"
    follicular = "follicular"
    ovulation = "ovulation"
    luteal = "luteal"


class TimeOfDay(str, Enum):
    morning = "morning"
    afternoon = "afternoon"
    evening = "evening"


def time_of_day(moment: datetime) -> TimeOfDay:
    """Bucket a start time: morning < 12:00 <= afternoon < 18:00 <= evening."""
    if moment.hour < 12:
        return TimeOfDay.morning
    if moment.hour < 18:
        return TimeOfDay.afternoon
    return TimeOfDay.evening


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going towards +infinity.

    Python's ``round`` uses banker's rounding, which would move scores by a
    point on exact halves (``round(14.5) == 14``).
    """
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class CoefficientLookupError(RuntimeError):
    """The text matcher / estimator was unreachable or returned garbage."""


class StoreError(RuntimeError):
    """A backing store (events, cycles, symptom logs) could not be read or written."""


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CycleProfile:
    """A user's cycle settings.

    Attributes:
        start_date:            First day of a known period (cycle day 1).
        cycle_length_days:     Full cycle length, typically 21–45.
        menstrual_length_days: Period length, typically 3–7.
    """

    start_date: date
    cycle_length_days: int = 28
    menstrual_length_days: int = 5

    def __post_init__(self) -> None:
        if self.cycle_length_days < 1:
            raise ValueError("cycle_length_days must be positive")
        if self.menstrual_length_days >= self.cycle_length_days:
            raise ValueError(
                f"menstrual_length_days ({self.menstrual_length_days}) must be shorter "
                f"than cycle_length_days ({self.cycle_length_days})"
            )


@dataclass(frozen=True)
class CycleDay:
    """Derived position of a date within the cycle.

    ``day_in_cycle`` is None when no cycle profile exists and the phase is
    the configured default.
    """

    day_in_cycle: int | None
    phase: Phase


@dataclass
class SymptomLog:
    """One day's self-reported symptoms.

    Attributes:
        date:              Calendar date of the log.
        energy:            Self-rated energy, 1–5.
        sleep_quality:     Self-rated sleep quality, 1–5.
        stress_level:      Self-rated stress, 1–5.
        mood:              Selected mood tags.
        physical_symptoms: Selected physical symptom tags.
        wellness_index:    Derived 0–100 index, stored alongside the raw fields.
        weight:            Optional body weight (kg).
        blood_pressure:    Optional "120/80" style reading.
        had_sex:           Optional flag.
    """

    date: date
    energy: int = 3
    sleep_quality: int = 3
    stress_level: int = 3
    mood: list[str] = field(default_factory=list)
    physical_symptoms: list[str] = field(default_factory=list)
    wellness_index: int | None = None
    weight: float | None = None
    blood_pressure: str | None = None
    had_sex: bool | None = None


@dataclass(frozen=True)
class CalendarEvent:
    """A calendar event as read from the external event store."""

    id: str
    title: str
    start_time: datetime
    end_time: datetime
    source: str = "local"

    @property
    def date(self) -> date:
        return self.start_time.date()

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60.0

    @property
    def time_of_day(self) -> TimeOfDay:
        return time_of_day(self.start_time)


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass
class EventImpact:
    """One event's contribution to a day's energy, in points."""

    name: str
    impact: int
    event_id: str | None = None
    time_of_day: TimeOfDay | None = None
    coefficient: float = 0.0
    is_estimate: bool = False


@dataclass
class DayForecast:
    """Energy breakdown for a single date.

    Attributes:
        date:                Date scored.
        cycle_phase:         Phase on that date.
        day_in_cycle:        1-indexed cycle day, None without a profile.
        base_energy:         Phase baseline (0–100).
        events:              Per-event point contributions.
        events_impact_total: Sum of event contributions.
        sleep_modifier:      Points from sleep quality (0 without a log).
        stress_modifier:     Points from stress level (0 without a log).
        wellness_modifier:   Points from the wellness index (0 without a log).
        final_energy:        Clamped 0–100 score.
    """

    date: date
    cycle_phase: Phase
    base_energy: int
    final_energy: int
    day_in_cycle: int | None = None
    events: list[EventImpact] = field(default_factory=list)
    events_impact_total: int = 0
    sleep_modifier: int = 0
    stress_modifier: int = 0
    wellness_modifier: int = 0

    def impact_for(self, title: str) -> int:
        """Points recorded for the first event with this title, 0 if absent."""
        for item in self.events:
            if item.name == title:
                return item.impact
        return 0


@dataclass(frozen=True)
class SuggestedSlot:
    date: date
    energy: int


@dataclass
class BoostRecommendation:
    """Advice to move one costly event off an overloaded day."""

    event_id: str
    event_title: str
    current_date: date
    current_day_energy: int
    energy_cost: int
    suggested_slots: list[SuggestedSlot] = field(default_factory=list)


@dataclass
class EnergyBreakdown:
    """Today's forecast plus the data confidence shown next to it."""

    forecast: DayForecast
    confidence: int
    wellness_index: int | None = None
    symptoms: list[str] = field(default_factory=list)

