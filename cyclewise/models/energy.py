"""Pydantic models for the energy API: request bodies and responses.

Out-of-range self-report values are rejected here (422); the engine itself
does not clamp them.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field, model_validator

from cyclewise.engine.base import (
    CalendarEvent,
    CycleProfile,
    Phase,
    SymptomLog,
    TimeOfDay,
)
from cyclewise.engine.boost import BoostReason
from cyclewise.models.base import CyclewiseBase


# ---------- Inputs ----------

class CycleProfileIn(CyclewiseBase):
    start_date: date
    cycle_length_days: int = Field(default=28, ge=21, le=45)
    menstrual_length_days: int = Field(default=5, ge=3, le=7)

    def to_domain(self) -> CycleProfile:
        return CycleProfile(
            start_date=self.start_date,
            cycle_length_days=self.cycle_length_days,
            menstrual_length_days=self.menstrual_length_days,
        )


class SymptomFields(CyclewiseBase):
    """Self-reported fields shared by stateless requests and stored logs."""

    energy: int = Field(default=3, ge=1, le=5)
    sleep_quality: int = Field(default=3, ge=1, le=5)
    stress_level: int = Field(default=3, ge=1, le=5)
    mood: list[str] = Field(default_factory=list)
    physical_symptoms: list[str] = Field(default_factory=list)
    weight: float | None = Field(default=None, gt=0, le=500)
    blood_pressure: str | None = Field(default=None, pattern=r"^\d{2,3}/\d{2,3}$")
    had_sex: bool | None = None


class SymptomLogIn(SymptomFields):
    wellness_index: int | None = Field(default=None, ge=0, le=100)

    def to_domain(self, log_date: date) -> SymptomLog:
        return SymptomLog(
            date=log_date,
            energy=self.energy,
            sleep_quality=self.sleep_quality,
            stress_level=self.stress_level,
            mood=list(self.mood),
            physical_symptoms=list(self.physical_symptoms),
            wellness_index=self.wellness_index,
            weight=self.weight,
            blood_pressure=self.blood_pressure,
            had_sex=self.had_sex,
        )


class SymptomLogUpdate(CyclewiseBase):
    """PUT body for a stored log; only the fields sent are changed."""

    energy: int | None = Field(default=None, ge=1, le=5)
    sleep_quality: int | None = Field(default=None, ge=1, le=5)
    stress_level: int | None = Field(default=None, ge=1, le=5)
    mood: list[str] | None = None
    physical_symptoms: list[str] | None = None
    weight: float | None = Field(default=None, gt=0, le=500)
    blood_pressure: str | None = Field(default=None, pattern=r"^\d{2,3}/\d{2,3}$")
    had_sex: bool | None = None


class CalendarEventIn(CyclewiseBase):
    id: str = Field(min_length=1)
    title: str
    start_time: datetime
    end_time: datetime
    source: str = "local"

    @model_validator(mode="after")
    def _end_after_start(self) -> CalendarEventIn:
        if self.end_time < self.start_time:
            raise ValueError("endTime must not be before startTime")
        return self

    def to_domain(self) -> CalendarEvent:
        return CalendarEvent(
            id=self.id,
            title=self.title,
            start_time=self.start_time,
            end_time=self.end_time,
            source=self.source,
        )


class DayEnergyRequest(CyclewiseBase):
    date: date
    cycle_profile: CycleProfileIn | None = None
    events: list[CalendarEventIn] = Field(default_factory=list)
    symptom_log: SymptomLogIn | None = None


class ForecastRequest(CyclewiseBase):
    """Window request.  ``symptom_log`` is today's log and only affects the first day."""

    start_date: date = Field(default_factory=date.today)
    days: int | None = Field(default=None, ge=1, le=30)
    cycle_profile: CycleProfileIn | None = None
    events: list[CalendarEventIn] = Field(default_factory=list)
    symptom_log: SymptomLogIn | None = None


class CoefficientRequest(CyclewiseBase):
    title: str = Field(min_length=1)
    phase: Phase
    time_of_day: TimeOfDay
    stress_level: int = Field(default=3, ge=1, le=5)


class WellnessIndexRequest(CyclewiseBase):
    energy: int = Field(ge=1, le=5)
    sleep_quality: int = Field(ge=1, le=5)
    stress_level: int = Field(ge=1, le=5)
    mood: list[str] = Field(default_factory=list)
    physical_symptoms: list[str] = Field(default_factory=list)


class MoveEventRequest(CyclewiseBase):
    event_id: str = Field(min_length=1)
    slot_index: int = Field(default=0, ge=0)
    target_date: date | None = None


class DismissRequest(CyclewiseBase):
    event_id: str = Field(min_length=1)


# ---------- Outputs ----------

class EventImpactRead(CyclewiseBase):
    name: str
    impact: int
    event_id: str | None = None
    time_of_day: TimeOfDay | None = None
    coefficient: float = 0.0
    is_estimate: bool = False


class DayForecastRead(CyclewiseBase):
    date: date
    cycle_phase: Phase
    day_in_cycle: int | None = None
    base_energy: int
    events: list[EventImpactRead] = Field(default_factory=list)
    events_impact_total: int = 0
    sleep_modifier: int = 0
    stress_modifier: int = 0
    wellness_modifier: int = 0
    final_energy: int


class SuggestedSlotRead(CyclewiseBase):
    date: date
    energy: int


class BoostRecommendationRead(CyclewiseBase):
    event_id: str
    event_title: str
    current_date: date
    current_day_energy: int
    energy_cost: int
    suggested_slots: list[SuggestedSlotRead] = Field(default_factory=list)


class BoostRead(CyclewiseBase):
    recommendation: BoostRecommendationRead | None = None
    reason: BoostReason


class CoefficientRead(CyclewiseBase):
    base_coefficient: float
    cycle_modifier: float
    time_modifier: float
    stress_coefficient: float
    final_impact: float
    is_estimate: bool
    matched_event_type: str | None = None


class WellnessIndexRead(CyclewiseBase):
    wellness_index: int
    band: str


class ReferenceEventRead(CyclewiseBase):
    category: str
    event_type: str
    base: float
    menstrual: float
    follicular: float
    ovulation: float
    luteal: float
    morning: float
    afternoon: float
    evening: float
    stress_coefficient: float


class EnergyBreakdownRead(CyclewiseBase):
    forecast: DayForecastRead
    confidence: int
    wellness_index: int | None = None
    wellness_band: str | None = None
    symptoms: list[str] = Field(default_factory=list)


class SymptomLogRead(SymptomFields):
    date: date
    wellness_index: int | None = None
    wellness_band: str | None = None


class CalendarEventRead(CyclewiseBase):
    id: str
    title: str
    start_time: datetime
    end_time: datetime
    source: str


class CycleStatusRead(CyclewiseBase):
    date: date
    day_in_cycle: int | None = None
    phase: Phase
    next_period_start: date | None = None
    days_until_next_period: int | None = None
