"""Store-backed energy planner.

Wires the pure engine (phase resolver, daily calculator, forecast, boost)
to the cycle, event and symptom stores for one user at a time.  Forecasts
are pulled on demand and cached per ``(user_id, date)``; every write that
can change a score invalidates the affected dates.

The scoring itself is synchronous.  It runs in a worker thread so a slow
coefficient estimator never blocks the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable

from cyclewise.engine.base import (
    CalendarEvent,
    CycleDay,
    CycleProfile,
    DayForecast,
    EnergyBreakdown,
    SymptomLog,
    round_half_up,
)
from cyclewise.engine.boost import (
    BoostEvaluation,
    BoostHeuristic,
    BoostReason,
    DismissalRegistry,
    reschedule_times,
)
from cyclewise.engine.config_loader import EnergyConfig, get_energy_config
from cyclewise.engine.energy_calculator import DailyEnergyCalculator
from cyclewise.engine.forecast import ForecastCache, WeekForecastGenerator, events_fingerprint
from cyclewise.engine.stores import CycleStore, EventStore, SymptomStore

logger = logging.getLogger("cyclewise.engine.planner")

# Symptom logs counted towards today's confidence
CONFIDENCE_WINDOW_DAYS = 30


class EventNotFoundError(LookupError):
    """The event does not exist or belongs to another user."""


class NoSuggestedSlotError(ValueError):
    """A boost move was requested but no suggested slot is available."""


@dataclass
class CycleStatus:
    """Where a date sits in the user's cycle."""

    date: date
    cycle_day: CycleDay
    next_period_start: date | None = None
    days_until_next_period: int | None = None


def today_confidence(recent_logs: int) -> int:
    """0–100 confidence in today's score from the number of recent symptom logs."""
    return round_half_up(min(100.0, 50 + recent_logs * 1.5))


class EnergyPlanner:
    """Per-user planner operations over the stores.

    Usage::

        planner = EnergyPlanner(cycles, events, symptoms)
        week = await planner.week_forecast(user_id)
        evaluation = await planner.boost(user_id)
        if evaluation.recommendation:
            await planner.move_event(user_id, evaluation.recommendation.event_id)
    """

    def __init__(
        self,
        cycle_store: CycleStore,
        event_store: EventStore,
        symptom_store: SymptomStore,
        calculator: DailyEnergyCalculator | None = None,
        config: EnergyConfig | None = None,
        cache: ForecastCache | None = None,
        dismissals: DismissalRegistry | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._config = config or get_energy_config()
        self._cycles = cycle_store
        self._events = event_store
        self._symptoms = symptom_store
        self._calculator = calculator or DailyEnergyCalculator(config=self._config)
        self._forecaster = WeekForecastGenerator(self._calculator, self._config)
        self._boost = BoostHeuristic(self._config)
        self._cache = cache if cache is not None else ForecastCache()
        self._dismissals = dismissals if dismissals is not None else DismissalRegistry()
        self._clock = clock

    @property
    def cache(self) -> ForecastCache:
        return self._cache

    def today(self) -> date:
        return self._clock()

    # ── Cycle ─────────────────────────────────────────────────────────────────

    async def cycle_status(self, user_id: str, on: date | None = None) -> CycleStatus:
        on = on or self.today()
        profile = await self._cycles.get_cycle_profile(user_id)
        phases = self._calculator.phase_resolver
        status = CycleStatus(date=on, cycle_day=phases.resolve(on, profile))
        if profile is not None:
            status.next_period_start = phases.next_period_start(on, profile)
            status.days_until_next_period = phases.days_until_next_period(on, profile)
        return status

    async def update_cycle_profile(self, user_id: str, profile: CycleProfile) -> CycleProfile:
        saved = await self._cycles.save_cycle_profile(user_id, profile)
        dropped = self._cache.invalidate_user(user_id)
        logger.info("Cycle profile updated for %s; dropped %d cached days", user_id, dropped)
        return saved

    # ── Energy ────────────────────────────────────────────────────────────────

    async def today_breakdown(self, user_id: str) -> EnergyBreakdown:
        """Today's score with modifiers, confidence and logged symptoms."""
        today = self.today()
        profile, events, log, recent = await asyncio.gather(
            self._cycles.get_cycle_profile(user_id),
            self._events.list_events(user_id, today, today),
            self._symptoms.get_symptom_log(user_id, today),
            self._symptoms.count_logs(
                user_id, today - timedelta(days=CONFIDENCE_WINDOW_DAYS), today
            ),
        )
        forecast = await asyncio.to_thread(
            self._calculator.calculate, today, profile, events, log
        )

        symptoms: list[str] = []
        if log is not None:
            symptoms = [*log.mood, *log.physical_symptoms]

        return EnergyBreakdown(
            forecast=forecast,
            confidence=today_confidence(recent),
            wellness_index=log.wellness_index if log is not None else None,
            symptoms=symptoms,
        )

    async def _window(
        self, user_id: str, days: int
    ) -> tuple[list[DayForecast], list[CalendarEvent]]:
        today = self.today()
        end = today + timedelta(days=days - 1)
        events = await self._events.list_events(user_id, today, end)

        fingerprints = events_fingerprint(events)
        cached = self._cache.get_window(user_id, today, days, fingerprints)
        if cached is not None:
            return cached, events

        profile, log = await asyncio.gather(
            self._cycles.get_cycle_profile(user_id),
            self._symptoms.get_symptom_log(user_id, today),
        )
        forecast = await asyncio.to_thread(
            self._forecaster.generate, profile, events, today, days, log
        )
        self._cache.put_window(user_id, today, forecast, fingerprints)
        return forecast, events

    async def week_forecast(self, user_id: str, days: int | None = None) -> list[DayForecast]:
        n_days = self._forecaster.resolve_days(days)
        forecast, _ = await self._window(user_id, n_days)
        return forecast

    # ── Boost ─────────────────────────────────────────────────────────────────

    async def boost(self, user_id: str, days: int | None = None) -> BoostEvaluation:
        n_days = self._forecaster.resolve_days(days)
        forecast, events = await self._window(user_id, n_days)
        evaluation = self._boost.evaluate(forecast, events)

        recommendation = evaluation.recommendation
        if recommendation is not None and self._dismissals.is_dismissed(
            user_id, recommendation.event_id, self.today()
        ):
            logger.debug("Boost for %s on event %s dismissed today", user_id, recommendation.event_id)
            return BoostEvaluation(None, BoostReason.dismissed)
        return evaluation

    async def move_event(
        self,
        user_id: str,
        event_id: str,
        target_date: date | None = None,
        slot_index: int = 0,
    ) -> CalendarEvent:
        """Move an event to ``target_date`` or to a suggested boost slot.

        Without ``target_date`` the current recommendation must be for
        ``event_id`` and ``slot_index`` picks among its suggested slots.

        Raises:
            EventNotFoundError:   Unknown event for this user.
            NoSuggestedSlotError: No recommendation or slot to move to.
        """
        event = await self._events.get_event(user_id, event_id)
        if event is None:
            raise EventNotFoundError(f"Event {event_id} not found")

        if target_date is None:
            evaluation = await self.boost(user_id)
            rec = evaluation.recommendation
            if rec is None or rec.event_id != event_id:
                raise NoSuggestedSlotError(f"No boost recommendation for event {event_id}")
            if not 0 <= slot_index < len(rec.suggested_slots):
                raise NoSuggestedSlotError(f"Slot {slot_index} is not available")
            target_date = rec.suggested_slots[slot_index].date

        new_start, new_end = reschedule_times(event, target_date)
        await self._events.update_event_time(event_id, new_start, new_end)

        for day in (event.date, target_date):
            self._cache.invalidate(user_id, day)
        logger.info("Moved event %s for %s: %s → %s", event_id, user_id, event.date, target_date)
        return CalendarEvent(
            id=event.id,
            title=event.title,
            start_time=new_start,
            end_time=new_end,
            source=event.source,
        )

    def dismiss(self, user_id: str, event_id: str) -> None:
        """Hide the recommendation for this event until tomorrow."""
        today = self.today()
        self._dismissals.prune(today)
        self._dismissals.dismiss(user_id, event_id, today)

    def restore(self, user_id: str, event_id: str) -> bool:
        return self._dismissals.restore(user_id, event_id)

    # ── Symptoms ──────────────────────────────────────────────────────────────

    async def symptom_log(self, user_id: str, log_date: date) -> SymptomLog | None:
        return await self._symptoms.get_symptom_log(user_id, log_date)

    async def save_symptoms(
        self, user_id: str, log_date: date, fields: dict[str, Any]
    ) -> SymptomLog:
        log = await self._symptoms.upsert_symptom_log(user_id, log_date, fields)
        self._cache.invalidate(user_id, log_date)
        logger.debug(
            "Saved symptoms for %s on %s (wellness=%s)", user_id, log_date, log.wellness_index
        )
        return log
