"""Boost rescheduling heuristic.

Greedy, single pass over a forecast:

1. Overloaded days are those below ``overloaded_below`` (55).
2. Events on those days are costed at ``abs(day.impact_for(title))``.
3. Movable events cost more than ``min_energy_cost`` (5) and last at most
   ``max_duration_minutes`` (180).
4. The costliest movable event wins; the first one on ties.
5. Slots are forecast days strictly after the event's date scoring above
   ``high_energy_above`` (70), best first, at most ``max_suggested_slots``.

The heuristic only advises.  Moving an event goes through the event store
and dismissals are kept in a ``DismissalRegistry`` until the next day.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Sequence

from cyclewise.engine.base import (
    BoostRecommendation,
    CalendarEvent,
    DayForecast,
    SuggestedSlot,
)
from cyclewise.engine.config_loader import BoostConfig, EnergyConfig, get_energy_config

logger = logging.getLogger("cyclewise.engine.boost")


class BoostReason(str, Enum):
    recommended = "recommended"
    no_overloaded_days = "no_overloaded_days"
    no_events_on_overloaded_days = "no_events_on_overloaded_days"
    no_movable_events = "no_movable_events"
    no_high_energy_days = "no_high_energy_days"
    dismissed = "dismissed"


@dataclass
class BoostEvaluation:
    """Outcome of a boost run.  ``recommendation`` is None unless ``reason`` is recommended."""

    recommendation: BoostRecommendation | None
    reason: BoostReason

    @property
    def has_recommendation(self) -> bool:
        return self.recommendation is not None


@dataclass(frozen=True)
class _Candidate:
    event: CalendarEvent
    day: DayForecast
    energy_cost: int
    duration_minutes: float


class BoostHeuristic:
    """Pick one costly event on an overloaded day and suggest better days."""

    def __init__(self, config: EnergyConfig | None = None) -> None:
        self._config = config or get_energy_config()

    @property
    def _boost_config(self) -> BoostConfig:
        return self._config.boost

    def evaluate(
        self,
        forecast: Sequence[DayForecast],
        events: Sequence[CalendarEvent],
    ) -> BoostEvaluation:
        """Run the heuristic and report why nothing was suggested, if so."""
        bc = self._boost_config

        overloaded = {d.date: d for d in forecast if d.final_energy < bc.overloaded_below}
        if not overloaded:
            return BoostEvaluation(None, BoostReason.no_overloaded_days)

        on_overloaded = [e for e in events if e.date in overloaded]
        if not on_overloaded:
            return BoostEvaluation(None, BoostReason.no_events_on_overloaded_days)

        candidates = [
            _Candidate(
                event=e,
                day=overloaded[e.date],
                energy_cost=abs(overloaded[e.date].impact_for(e.title)),
                duration_minutes=e.duration_minutes,
            )
            for e in on_overloaded
        ]
        movable = [
            c for c in candidates
            if c.energy_cost > bc.min_energy_cost and c.duration_minutes <= bc.max_duration_minutes
        ]
        if not movable:
            return BoostEvaluation(None, BoostReason.no_movable_events)

        # max() keeps the first of equal maxima
        chosen = max(movable, key=lambda c: c.energy_cost)
        event_date = chosen.event.date

        later = [d for d in forecast if d.date > event_date]
        slots = [d for d in later if d.final_energy > bc.high_energy_above]
        if not slots and bc.fallback_to_best_future_days:
            logger.debug("No days above %s; falling back to best future days", bc.high_energy_above)
            slots = later
        if not slots:
            return BoostEvaluation(None, BoostReason.no_high_energy_days)

        top = sorted(slots, key=lambda d: d.final_energy, reverse=True)[: bc.max_suggested_slots]
        recommendation = BoostRecommendation(
            event_id=chosen.event.id,
            event_title=chosen.event.title,
            current_date=event_date,
            current_day_energy=chosen.day.final_energy,
            energy_cost=chosen.energy_cost,
            suggested_slots=[SuggestedSlot(date=d.date, energy=d.final_energy) for d in top],
        )
        logger.info(
            "Boost: move %r (cost=%d) off %s (energy=%d) → %s",
            chosen.event.title, chosen.energy_cost, event_date,
            chosen.day.final_energy, [s.date.isoformat() for s in recommendation.suggested_slots],
        )
        return BoostEvaluation(recommendation, BoostReason.recommended)

    def recommend(
        self,
        forecast: Sequence[DayForecast],
        events: Sequence[CalendarEvent],
    ) -> BoostRecommendation | None:
        return self.evaluate(forecast, events).recommendation


def reschedule_times(event: CalendarEvent, target_date: date) -> tuple[datetime, datetime]:
    """Move ``event`` to ``target_date`` keeping its start time and duration."""
    new_start = datetime.combine(target_date, event.start_time.timetz())
    return new_start, new_start + (event.end_time - event.start_time)


class DismissalRegistry:
    """Remembers dismissed ``(user_id, event_id)`` recommendations for one calendar day."""

    def __init__(self) -> None:
        self._dismissed: dict[tuple[str, str], date] = {}
        self._lock = threading.Lock()

    def dismiss(self, user_id: str, event_id: str, today: date) -> None:
        with self._lock:
            self._dismissed[(user_id, event_id)] = today

    def restore(self, user_id: str, event_id: str) -> bool:
        with self._lock:
            return self._dismissed.pop((user_id, event_id), None) is not None

    def is_dismissed(self, user_id: str, event_id: str, today: date) -> bool:
        with self._lock:
            return self._dismissed.get((user_id, event_id)) == today

    def prune(self, today: date) -> int:
        """Forget dismissals from earlier days."""
        with self._lock:
            stale = [k for k, day in self._dismissed.items() if day != today]
            for key in stale:
                del self._dismissed[key]
        return len(stale)
