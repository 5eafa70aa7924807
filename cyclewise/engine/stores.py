"""Storage interfaces the planner reads from, plus in-memory implementations.

The engine never talks to a database directly.  ``services/stores.py``
implements these interfaces on asyncpg; the in-memory versions here back the
tests and local runs without Postgres.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date, datetime
from typing import Any

from cyclewise.engine.base import CalendarEvent, CycleProfile, StoreError, SymptomLog
from cyclewise.engine.config_loader import WellnessIndexConfig
from cyclewise.engine.wellness_index import wellness_index_for_log

SYMPTOM_FIELDS = (
    "energy",
    "sleep_quality",
    "stress_level",
    "mood",
    "physical_symptoms",
    "weight",
    "blood_pressure",
    "had_sex",
)


def apply_symptom_fields(
    existing: SymptomLog | None,
    log_date: date,
    fields: dict[str, Any],
    config: WellnessIndexConfig | None = None,
) -> SymptomLog:
    """Merge ``fields`` onto an existing log (or defaults) and recompute the wellness index."""
    unknown = set(fields) - set(SYMPTOM_FIELDS)
    if unknown:
        raise ValueError(f"Unknown symptom fields: {sorted(unknown)}")

    base = existing or SymptomLog(date=log_date)
    updates = dict(fields)
    for tag_field in ("mood", "physical_symptoms"):
        if tag_field in updates:
            updates[tag_field] = list(dict.fromkeys(updates[tag_field] or []))
    log = replace(base, date=log_date, **updates)
    log.wellness_index = wellness_index_for_log(log, config)
    return log


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------


class CycleStore(ABC):
    @abstractmethod
    async def get_cycle_profile(self, user_id: str) -> CycleProfile | None: ...

    @abstractmethod
    async def save_cycle_profile(self, user_id: str, profile: CycleProfile) -> CycleProfile: ...


class EventStore(ABC):
    @abstractmethod
    async def list_events(self, user_id: str, start: date, end: date) -> list[CalendarEvent]:
        """Events starting on ``start``..``end`` inclusive, ordered by start time."""

    @abstractmethod
    async def get_event(self, user_id: str, event_id: str) -> CalendarEvent | None: ...

    @abstractmethod
    async def update_event_time(
        self, event_id: str, new_start: datetime, new_end: datetime
    ) -> None: ...


class SymptomStore(ABC):
    @abstractmethod
    async def get_symptom_log(self, user_id: str, log_date: date) -> SymptomLog | None: ...

    @abstractmethod
    async def upsert_symptom_log(
        self, user_id: str, log_date: date, fields: dict[str, Any]
    ) -> SymptomLog:
        """Create or overwrite the user's log for ``log_date``.

        The wellness index is recomputed from the merged fields before
        storing.
        """

    @abstractmethod
    async def count_logs(self, user_id: str, start: date, end: date) -> int: ...


# ---------------------------------------------------------------------------
# In-memory implementations
# ---------------------------------------------------------------------------


class InMemoryCycleStore(CycleStore):
    def __init__(self, profiles: dict[str, CycleProfile] | None = None) -> None:
        self._profiles: dict[str, CycleProfile] = dict(profiles or {})

    async def get_cycle_profile(self, user_id: str) -> CycleProfile | None:
        return self._profiles.get(user_id)

    async def save_cycle_profile(self, user_id: str, profile: CycleProfile) -> CycleProfile:
        self._profiles[user_id] = profile
        return profile


class InMemoryEventStore(EventStore):
    def __init__(self) -> None:
        self._events: dict[str, tuple[str, CalendarEvent]] = {}
        self._lock = asyncio.Lock()

    def add(self, user_id: str, event: CalendarEvent) -> CalendarEvent:
        self._events[event.id] = (user_id, event)
        return event

    async def list_events(self, user_id: str, start: date, end: date) -> list[CalendarEvent]:
        events = [
            event for owner, event in self._events.values()
            if owner == user_id and start <= event.date <= end
        ]
        return sorted(events, key=lambda e: e.start_time)

    async def get_event(self, user_id: str, event_id: str) -> CalendarEvent | None:
        entry = self._events.get(event_id)
        if entry is None or entry[0] != user_id:
            return None
        return entry[1]

    async def update_event_time(
        self, event_id: str, new_start: datetime, new_end: datetime
    ) -> None:
        async with self._lock:
            entry = self._events.get(event_id)
            if entry is None:
                raise StoreError(f"Event {event_id} not found")
            owner, event = entry
            self._events[event_id] = (owner, replace(event, start_time=new_start, end_time=new_end))


class InMemorySymptomStore(SymptomStore):
    def __init__(self, config: WellnessIndexConfig | None = None) -> None:
        self._logs: dict[tuple[str, date], SymptomLog] = {}
        self._config = config
        self._lock = asyncio.Lock()

    async def get_symptom_log(self, user_id: str, log_date: date) -> SymptomLog | None:
        return self._logs.get((user_id, log_date))

    async def upsert_symptom_log(
        self, user_id: str, log_date: date, fields: dict[str, Any]
    ) -> SymptomLog:
        async with self._lock:
            log = apply_symptom_fields(
                self._logs.get((user_id, log_date)), log_date, fields, self._config
            )
            self._logs[(user_id, log_date)] = log
        return log

    async def count_logs(self, user_id: str, start: date, end: date) -> int:
        return sum(1 for (owner, day) in self._logs if owner == user_id and start <= day <= end)
