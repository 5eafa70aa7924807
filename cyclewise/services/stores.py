"""Postgres-backed cycle, event and symptom stores.

Tables::

    user_cycles   (user_id PK, start_date, cycle_length, menstrual_length, updated_at)
    events        (id PK, user_id, title, start_time, end_time, source, updated_at)
    symptom_logs  (user_id, date, energy, sleep_quality, stress_level,
                   mood text[], physical_symptoms text[], wellness_index,
                   weight, blood_pressure, had_sex, updated_at,
                   UNIQUE (user_id, date))
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any

import asyncpg

from cyclewise.engine.base import CalendarEvent, CycleProfile, StoreError, SymptomLog
from cyclewise.engine.config_loader import WellnessIndexConfig
from cyclewise.engine.stores import CycleStore, EventStore, SymptomStore, apply_symptom_fields
from cyclewise.services.database import execute, fetch, fetchrow, fetchval, get_connection

logger = logging.getLogger("cyclewise.db.stores")


def _profile_from_row(row: asyncpg.Record) -> CycleProfile:
    return CycleProfile(
        start_date=row["start_date"],
        cycle_length_days=row["cycle_length"],
        menstrual_length_days=row["menstrual_length"],
    )


def _event_from_row(row: asyncpg.Record) -> CalendarEvent:
    return CalendarEvent(
        id=str(row["id"]),
        title=row["title"] or "",
        start_time=row["start_time"],
        end_time=row["end_time"],
        source=row["source"] or "local",
    )


def _log_from_row(row: asyncpg.Record) -> SymptomLog:
    return SymptomLog(
        date=row["date"],
        energy=row["energy"],
        sleep_quality=row["sleep_quality"],
        stress_level=row["stress_level"],
        mood=list(row["mood"] or []),
        physical_symptoms=list(row["physical_symptoms"] or []),
        wellness_index=row["wellness_index"],
        weight=row["weight"],
        blood_pressure=row["blood_pressure"],
        had_sex=row["had_sex"],
    )


class PostgresCycleStore(CycleStore):
    async def get_cycle_profile(self, user_id: str) -> CycleProfile | None:
        row = await fetchrow(
            "SELECT start_date, cycle_length, menstrual_length FROM user_cycles WHERE user_id = $1",
            user_id,
        )
        if not row:
            return None
        try:
            return _profile_from_row(row)
        except ValueError as exc:
            # A corrupt profile is treated like a missing one
            logger.warning("Ignoring invalid cycle profile for %s: %s", user_id, exc)
            return None

    async def save_cycle_profile(self, user_id: str, profile: CycleProfile) -> CycleProfile:
        row = await fetchrow(
            """
            INSERT INTO user_cycles (user_id, start_date, cycle_length, menstrual_length)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (user_id) DO UPDATE SET
                start_date = EXCLUDED.start_date,
                cycle_length = EXCLUDED.cycle_length,
                menstrual_length = EXCLUDED.menstrual_length,
                updated_at = NOW()
            RETURNING start_date, cycle_length, menstrual_length
            """,
            user_id,
            profile.start_date, profile.cycle_length_days, profile.menstrual_length_days,
        )
        return _profile_from_row(row)


class PostgresEventStore(EventStore):
    async def list_events(self, user_id: str, start: date, end: date) -> list[CalendarEvent]:
        rows = await fetch(
            """
            SELECT id, title, start_time, end_time, source FROM events
            WHERE user_id = $1 AND start_time >= $2 AND start_time < $3
            ORDER BY start_time
            """,
            user_id,
            datetime.combine(start, datetime.min.time()),
            datetime.combine(end + timedelta(days=1), datetime.min.time()),
        )
        return [_event_from_row(r) for r in rows]

    async def get_event(self, user_id: str, event_id: str) -> CalendarEvent | None:
        row = await fetchrow(
            "SELECT id, title, start_time, end_time, source FROM events WHERE id::text = $1 AND user_id = $2",
            event_id, user_id,
        )
        return _event_from_row(row) if row else None

    async def update_event_time(
        self, event_id: str, new_start: datetime, new_end: datetime
    ) -> None:
        result = await execute(
            """
            UPDATE events SET start_time = $2, end_time = $3, updated_at = NOW()
            WHERE id::text = $1
            """,
            event_id, new_start, new_end,
        )
        if result == "UPDATE 0":
            raise StoreError(f"Event {event_id} not found")


class PostgresSymptomStore(SymptomStore):
    def __init__(self, config: WellnessIndexConfig | None = None) -> None:
        self._config = config

    async def get_symptom_log(self, user_id: str, log_date: date) -> SymptomLog | None:
        row = await fetchrow(
            "SELECT * FROM symptom_logs WHERE user_id = $1 AND date = $2",
            user_id, log_date,
        )
        return _log_from_row(row) if row else None

    async def upsert_symptom_log(
        self, user_id: str, log_date: date, fields: dict[str, Any]
    ) -> SymptomLog:
        async with get_connection() as conn:
            existing = await conn.fetchrow(
                "SELECT * FROM symptom_logs WHERE user_id = $1 AND date = $2 FOR UPDATE",
                user_id, log_date,
            )
            log = apply_symptom_fields(
                _log_from_row(existing) if existing else None, log_date, fields, self._config
            )
            row = await conn.fetchrow(
                """
                INSERT INTO symptom_logs (
                    user_id, date, energy, sleep_quality, stress_level, mood,
                    physical_symptoms, wellness_index, weight, blood_pressure, had_sex
                ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                ON CONFLICT (user_id, date) DO UPDATE SET
                    energy = EXCLUDED.energy,
                    sleep_quality = EXCLUDED.sleep_quality,
                    stress_level = EXCLUDED.stress_level,
                    mood = EXCLUDED.mood,
                    physical_symptoms = EXCLUDED.physical_symptoms,
                    wellness_index = EXCLUDED.wellness_index,
                    weight = EXCLUDED.weight,
                    blood_pressure = EXCLUDED.blood_pressure,
                    had_sex = EXCLUDED.had_sex,
                    updated_at = NOW()
                RETURNING *
                """,
                user_id, log_date,
                log.energy, log.sleep_quality, log.stress_level,
                log.mood, log.physical_symptoms, log.wellness_index,
                log.weight, log.blood_pressure, log.had_sex,
            )
        return _log_from_row(row)

    async def count_logs(self, user_id: str, start: date, end: date) -> int:
        count = await fetchval(
            "SELECT COUNT(*) FROM symptom_logs WHERE user_id = $1 AND date BETWEEN $2 AND $3",
            user_id, start, end,
        )
        return int(count or 0)
