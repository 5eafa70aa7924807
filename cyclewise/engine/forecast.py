"""Multi-day energy forecast and its per-user cache.

The forecast runs the daily calculator for N consecutive dates starting at
"today".  Only today's symptom log is used; future days have no log, so they
score with the default stress level and no sleep/stress/wellness modifiers.

Everything is on the 0–100 energy scale.  The older 0–5 wellness forecast
scale converts with a factor of 20 (see ``to_legacy_scale``).
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Mapping, Sequence

from cyclewise.engine.base import CalendarEvent, CycleProfile, DayForecast, SymptomLog
from cyclewise.engine.config_loader import EnergyConfig, get_energy_config
from cyclewise.engine.energy_calculator import DailyEnergyCalculator

logger = logging.getLogger("cyclewise.engine.forecast")

LEGACY_SCALE_FACTOR = 20


def to_legacy_scale(energy: float) -> float:
    """0–100 energy → 0–5 wellness forecast value."""
    return energy / LEGACY_SCALE_FACTOR


def from_legacy_scale(value: float) -> float:
    """0–5 wellness forecast value → 0–100 energy."""
    return value * LEGACY_SCALE_FACTOR


def window_dates(start: date, days: int) -> list[date]:
    return [start + timedelta(days=offset) for offset in range(days)]


class WeekForecastGenerator:
    """Produce an ordered list of DayForecast for a rolling window."""

    def __init__(
        self,
        calculator: DailyEnergyCalculator | None = None,
        config: EnergyConfig | None = None,
    ) -> None:
        self._config = config or get_energy_config()
        self._calculator = calculator or DailyEnergyCalculator(config=self._config)

    @property
    def calculator(self) -> DailyEnergyCalculator:
        return self._calculator

    def resolve_days(self, days: int | None) -> int:
        """Apply the configured default and reject windows outside 1..max_days."""
        fc = self._config.forecast
        if days is None:
            return fc.default_days
        if days < 1 or days > fc.max_days:
            raise ValueError(f"Forecast window must be 1–{fc.max_days} days, got {days}")
        return days

    def generate(
        self,
        profile: CycleProfile | None,
        events: Iterable[CalendarEvent],
        today: date,
        days: int | None = None,
        today_log: SymptomLog | None = None,
    ) -> list[DayForecast]:
        """Forecast ``days`` dates starting at ``today``.

        Events outside the window are ignored.  ``today_log`` only affects
        the first day.
        """
        n_days = self.resolve_days(days)
        dates = window_dates(today, n_days)

        by_date: dict[date, list[CalendarEvent]] = defaultdict(list)
        for event in sorted(events, key=lambda e: e.start_time):
            by_date[event.date].append(event)

        forecast = [
            self._calculator.calculate(
                day,
                profile,
                by_date.get(day, []),
                today_log if day == today else None,
            )
            for day in dates
        ]
        logger.debug(
            "Forecast %s..%s: %s",
            dates[0], dates[-1], [d.final_energy for d in forecast],
        )
        return forecast


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

EventFingerprint = tuple[tuple[str, str, str, str], ...]


def events_fingerprint(events: Iterable[CalendarEvent]) -> dict[date, EventFingerprint]:
    """Per-date summary of the events a forecast was computed from.

    Two event lists with the same fingerprint for a date score that date
    identically, so a cached day is reusable only while its fingerprint holds.
    """
    by_date: dict[date, list[tuple[str, str, str, str]]] = defaultdict(list)
    for event in events:
        by_date[event.date].append(
            (event.id, event.title, event.start_time.isoformat(), event.end_time.isoformat())
        )
    return {day: tuple(sorted(items)) for day, items in by_date.items()}


class ForecastCache:
    """Thread-safe DayForecast cache keyed by ``(user_id, date)``.

    Each entry also remembers the "today" it was computed for, because a day
    scored as a future day (no symptom log) must be recomputed once it
    becomes today, and the fingerprint of that date's events, so edits made
    straight to the event store are picked up on the next read.  Callers
    still invalidate on profile and symptom log changes; races only cause
    duplicate recomputation.

    Entries computed for an earlier "today" can never be served again and
    are pruned on every write.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, date], tuple[date, EventFingerprint, DayForecast]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_window(
        self,
        user_id: str,
        today: date,
        days: int,
        fingerprints: Mapping[date, EventFingerprint] | None = None,
    ) -> list[DayForecast] | None:
        """Return the cached window, or None if any day is missing or stale."""
        fingerprints = fingerprints or {}
        result: list[DayForecast] = []
        with self._lock:
            for day in window_dates(today, days):
                entry = self._entries.get((user_id, day))
                if entry is None or entry[0] != today:
                    return None
                if entry[1] != fingerprints.get(day, ()):
                    logger.debug("Events changed for %s on %s; recomputing", user_id, day)
                    return None
                result.append(entry[2])
        return result

    def put_window(
        self,
        user_id: str,
        today: date,
        forecast: Sequence[DayForecast],
        fingerprints: Mapping[date, EventFingerprint] | None = None,
    ) -> None:
        fingerprints = fingerprints or {}
        with self._lock:
            self._prune_locked(today)
            for day in forecast:
                self._entries[(user_id, day.date)] = (
                    today, fingerprints.get(day.date, ()), day,
                )

    def prune(self, today: date) -> int:
        """Drop every entry computed before ``today``."""
        with self._lock:
            return self._prune_locked(today)

    def _prune_locked(self, today: date) -> int:
        stale = [k for k, entry in self._entries.items() if entry[0] < today]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug("Pruned %d stale cached days", len(stale))
        return len(stale)

    def invalidate(self, user_id: str, start: date, end: date | None = None) -> int:
        """Drop entries for ``user_id`` dated ``start``..``end`` inclusive."""
        end = end or start
        with self._lock:
            keys = [k for k in self._entries if k[0] == user_id and start <= k[1] <= end]
            for key in keys:
                del self._entries[key]
        if keys:
            logger.debug("Invalidated %d cached days for %s (%s..%s)", len(keys), user_id, start, end)
        return len(keys)

    def invalidate_user(self, user_id: str) -> int:
        with self._lock:
            keys = [k for k in self._entries if k[0] == user_id]
            for key in keys:
                del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
