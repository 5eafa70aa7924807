"""Tests for the boost rescheduling heuristic."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest

from cyclewise.engine.base import DayForecast, EventImpact, Phase
from cyclewise.engine.boost import (
    BoostHeuristic,
    BoostReason,
    DismissalRegistry,
    reschedule_times,
)
from cyclewise.engine.config_loader import EnergyConfig
from cyclewise.engine.tests.conftest import TEST_DATE, TEST_USER_ID, make_event


def _d(offset: int) -> date:
    return TEST_DATE + timedelta(days=offset)


def _at(offset: int, hour: int) -> datetime:
    day = _d(offset)
    return datetime(day.year, day.month, day.day, hour)


def _day(offset: int, energy: int, impacts: dict[str, int] | None = None) -> DayForecast:
    return DayForecast(
        date=_d(offset),
        cycle_phase=Phase.luteal,
        base_energy=55,
        final_energy=energy,
        events=[EventImpact(name=k, impact=v) for k, v in (impacts or {}).items()],
    )


@pytest.fixture
def heuristic(energy_config: EnergyConfig) -> BoostHeuristic:
    return BoostHeuristic(energy_config)


@pytest.fixture
def week() -> list[DayForecast]:
    return [
        _day(0, 50, {"Deadline": -20, "Email": -3}),
        _day(1, 80),
        _day(2, 60),
        _day(3, 90),
        _day(4, 75),
        _day(5, 72),
        _day(6, 40),
    ]


class TestBoostRecommendation:
    def test_moves_costliest_event_to_best_days(
        self, heuristic: BoostHeuristic, week: list[DayForecast]
    ) -> None:
        deadline = make_event("Deadline", _at(0, 9))
        email = make_event("Email", _at(0, 11), minutes=30)

        evaluation = heuristic.evaluate(week, [email, deadline])

        assert evaluation.reason == BoostReason.recommended
        assert evaluation.has_recommendation
        rec = evaluation.recommendation
        assert rec is not None
        assert rec.event_id == deadline.id
        assert rec.event_title == "Deadline"
        assert rec.current_date == _d(0)
        assert rec.current_day_energy == 50
        assert rec.energy_cost == 20
        assert [(s.date, s.energy) for s in rec.suggested_slots] == [
            (_d(3), 90), (_d(1), 80), (_d(4), 75),
        ]

    def test_no_overloaded_days(self, heuristic: BoostHeuristic) -> None:
        days = [_day(0, 55), _day(1, 80)]
        evaluation = heuristic.evaluate(days, [make_event("Deadline", _at(0, 9))])
        assert not evaluation.has_recommendation
        assert evaluation.reason == BoostReason.no_overloaded_days

    def test_no_events_on_overloaded_days(
        self, heuristic: BoostHeuristic, week: list[DayForecast]
    ) -> None:
        evaluation = heuristic.evaluate(week, [make_event("Deadline", _at(1, 9))])
        assert evaluation.reason == BoostReason.no_events_on_overloaded_days

    def test_cheap_events_are_not_movable(self, heuristic: BoostHeuristic) -> None:
        days = [_day(0, 50, {"Email": -5}), _day(1, 90)]
        evaluation = heuristic.evaluate(days, [make_event("Email", _at(0, 9))])
        assert evaluation.reason == BoostReason.no_movable_events

    def test_long_events_are_not_movable(self, heuristic: BoostHeuristic) -> None:
        days = [_day(0, 50, {"Offsite": -30}), _day(1, 90)]
        evaluation = heuristic.evaluate(days, [make_event("Offsite", _at(0, 9), minutes=181)])
        assert evaluation.reason == BoostReason.no_movable_events

    def test_three_hour_event_is_movable(self, heuristic: BoostHeuristic) -> None:
        days = [_day(0, 50, {"Offsite": -30}), _day(1, 90)]
        rec = heuristic.recommend(days, [make_event("Offsite", _at(0, 9), minutes=180)])
        assert rec is not None

    def test_positive_impact_counts_as_cost(self, heuristic: BoostHeuristic) -> None:
        days = [_day(0, 50, {"Long lunch": 12}), _day(1, 90)]
        rec = heuristic.recommend(days, [make_event("Long lunch", _at(0, 12))])
        assert rec is not None
        assert rec.energy_cost == 12

    def test_first_of_equal_costs_wins(self, heuristic: BoostHeuristic) -> None:
        days = [_day(0, 50, {"A": -10, "B": -10}), _day(1, 90)]
        first = make_event("A", _at(0, 9))
        second = make_event("B", _at(0, 13))
        rec = heuristic.recommend(days, [first, second])
        assert rec is not None
        assert rec.event_id == first.id

    def test_slots_must_be_after_event_date(self, heuristic: BoostHeuristic) -> None:
        days = [_day(0, 90), _day(1, 80), _day(2, 40, {"Deadline": -20}), _day(3, 65)]
        evaluation = heuristic.evaluate(days, [make_event("Deadline", _at(2, 9))])
        assert evaluation.reason == BoostReason.no_high_energy_days

    def test_seventy_is_not_high_energy(self, heuristic: BoostHeuristic) -> None:
        days = [_day(0, 40, {"Deadline": -20}), _day(1, 70)]
        evaluation = heuristic.evaluate(days, [make_event("Deadline", _at(0, 9))])
        assert evaluation.reason == BoostReason.no_high_energy_days

    def test_fallback_to_best_future_days(self, energy_config: EnergyConfig) -> None:
        config = replace(
            energy_config, boost=replace(energy_config.boost, fallback_to_best_future_days=True)
        )
        days = [_day(0, 40, {"Deadline": -20}), _day(1, 60), _day(2, 65)]
        rec = BoostHeuristic(config).recommend(days, [make_event("Deadline", _at(0, 9))])
        assert rec is not None
        assert [s.energy for s in rec.suggested_slots] == [65, 60]

    def test_recommendation_invariants(
        self, heuristic: BoostHeuristic, week: list[DayForecast]
    ) -> None:
        deadline = make_event("Deadline", _at(0, 9))
        rec = heuristic.recommend(week, [deadline])
        assert rec is not None
        assert rec.energy_cost > 5
        assert deadline.duration_minutes <= 180
        assert len(rec.suggested_slots) <= 3
        for slot in rec.suggested_slots:
            assert slot.date > deadline.date
            assert slot.energy > 70


class TestRescheduleTimes:
    def test_keeps_time_and_duration(self) -> None:
        event = make_event("Deadline", datetime(2024, 1, 8, 9, 30), minutes=90)
        start, end = reschedule_times(event, date(2024, 1, 11))
        assert start == datetime(2024, 1, 11, 9, 30)
        assert end == datetime(2024, 1, 11, 11, 0)

    def test_keeps_timezone(self) -> None:
        tz = timezone(timedelta(hours=2))
        event = make_event("Deadline", datetime(2024, 1, 8, 23, 0, tzinfo=tz), minutes=120)
        start, end = reschedule_times(event, date(2024, 1, 11))
        assert start == datetime(2024, 1, 11, 23, 0, tzinfo=tz)
        assert end == datetime(2024, 1, 12, 1, 0, tzinfo=tz)


class TestDismissalRegistry:
    def test_dismissed_until_next_day(self) -> None:
        registry = DismissalRegistry()
        registry.dismiss(TEST_USER_ID, "evt-1", TEST_DATE)
        assert registry.is_dismissed(TEST_USER_ID, "evt-1", TEST_DATE)
        assert not registry.is_dismissed(TEST_USER_ID, "evt-1", _d(1))
        assert not registry.is_dismissed(TEST_USER_ID, "evt-2", TEST_DATE)
        assert not registry.is_dismissed("other-user", "evt-1", TEST_DATE)

    def test_restore(self) -> None:
        registry = DismissalRegistry()
        registry.dismiss(TEST_USER_ID, "evt-1", TEST_DATE)
        assert registry.restore(TEST_USER_ID, "evt-1") is True
        assert not registry.is_dismissed(TEST_USER_ID, "evt-1", TEST_DATE)
        assert registry.restore(TEST_USER_ID, "evt-1") is False

    def test_prune_drops_old_days(self) -> None:
        registry = DismissalRegistry()
        registry.dismiss(TEST_USER_ID, "evt-1", TEST_DATE)
        registry.dismiss(TEST_USER_ID, "evt-2", _d(1))
        assert registry.prune(_d(1)) == 1
        assert registry.is_dismissed(TEST_USER_ID, "evt-2", _d(1))
