"""Tests for the store-backed energy planner."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from cyclewise.engine.base import CycleProfile, Phase
from cyclewise.engine.boost import BoostReason
from cyclewise.engine.config_loader import EnergyConfig
from cyclewise.engine.energy_calculator import DailyEnergyCalculator
from cyclewise.engine.planner import (
    EnergyPlanner,
    EventNotFoundError,
    NoSuggestedSlotError,
    today_confidence,
)
from cyclewise.engine.stores import (
    InMemoryCycleStore,
    InMemoryEventStore,
    InMemorySymptomStore,
)
from cyclewise.engine.tests.conftest import TEST_DATE, TEST_USER_ID, make_event

REVIEW_ID = "evt-review"
GOOD_DAY = {
    "energy": 4,
    "sleep_quality": 4,
    "stress_level": 2,
    "mood": ["happy"],
    "physical_symptoms": ["fatigue"],
}


@pytest.fixture
def event_store() -> InMemoryEventStore:
    store = InMemoryEventStore()
    store.add(TEST_USER_ID, make_event("Quarterly review", datetime(2024, 1, 8, 9), event_id=REVIEW_ID))
    store.add(TEST_USER_ID, make_event("Beach day", datetime(2024, 1, 10, 10), event_id="evt-beach"))
    return store


@pytest.fixture
def planner(
    profile: CycleProfile,
    event_store: InMemoryEventStore,
    calculator: DailyEnergyCalculator,
    energy_config: EnergyConfig,
) -> EnergyPlanner:
    return EnergyPlanner(
        InMemoryCycleStore({TEST_USER_ID: profile}),
        event_store,
        InMemorySymptomStore(energy_config.wellness_index),
        calculator=calculator,
        config=energy_config,
        clock=lambda: TEST_DATE,
    )


class TestTodayConfidence:
    @pytest.mark.parametrize("logs,expected", [(0, 50), (1, 52), (3, 55), (30, 95), (40, 100)])
    def test_confidence(self, logs: int, expected: int) -> None:
        assert today_confidence(logs) == expected


class TestTodayBreakdown:
    @pytest.mark.asyncio
    async def test_without_symptom_log(self, planner: EnergyPlanner) -> None:
        breakdown = await planner.today_breakdown(TEST_USER_ID)
        assert breakdown.forecast.final_energy == 50
        assert breakdown.confidence == 50
        assert breakdown.wellness_index is None
        assert breakdown.symptoms == []

    @pytest.mark.asyncio
    async def test_with_logs(self, planner: EnergyPlanner) -> None:
        for offset in (2, 1):
            await planner.save_symptoms(TEST_USER_ID, TEST_DATE - timedelta(days=offset), {"energy": 3})
        await planner.save_symptoms(TEST_USER_ID, TEST_DATE, GOOD_DAY)

        breakdown = await planner.today_breakdown(TEST_USER_ID)

        # 70 - 20 + 5 + 3 + round(0.3)
        assert breakdown.forecast.final_energy == 58
        assert breakdown.wellness_index == 61
        assert breakdown.confidence == 55
        assert breakdown.symptoms == ["happy", "fatigue"]


class TestWeekForecast:
    @pytest.mark.asyncio
    async def test_forecast_is_cached(self, planner: EnergyPlanner) -> None:
        first = await planner.week_forecast(TEST_USER_ID)
        assert [d.final_energy for d in first] == [50, 70, 100, 70, 70, 70, 85]
        assert len(planner.cache) == 7
        assert await planner.week_forecast(TEST_USER_ID) == first

    @pytest.mark.asyncio
    async def test_event_added_to_store_is_picked_up(
        self, planner: EnergyPlanner, event_store: InMemoryEventStore
    ) -> None:
        await planner.week_forecast(TEST_USER_ID)
        event_store.add(
            TEST_USER_ID,
            make_event("Quarterly review", datetime(2024, 1, 9, 9), event_id="evt-new"),
        )

        forecast = await planner.week_forecast(TEST_USER_ID)

        assert [d.final_energy for d in forecast] == [50, 50, 100, 70, 70, 70, 85]
        assert [e.event_id for e in forecast[1].events] == ["evt-new"]

    @pytest.mark.asyncio
    async def test_event_moved_in_store_is_picked_up(
        self, planner: EnergyPlanner, event_store: InMemoryEventStore
    ) -> None:
        await planner.week_forecast(TEST_USER_ID)
        await event_store.update_event_time(
            REVIEW_ID, datetime(2024, 1, 9, 9), datetime(2024, 1, 9, 10)
        )

        forecast = await planner.week_forecast(TEST_USER_ID)

        assert [d.final_energy for d in forecast[:2]] == [70, 50]
        assert len(planner.cache) == 7

    @pytest.mark.asyncio
    async def test_symptom_save_invalidates_today(self, planner: EnergyPlanner) -> None:
        await planner.week_forecast(TEST_USER_ID)
        await planner.save_symptoms(TEST_USER_ID, TEST_DATE, GOOD_DAY)
        assert len(planner.cache) == 6

        forecast = await planner.week_forecast(TEST_USER_ID)
        assert forecast[0].final_energy == 58

    @pytest.mark.asyncio
    async def test_profile_update_invalidates_user(self, planner: EnergyPlanner) -> None:
        await planner.week_forecast(TEST_USER_ID)
        await planner.update_cycle_profile(TEST_USER_ID, CycleProfile(start_date=date(2024, 1, 6)))
        assert len(planner.cache) == 0

        forecast = await planner.week_forecast(TEST_USER_ID)
        assert forecast[0].cycle_phase == Phase.menstrual

    @pytest.mark.asyncio
    async def test_unknown_user_defaults_to_follicular(self, planner: EnergyPlanner) -> None:
        forecast = await planner.week_forecast("nobody", days=3)
        assert {d.cycle_phase for d in forecast} == {Phase.follicular}
        assert [d.final_energy for d in forecast] == [70, 70, 70]

    @pytest.mark.asyncio
    async def test_invalid_window(self, planner: EnergyPlanner) -> None:
        with pytest.raises(ValueError):
            await planner.week_forecast(TEST_USER_ID, days=45)


class TestBoost:
    @pytest.mark.asyncio
    async def test_recommends_moving_review(self, planner: EnergyPlanner) -> None:
        evaluation = await planner.boost(TEST_USER_ID)
        rec = evaluation.recommendation
        assert rec is not None
        assert rec.event_id == REVIEW_ID
        assert rec.energy_cost == 20
        assert [s.date for s in rec.suggested_slots] == [date(2024, 1, 10), date(2024, 1, 14)]

    @pytest.mark.asyncio
    async def test_dismiss_hides_until_restored(self, planner: EnergyPlanner) -> None:
        planner.dismiss(TEST_USER_ID, REVIEW_ID)
        evaluation = await planner.boost(TEST_USER_ID)
        assert evaluation.recommendation is None
        assert evaluation.reason == BoostReason.dismissed

        assert planner.restore(TEST_USER_ID, REVIEW_ID) is True
        assert (await planner.boost(TEST_USER_ID)).reason == BoostReason.recommended

    @pytest.mark.asyncio
    async def test_move_to_first_slot(
        self, planner: EnergyPlanner, event_store: InMemoryEventStore
    ) -> None:
        await planner.week_forecast(TEST_USER_ID)

        moved = await planner.move_event(TEST_USER_ID, REVIEW_ID)

        assert moved.start_time == datetime(2024, 1, 10, 9)
        assert moved.end_time == datetime(2024, 1, 10, 10)
        stored = await event_store.get_event(TEST_USER_ID, REVIEW_ID)
        assert stored is not None and stored.start_time == datetime(2024, 1, 10, 9)

        forecast = await planner.week_forecast(TEST_USER_ID)
        assert forecast[0].final_energy == 70
        assert forecast[2].final_energy == 80

    @pytest.mark.asyncio
    async def test_move_to_second_slot(self, planner: EnergyPlanner) -> None:
        moved = await planner.move_event(TEST_USER_ID, REVIEW_ID, slot_index=1)
        assert moved.date == date(2024, 1, 14)

    @pytest.mark.asyncio
    async def test_move_to_explicit_date(self, planner: EnergyPlanner) -> None:
        moved = await planner.move_event(TEST_USER_ID, "evt-beach", target_date=date(2024, 1, 12))
        assert moved.start_time == datetime(2024, 1, 12, 10)

    @pytest.mark.asyncio
    async def test_move_unknown_event(self, planner: EnergyPlanner) -> None:
        with pytest.raises(EventNotFoundError):
            await planner.move_event(TEST_USER_ID, "evt-missing")

    @pytest.mark.asyncio
    async def test_move_event_without_recommendation(self, planner: EnergyPlanner) -> None:
        with pytest.raises(NoSuggestedSlotError):
            await planner.move_event(TEST_USER_ID, "evt-beach")

    @pytest.mark.asyncio
    async def test_move_bad_slot_index(self, planner: EnergyPlanner) -> None:
        with pytest.raises(NoSuggestedSlotError):
            await planner.move_event(TEST_USER_ID, REVIEW_ID, slot_index=5)


class TestCycleStatus:
    @pytest.mark.asyncio
    async def test_status_for_today(self, planner: EnergyPlanner) -> None:
        status = await planner.cycle_status(TEST_USER_ID)
        assert status.cycle_day.day_in_cycle == 8
        assert status.cycle_day.phase == Phase.follicular
        assert status.next_period_start == date(2024, 1, 29)
        assert status.days_until_next_period == 21

    @pytest.mark.asyncio
    async def test_status_without_profile(self, planner: EnergyPlanner) -> None:
        status = await planner.cycle_status("nobody")
        assert status.cycle_day.day_in_cycle is None
        assert status.next_period_start is None
