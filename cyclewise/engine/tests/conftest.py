"""Shared fixtures for the energy engine tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from cyclewise.engine.base import CalendarEvent, CycleProfile, SymptomLog
from cyclewise.engine.coefficients import EventCoefficientResolver
from cyclewise.engine.config_loader import EnergyConfig, load_energy_config
from cyclewise.engine.energy_calculator import DailyEnergyCalculator
from cyclewise.engine.estimators import StaticCoefficientEstimator
from cyclewise.engine.reference_table import CoefficientTableRow

TEST_USER_ID = "0b6c1c1e-4a43-4d8e-9a52-8f0c6a1d2e11"
CYCLE_START = date(2024, 1, 1)
# Cycle day 8 of the default profile: follicular
TEST_DATE = date(2024, 1, 8)

# A row with round numbers so expected impacts are easy to compute by hand
TEST_ROW = CoefficientTableRow(
    category="work",
    event_type="Test review",
    base=-0.5,
    menstrual=0.4,
    follicular=0.0,
    ovulation=-0.2,
    luteal=0.2,
    morning=0.0,
    afternoon=0.2,
    evening=0.4,
    stress_coefficient=0.5,
)


def make_event(
    title: str,
    start: datetime,
    minutes: int = 60,
    event_id: str | None = None,
) -> CalendarEvent:
    return CalendarEvent(
        id=event_id or f"evt-{title.lower().replace(' ', '-')}-{start:%Y%m%d%H%M}",
        title=title,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def energy_config() -> EnergyConfig:
    """Load the real bundled config for tests."""
    return load_energy_config()


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def profile() -> CycleProfile:
    return CycleProfile(start_date=CYCLE_START, cycle_length_days=28, menstrual_length_days=5)


@pytest.fixture
def static_estimator() -> StaticCoefficientEstimator:
    return StaticCoefficientEstimator(
        matches={"Test review": ("Test review", 0.95), "Weak match": ("Test review", 0.5)},
        estimates={"Quarterly review": -0.4, "Beach day": 0.6},
    )


@pytest.fixture
def resolver(
    static_estimator: StaticCoefficientEstimator, energy_config: EnergyConfig
) -> EventCoefficientResolver:
    return EventCoefficientResolver(static_estimator, energy_config, table=(TEST_ROW,))


@pytest.fixture
def calculator(
    resolver: EventCoefficientResolver, energy_config: EnergyConfig
) -> DailyEnergyCalculator:
    return DailyEnergyCalculator(resolver, energy_config)


@pytest.fixture
def good_day_log() -> SymptomLog:
    """sleep 4, stress 2, wellness 70 → modifiers +5, +3, +3."""
    return SymptomLog(
        date=TEST_DATE,
        energy=4,
        sleep_quality=4,
        stress_level=2,
        wellness_index=70,
    )
