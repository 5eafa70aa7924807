"""Fixtures for the HTTP API tests: an app wired to in-memory stores."""

from __future__ import annotations

from datetime import datetime
from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from cyclewise.dependencies import get_calculator, get_coefficient_resolver, get_planner
from cyclewise.engine.base import CycleProfile
from cyclewise.engine.coefficients import EventCoefficientResolver
from cyclewise.engine.config_loader import EnergyConfig, load_energy_config
from cyclewise.engine.energy_calculator import DailyEnergyCalculator
from cyclewise.engine.estimators import StaticCoefficientEstimator
from cyclewise.engine.planner import EnergyPlanner
from cyclewise.engine.stores import (
    InMemoryCycleStore,
    InMemoryEventStore,
    InMemorySymptomStore,
)
from cyclewise.engine.tests.conftest import (
    CYCLE_START,
    TEST_DATE,
    TEST_ROW,
    TEST_USER_ID,
    make_event,
)
from cyclewise.main import create_app

REVIEW_ID = "evt-review"
BEACH_ID = "evt-beach"


@pytest.fixture
def energy_config() -> EnergyConfig:
    return load_energy_config()


@pytest.fixture
def resolver(energy_config: EnergyConfig) -> EventCoefficientResolver:
    estimator = StaticCoefficientEstimator(
        matches={"Test review": ("Test review", 0.95)},
        estimates={"Quarterly review": -0.4, "Beach day": 0.6},
    )
    return EventCoefficientResolver(estimator, energy_config, table=(TEST_ROW,))


@pytest.fixture
def planner(resolver: EventCoefficientResolver, energy_config: EnergyConfig) -> EnergyPlanner:
    events = InMemoryEventStore()
    events.add(TEST_USER_ID, make_event("Quarterly review", datetime(2024, 1, 8, 9), event_id=REVIEW_ID))
    events.add(TEST_USER_ID, make_event("Beach day", datetime(2024, 1, 10, 10), event_id=BEACH_ID))
    return EnergyPlanner(
        InMemoryCycleStore({TEST_USER_ID: CycleProfile(start_date=CYCLE_START)}),
        events,
        InMemorySymptomStore(energy_config.wellness_index),
        calculator=DailyEnergyCalculator(resolver, energy_config),
        config=energy_config,
        clock=lambda: TEST_DATE,
    )


@pytest.fixture
def app(resolver: EventCoefficientResolver, planner: EnergyPlanner, energy_config: EnergyConfig) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_coefficient_resolver] = lambda: resolver
    app.dependency_overrides[get_calculator] = lambda: DailyEnergyCalculator(resolver, energy_config)
    app.dependency_overrides[get_planner] = lambda: planner
    return app


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    # No context manager: the lifespan (and its database pool) is not started
    yield TestClient(app)
