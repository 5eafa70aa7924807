"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException

from cyclewise.config import get_settings
from cyclewise.engine.coefficients import EventCoefficientResolver
from cyclewise.engine.config_loader import EnergyConfig, get_energy_config
from cyclewise.engine.energy_calculator import DailyEnergyCalculator
from cyclewise.engine.estimators import (
    AnthropicCoefficientEstimator,
    CoefficientEstimator,
    FuzzyCoefficientEstimator,
)
from cyclewise.engine.planner import EnergyPlanner
from cyclewise.services import database
from cyclewise.services.stores import (
    PostgresCycleStore,
    PostgresEventStore,
    PostgresSymptomStore,
)

logger = logging.getLogger("cyclewise.dependencies")


def get_config() -> EnergyConfig:
    return get_energy_config()


@lru_cache
def get_estimator() -> CoefficientEstimator:
    """Claude-backed estimator when an API key is configured, offline fuzzy matching otherwise."""
    settings = get_settings()
    cc = get_energy_config().coefficients
    fuzzy = FuzzyCoefficientEstimator(
        fallback_coefficient=cc.fallback_coefficient,
        score_cutoff=cc.fuzzy_score_cutoff,
    )
    if not settings.anthropic_api_key:
        logger.info("ANTHROPIC_API_KEY not set; using fuzzy coefficient matching only")
        return fuzzy
    return AnthropicCoefficientEstimator(
        api_key=settings.anthropic_api_key,
        model=settings.anthropic_model,
        timeout_seconds=settings.estimator_timeout_seconds,
        fuzzy=fuzzy,
    )


@lru_cache
def get_coefficient_resolver() -> EventCoefficientResolver:
    # Process-wide so the per-title memo survives across requests
    return EventCoefficientResolver(estimator=get_estimator(), config=get_energy_config())


@lru_cache
def get_calculator() -> DailyEnergyCalculator:
    return DailyEnergyCalculator(
        coefficient_resolver=get_coefficient_resolver(), config=get_energy_config()
    )


@lru_cache
def _planner() -> EnergyPlanner:
    config = get_energy_config()
    return EnergyPlanner(
        PostgresCycleStore(),
        PostgresEventStore(),
        PostgresSymptomStore(config.wellness_index),
        calculator=get_calculator(),
        config=config,
    )


def get_planner() -> EnergyPlanner:
    """Planner over the Postgres stores; 503 when no database is configured."""
    if not database.is_configured():
        raise HTTPException(status_code=503, detail="Database not configured")
    return _planner()


# Annotated shortcuts for route signatures
Config = Annotated[EnergyConfig, Depends(get_config)]
Calculator = Annotated[DailyEnergyCalculator, Depends(get_calculator)]
CoefficientResolver = Annotated[EventCoefficientResolver, Depends(get_coefficient_resolver)]
Planner = Annotated[EnergyPlanner, Depends(get_planner)]
