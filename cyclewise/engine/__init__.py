"""Cyclewise energy engine.

Pure scoring core plus the store-backed planner:

    cycle_phase        - cycle day and phase for any date
    coefficients       - event title → signed energy coefficient
    energy_calculator  - daily 0–100 energy score
    forecast           - N-day forecast and per-user cache
    boost              - overloaded-day rescheduling heuristic
    wellness_index     - 0–100 index from a symptom self-report
    planner            - async per-user operations over the stores

Usage::

    from cyclewise.engine import DailyEnergyCalculator, CycleProfile

    calc = DailyEnergyCalculator()
    day = calc.calculate(date.today(), CycleProfile(start_date=date(2024, 1, 1)), events)
"""

from __future__ import annotations

from cyclewise.engine.base import (
    BoostRecommendation,
    CalendarEvent,
    CoefficientLookupError,
    CycleDay,
    CycleProfile,
    DayForecast,
    EnergyBreakdown,
    EventImpact,
    Phase,
    StoreError,
    SuggestedSlot,
    SymptomLog,
    TimeOfDay,
)
from cyclewise.engine.boost import BoostEvaluation, BoostHeuristic, BoostReason, DismissalRegistry
from cyclewise.engine.coefficients import CoefficientResult, EventCoefficientResolver
from cyclewise.engine.config_loader import ConfigValidationError, EnergyConfig, get_energy_config
from cyclewise.engine.cycle_phase import CyclePhaseResolver
from cyclewise.engine.energy_calculator import DailyEnergyCalculator
from cyclewise.engine.estimators import (
    AnthropicCoefficientEstimator,
    CoefficientEstimator,
    FuzzyCoefficientEstimator,
    StaticCoefficientEstimator,
)
from cyclewise.engine.forecast import ForecastCache, WeekForecastGenerator
from cyclewise.engine.planner import EnergyPlanner
from cyclewise.engine.wellness_index import calculate_wellness_index, wellness_band

__all__ = [
    "AnthropicCoefficientEstimator",
    "BoostEvaluation",
    "BoostHeuristic",
    "BoostReason",
    "BoostRecommendation",
    "CalendarEvent",
    "CoefficientEstimator",
    "CoefficientLookupError",
    "CoefficientResult",
    "ConfigValidationError",
    "CycleDay",
    "CyclePhaseResolver",
    "CycleProfile",
    "DailyEnergyCalculator",
    "DayForecast",
    "DismissalRegistry",
    "EnergyBreakdown",
    "EnergyConfig",
    "EnergyPlanner",
    "EventCoefficientResolver",
    "EventImpact",
    "ForecastCache",
    "FuzzyCoefficientEstimator",
    "Phase",
    "StaticCoefficientEstimator",
    "StoreError",
    "SuggestedSlot",
    "SymptomLog",
    "TimeOfDay",
    "WeekForecastGenerator",
    "calculate_wellness_index",
    "get_energy_config",
    "wellness_band",
]
