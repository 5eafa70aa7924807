"""Stateless energy endpoints.

Every request carries its own cycle profile, events and symptom log, so
these routes need no database.  Handlers are plain ``def`` so FastAPI runs
them in its threadpool while a remote coefficient estimator is consulted.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query

from cyclewise.dependencies import Calculator, CoefficientResolver, Config
from cyclewise.engine.boost import BoostHeuristic
from cyclewise.engine.forecast import WeekForecastGenerator
from cyclewise.engine.reference_table import (
    REFERENCE_TABLE,
    all_categories,
    rows_for_category,
    search_rows,
)
from cyclewise.engine.wellness_index import calculate_wellness_index, wellness_band
from cyclewise.models.energy import (
    BoostRead,
    CoefficientRead,
    CoefficientRequest,
    DayEnergyRequest,
    DayForecastRead,
    ForecastRequest,
    ReferenceEventRead,
    WellnessIndexRead,
    WellnessIndexRequest,
)

router = APIRouter(prefix="/energy", tags=["energy"])


def _forecast(body: ForecastRequest, calculator: Calculator, config: Config) -> tuple[list, list]:
    generator = WeekForecastGenerator(calculator, config)
    events = [e.to_domain() for e in body.events]
    try:
        forecast = generator.generate(
            body.cycle_profile.to_domain() if body.cycle_profile else None,
            events,
            body.start_date,
            body.days,
            body.symptom_log.to_domain(body.start_date) if body.symptom_log else None,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return forecast, events


@router.post("/day", response_model=DayForecastRead)
def day_energy(body: DayEnergyRequest, calculator: Calculator) -> Any:
    return calculator.calculate(
        body.date,
        body.cycle_profile.to_domain() if body.cycle_profile else None,
        [e.to_domain() for e in body.events],
        body.symptom_log.to_domain(body.date) if body.symptom_log else None,
    )


@router.post("/week", response_model=list[DayForecastRead])
def week(body: ForecastRequest, calculator: Calculator, config: Config) -> Any:
    days, _ = _forecast(body, calculator, config)
    return days


@router.post("/boost", response_model=BoostRead)
def boost(body: ForecastRequest, calculator: Calculator, config: Config) -> Any:
    """Forecast the window, then suggest moving one costly event off an overloaded day."""
    days, events = _forecast(body, calculator, config)
    return BoostHeuristic(config).evaluate(days, events)


@router.post("/coefficient", response_model=CoefficientRead)
def coefficient(body: CoefficientRequest, resolver: CoefficientResolver) -> Any:
    return resolver.resolve(body.title, body.phase, body.time_of_day, body.stress_level)


@router.post("/wellness-index", response_model=WellnessIndexRead)
def wellness_index(body: WellnessIndexRequest, config: Config) -> Any:
    index = calculate_wellness_index(
        body.energy,
        body.sleep_quality,
        body.stress_level,
        body.mood,
        body.physical_symptoms,
        config.wellness_index,
    )
    return WellnessIndexRead(
        wellness_index=index, band=wellness_band(index, config.wellness_index)
    )


@router.get("/reference-events", response_model=list[ReferenceEventRead])
def reference_events(
    category: str | None = Query(default=None),
    q: str | None = Query(default=None, min_length=1),
) -> Any:
    rows = list(REFERENCE_TABLE)
    if category:
        rows = rows_for_category(category)
        if not rows:
            raise HTTPException(
                status_code=404,
                detail=f"Unknown category {category!r}; expected one of {all_categories()}",
            )
    if q:
        matches = set(search_rows(q))
        rows = [row for row in rows if row in matches]
    return rows


@router.get("/reference-categories", response_model=list[str])
def reference_categories() -> Any:
    return all_categories()
