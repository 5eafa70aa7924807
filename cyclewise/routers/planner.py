"""Per-user energy endpoints backed by the Postgres stores.

Store failures surface as 503, unknown events as 404 and boost moves with
nothing to move to as 409 (see ``main.register_error_handlers``).
"""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Response

from cyclewise.dependencies import Config, Planner
from cyclewise.engine.base import SymptomLog
from cyclewise.engine.config_loader import EnergyConfig
from cyclewise.engine.wellness_index import wellness_band
from cyclewise.models.energy import (
    BoostRead,
    CalendarEventRead,
    CycleProfileIn,
    CycleStatusRead,
    DayForecastRead,
    DismissRequest,
    EnergyBreakdownRead,
    MoveEventRequest,
    SymptomLogRead,
    SymptomLogUpdate,
)

router = APIRouter(prefix="/users/{user_id}", tags=["planner"])

# 1-5 self-ratings; an explicit null leaves the stored value unchanged
_REQUIRED_SCORES = ("energy", "sleep_quality", "stress_level")


def _log_read(log: SymptomLog, config: EnergyConfig) -> SymptomLogRead:
    read = SymptomLogRead.model_validate(log)
    if read.wellness_index is not None:
        read.wellness_band = wellness_band(read.wellness_index, config.wellness_index)
    return read


# ---------- Cycle ----------

@router.get("/cycle-day", response_model=CycleStatusRead)
async def cycle_day(
    user_id: str, planner: Planner, on: date | None = Query(default=None)
) -> Any:
    status = await planner.cycle_status(user_id, on)
    return CycleStatusRead(
        date=status.date,
        day_in_cycle=status.cycle_day.day_in_cycle,
        phase=status.cycle_day.phase,
        next_period_start=status.next_period_start,
        days_until_next_period=status.days_until_next_period,
    )


@router.put("/cycle-profile", response_model=CycleProfileIn)
async def update_cycle_profile(user_id: str, body: CycleProfileIn, planner: Planner) -> Any:
    return await planner.update_cycle_profile(user_id, body.to_domain())


# ---------- Energy ----------

@router.get("/energy/today", response_model=EnergyBreakdownRead)
async def today(user_id: str, planner: Planner, config: Config) -> Any:
    breakdown = await planner.today_breakdown(user_id)
    read = EnergyBreakdownRead.model_validate(breakdown)
    if read.wellness_index is not None:
        read.wellness_band = wellness_band(read.wellness_index, config.wellness_index)
    return read


@router.get("/forecast", response_model=list[DayForecastRead])
async def forecast(
    user_id: str, planner: Planner, days: int | None = Query(default=None, ge=1)
) -> Any:
    try:
        return await planner.week_forecast(user_id, days)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/boost", response_model=BoostRead)
async def boost(
    user_id: str, planner: Planner, days: int | None = Query(default=None, ge=1)
) -> Any:
    try:
        return await planner.boost(user_id, days)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/boost/move", response_model=CalendarEventRead)
async def move_event(user_id: str, body: MoveEventRequest, planner: Planner) -> Any:
    return await planner.move_event(user_id, body.event_id, body.target_date, body.slot_index)


@router.post("/boost/dismiss", status_code=204)
async def dismiss(user_id: str, body: DismissRequest, planner: Planner) -> Response:
    planner.dismiss(user_id, body.event_id)
    return Response(status_code=204)


@router.delete("/boost/dismiss/{event_id}", status_code=204)
async def restore(user_id: str, event_id: str, planner: Planner) -> Response:
    if not planner.restore(user_id, event_id):
        raise HTTPException(status_code=404, detail="No dismissal for this event")
    return Response(status_code=204)


# ---------- Symptoms ----------

@router.get("/symptoms/{log_date}", response_model=SymptomLogRead)
async def get_symptoms(user_id: str, log_date: date, planner: Planner, config: Config) -> Any:
    log = await planner.symptom_log(user_id, log_date)
    if log is None:
        raise HTTPException(status_code=404, detail="Symptom log not found")
    return _log_read(log, config)


@router.put("/symptoms/{log_date}", response_model=SymptomLogRead)
async def save_symptoms(
    user_id: str, log_date: date, body: SymptomLogUpdate, planner: Planner, config: Config
) -> Any:
    fields = {
        k: v for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k not in _REQUIRED_SCORES
    }
    if not fields:
        raise HTTPException(status_code=422, detail="No symptom fields to update")
    log = await planner.save_symptoms(user_id, log_date, fields)
    return _log_read(log, config)
