"""Health check endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from cyclewise.config import get_settings
from cyclewise.engine.config_loader import get_energy_config
from cyclewise.services import database

router = APIRouter(tags=["system"])
logger = logging.getLogger("cyclewise.health")


@router.get("/health")
async def health_check() -> dict:
    """Liveness check. Returns 200 if the API process is up.

    Without ``DATABASE_URL`` the stateless energy routes still work, so an
    unconfigured database reports ``disabled`` rather than degrading.
    """
    settings = get_settings()
    db_status = "disabled"
    if database.is_configured():
        try:
            await database.fetchval("SELECT 1")
            db_status = "connected"
        except Exception as exc:
            logger.warning("Health check DB query failed: %s", exc)
            db_status = "unreachable"

    return {
        "status": "degraded" if db_status == "unreachable" else "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": db_status,
        "energyConfigVersion": get_energy_config().version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
