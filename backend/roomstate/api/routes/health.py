"""Health probes for the roomstate process.

GET /api/v1/health/ answers as long as the event loop runs. GET
/api/v1/health/ready also round-trips the database that holds the event log
and the membership projection, and answers 503 until it is reachable.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from roomstate import __version__
from roomstate.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "roomstate", "version": __version__}


@router.get("/ready")
async def readiness_check():
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
