"""Health Check — reports whether the store connection is reachable.

Invariants:
    - GET /api/healthcheck returns 200 text when the database answers SELECT 1
    - Returns 500 text otherwise; failure detail goes to the logs only

Design Decisions:
    - db_manager read through the module at request time: tests and lifespan swap it
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

from todo_api.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/healthcheck", tags=["health"])


@router.get("", response_class=PlainTextResponse)
async def check_connection():
    """Liveness check including database connectivity."""
    db_ok = await database.db_manager.health_check() if database.db_manager else False
    if not db_ok:
        logger.error("Health check failed: database unreachable")
        return PlainTextResponse(
            "FAILURE: the API cannot reach the database.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return PlainTextResponse("SUCCESS: the API is connected to the database.")
