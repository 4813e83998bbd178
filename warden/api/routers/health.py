"""
Warden - Health Router
======================

Health check endpoint.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import sqlite3

from fastapi import APIRouter, Request

from warden.core.logger import logger
from warden.api.models.base import APIResponse, HealthResponse


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=APIResponse[HealthResponse])
async def health_check(request: Request) -> APIResponse[HealthResponse]:
    """
    Basic health check endpoint.

    Returns simple status for load balancers and monitoring.
    """
    db_connected = True
    try:
        request.app.state.auth_flow.db.fetchone("SELECT 1")
    except sqlite3.Error as e:
        logger.warning("Health Check Database Error", [
            ("Error", str(e)[:100]),
        ])
        db_connected = False

    return APIResponse(
        success=True,
        data=HealthResponse(
            status="healthy" if db_connected else "degraded",
            run_id=logger.run_id,
            database=db_connected,
        ),
    )


__all__ = ["router"]
