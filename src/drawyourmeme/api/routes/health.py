"""
Health check endpoints.

Provides health status, version information and registry counters.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from drawyourmeme import __version__
from drawyourmeme.api.dependencies import get_registry
from drawyourmeme.api.schemas.responses import HealthResponse
from drawyourmeme.registry.storage import Registry

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse, include_in_schema=False)
async def health_check(registry: Registry = Depends(get_registry)) -> HealthResponse:
    """
    Report service status.

    The registry lives in memory, so a responding process is a healthy one;
    the counters show how much state it currently holds.
    """
    stats = registry.stats()
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        components={
            "users": stats.total_users,
            "tokens": stats.total_tokens,
            "votes": stats.total_votes,
        },
    )
