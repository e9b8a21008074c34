"""
Health check endpoint.
"""
from fastapi import APIRouter

from siska.core.config import get_settings
from siska.core.logging import get_logger
from siska.services.chat.dispatcher import get_dispatcher

logger = get_logger(__name__)
router = APIRouter()


@router.get("")
async def health_check():
    """
    Liveness plus provider readiness.

    Returns:
        - status: always "ok" while the process serves requests
        - credentials: which provider credentials are configured (no values)
        - circuits: circuit breaker state per provider
    """
    circuits = get_dispatcher().circuit_snapshots()
    degraded = [c["name"] for c in circuits if c["state"] != "closed"]
    return {
        "status": "ok",
        "message": "API is running",
        "credentials": get_settings().credential_status(),
        "circuits": circuits,
        "degraded_providers": degraded,
    }
