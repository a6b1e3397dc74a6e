"""
Health check endpoints.

Provides endpoints for monitoring and load balancer health checks.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from api.dependencies import get_gateway
from core.logging import get_logger
from manager.gateway import CardsGateway


logger = get_logger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Plain-text banner pointing at the cards endpoint."""
    return "OK. Use /cards to read or save the configuration."


@router.get("/health")
async def health_check() -> dict:
    """
    Basic health check.

    Returns 200 if the service is running.
    Used by load balancers and orchestration systems.
    """
    return {
        "status": "healthy",
        "service": "cards-config-store",
    }


@router.get("/ready")
async def readiness_check(
    gateway: CardsGateway = Depends(get_gateway),
) -> dict:
    """
    Readiness check.

    Returns 200 once the store has been set up, naming the active backend.
    """
    return {
        "status": "ready",
        "checks": {
            "storage": gateway.store.backend_name,
        },
    }
