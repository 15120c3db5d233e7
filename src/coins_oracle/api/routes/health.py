"""Health check endpoints."""

from fastapi import APIRouter, Request

from coins_oracle import __version__
from coins_oracle.config import get_settings

router = APIRouter()


@router.get("/ping")
async def ping():
    """Liveness probe, also used to keep the service warm."""
    return {"message": "pong"}


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "coins-oracle"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration info."""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "coins-oracle",
        "version": __version__,
        "registered_clients": len(request.app.state.resolver),
        "config": settings.get_safe_dict(),
    }
