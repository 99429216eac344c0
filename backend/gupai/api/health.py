"""
Health API endpoint - liveness probe for the completion provider contract.
"""

from fastapi import APIRouter

from ..config import settings
from ..models import HealthStatus

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthStatus)
async def health():
    """Report that the backend is up."""
    return HealthStatus(
        status="OK",
        service=f"{settings.app_name} Backend ({settings.backend_mode})",
        version=settings.app_version,
    )
