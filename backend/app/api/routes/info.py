"""Info routes. Only the liveness probe bypasses admission control."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import enforce_rate_limit, get_relay, get_settings
from app.core.config import Settings
from app.core.errors import StorageError
from app.core.logger import logger
from app.schemas.messages import HealthResponse, InfoResponse
from app.services.relay import RelayService

router = APIRouter(tags=["info"])


@router.get(
    "/info", response_model=InfoResponse, dependencies=[Depends(enforce_rate_limit)]
)
def get_info(settings: Settings = Depends(get_settings)) -> InfoResponse:
    """Get application info."""
    return InfoResponse(
        name=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.DESCRIPTION,
    )


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Liveness check. Does not touch storage."""
    return HealthResponse(status="ok")


@router.get(
    "/ready", response_model=HealthResponse, dependencies=[Depends(enforce_rate_limit)]
)
async def readiness_check(relay: RelayService = Depends(get_relay)) -> HealthResponse:
    """Readiness check: storage must answer a ping."""
    try:
        await relay.store.ping()
    except StorageError:
        logger.error("storage_ping_error", extra={"endpoint": "ready"}, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage unavailable",
        )
    return HealthResponse(status="ok")
