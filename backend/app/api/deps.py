from fastapi import HTTPException, Request, status

from app.core.config import Settings
from app.core.logger import logger
from app.core.rate_limiter import TokenBucket
from app.services.relay import RelayService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_relay(request: Request) -> RelayService:
    return request.app.state.relay


def enforce_rate_limit(request: Request) -> None:
    """Reject the request with 429 when the token bucket is empty."""
    limiter: TokenBucket = request.app.state.limiter
    if not limiter.try_acquire():
        logger.debug(
            "rate_limited", extra={"path": request.url.path, "method": request.method}
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests",
        )
