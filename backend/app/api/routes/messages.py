"""Message routes - one-time code reservation, attachment and retrieval."""

# ENDPOINTS:
# POST   /code            - Reserve a fresh access code
# PUT    /message/{code}  - Attach the ciphertext to a reserved code
# GET    /message/{code}  - Retrieve the ciphertext once, then it is gone

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import PlainTextResponse
from starlette.requests import ClientDisconnect

from app.api.deps import enforce_rate_limit, get_relay, get_settings
from app.core.config import Settings
from app.core.errors import (
    AttachConflictError,
    CodeSpaceExhaustedError,
    InvalidPayloadError,
    MessageNotFoundError,
    StorageError,
)
from app.core.logger import logger
from app.schemas.messages import CodeResponse
from app.services.relay import RelayService

router = APIRouter(tags=["messages"], dependencies=[Depends(enforce_rate_limit)])


# ============================================================================
# HELPERS
# ============================================================================


async def read_capped_body(request: Request, limit: int) -> bytes:
    """Read the request body, raising ``InvalidPayloadError`` past ``limit`` bytes."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise InvalidPayloadError("Payload too large")

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise InvalidPayloadError("Payload too large")
    return bytes(body)


# ============================================================================
# ENDPOINTS
# ============================================================================


@router.post(
    "/code",
    response_model=CodeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_code(
    response: Response,
    relay: RelayService = Depends(get_relay),
) -> CodeResponse:
    """Reserve a new code. The placeholder expires unless a message is attached."""
    try:
        code = await relay.issue_code()
    except StorageError:
        logger.error("reserve_code_error", extra={"endpoint": "code"}, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Storage unavailable",
        )
    except CodeSpaceExhaustedError:
        logger.error("reserve_code_exhausted", extra={"endpoint": "code"})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not allocate a code",
        )

    response.headers["Location"] = f"/message/{code}"
    return CodeResponse(code=code)


@router.put("/message/{code}", status_code=status.HTTP_204_NO_CONTENT)
async def submit_message(
    code: str,
    request: Request,
    relay: RelayService = Depends(get_relay),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Attach ciphertext to a reserved code.

    The body is the client-encrypted payload as text. Attaching restarts the
    record's TTL with the message TTL. A code can only be attached once.
    """
    try:
        body = await read_capped_body(request, settings.max_body_bytes)
    except (InvalidPayloadError, ClientDisconnect):
        logger.warning("body_read_error", extra={"endpoint": "message_put"})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid request body",
        )

    try:
        await relay.submit_payload(code, body)
    except InvalidPayloadError as exc:
        logger.warning("empty_body", extra={"endpoint": "message_put", "reason": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    except AttachConflictError:
        logger.warning("attach_conflict", extra={"endpoint": "message_put"})
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Code is unknown or already used",
        )
    except StorageError:
        logger.error("attach_cipher_error", extra={"endpoint": "message_put"}, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Storage unavailable",
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/message/{code}", response_class=PlainTextResponse)
async def fetch_message(
    code: str,
    relay: RelayService = Depends(get_relay),
) -> PlainTextResponse:
    """Return the ciphertext verbatim and delete it. A second fetch is always 404."""
    try:
        payload = await relay.fetch_payload(code)
    except MessageNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found",
        )
    except StorageError:
        logger.error("get_delete_error", extra={"endpoint": "message_get"}, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Storage unavailable",
        )

    return PlainTextResponse(payload, media_type="text/plain")
