"""Per-request deadlines.

uvicorn covers keep-alive idleness and graceful shutdown, but has no notion
of slow request bodies or runaway handlers. This ASGI middleware bounds both:

- the first body chunk must arrive within ``read_header_timeout``,
  later chunks within ``read_timeout`` (408 Request Timeout);
- the whole exchange must finish within ``write_timeout`` (503 when no
  response has been started yet, otherwise the connection is dropped).

Hitting a deadline cancels the handler, which cancels any storage call it is
awaiting.
"""

import asyncio

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.logger import logger
from app.core.security import SECURITY_HEADERS


class RequestReadTimeout(Exception):
    """Client did not deliver the request body in time."""


class RequestTimeoutMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        read_timeout: float,
        read_header_timeout: float,
        write_timeout: float,
    ):
        self.app = app
        self.read_timeout = read_timeout
        self.read_header_timeout = read_header_timeout
        self.write_timeout = write_timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        first_chunk = True
        response_started = False

        async def timed_receive() -> Message:
            nonlocal first_chunk
            timeout = self.read_header_timeout if first_chunk else self.read_timeout
            first_chunk = False
            if timeout <= 0:
                return await receive()
            try:
                return await asyncio.wait_for(receive(), timeout)
            except asyncio.TimeoutError as exc:
                raise RequestReadTimeout() from exc

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        deadline = asyncio.timeout(self.write_timeout if self.write_timeout > 0 else None)
        try:
            async with deadline:
                await self.app(scope, timed_receive, tracking_send)
        except RequestReadTimeout:
            logger.warning("body_read_timeout", extra={"path": scope.get("path")})
            if not response_started:
                await _send_empty(send, 408)
        except TimeoutError:
            # A TimeoutError raised by the handler itself is an application error.
            if not deadline.expired():
                raise
            logger.warning("request_deadline_exceeded", extra={"path": scope.get("path")})
            if not response_started:
                await _send_empty(send, 503)


async def _send_empty(send: Send, status_code: int) -> None:
    headers = [(k.lower().encode(), v.encode()) for k, v in SECURITY_HEADERS.items()]
    headers.append((b"content-length", b"0"))
    await send({"type": "http.response.start", "status": status_code, "headers": headers})
    await send({"type": "http.response.body", "body": b""})
