import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status

from app.api import info_router, messages_router
from app.core.config import Settings, settings as default_settings
from app.core.cors import PreflightCORSMiddleware
from app.core.errors import StorageError
from app.core.logger import logger
from app.core.rate_limiter import TokenBucket
from app.core.security import SECURITY_HEADERS
from app.core.storage import MessageStore, build_store
from app.core.timeouts import RequestTimeoutMiddleware
from app.services.relay import RelayPolicy, RelayService


async def wait_for_storage(store: MessageStore, attempts: int, delay: float = 2.0) -> bool:
    """Ping storage until it answers. Returns False if it never did."""
    for attempt in range(1, attempts + 1):
        try:
            await store.ping()
            logger.info(f"Connected to storage (attempt {attempt})")
            return True
        except StorageError as exc:
            logger.warning(
                f"Storage connection attempt {attempt}/{attempts} failed",
                extra={"error": str(exc)},
            )
            if attempt < attempts:
                await asyncio.sleep(delay)
    return False


def create_app(
    settings: Settings | None = None,
    store: MessageStore | None = None,
    limiter: TokenBucket | None = None,
) -> FastAPI:
    """Build the relay application.

    ``store`` and ``limiter`` are owned by the application: the limiter's
    refill task runs for the lifetime of the app and the store is closed on
    shutdown.
    """
    settings = settings or default_settings
    store = store if store is not None else build_store(settings)
    limiter = limiter or TokenBucket(settings.RATE_LIMIT_RPS, settings.RATE_LIMIT_BURST)
    relay = RelayService(
        store,
        RelayPolicy(
            placeholder_ttl=settings.PLACEHOLDER_TTL_SECONDS,
            message_ttl=settings.MESSAGE_TTL_SECONDS,
            code_length=settings.CODE_LENGTH,
            max_attempts=settings.CODE_MAX_ATTEMPTS,
            require_nonce_prefix=settings.REQUIRE_NONCE_PREFIX,
            nonce_bytes=settings.NONCE_BYTES,
        ),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.PROJECT_NAME} v{settings.PROJECT_VERSION}")
        if not await wait_for_storage(
            store,
            max(1, settings.STORAGE_CONNECT_ATTEMPTS),
            settings.STORAGE_CONNECT_RETRY_SECONDS,
        ):
            logger.critical("Storage unreachable at startup, serving anyway")
        limiter.start()
        try:
            yield
        finally:
            await limiter.stop()
            await store.close()
            logger.info("Shutdown complete")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.limiter = limiter
    app.state.relay = relay

    # Registration order matters: the last middleware added is the outermost.
    app.add_middleware(
        RequestTimeoutMiddleware,
        read_timeout=settings.READ_TIMEOUT_SECONDS,
        read_header_timeout=settings.READ_HEADER_TIMEOUT_SECONDS,
        write_timeout=settings.WRITE_TIMEOUT_SECONDS,
    )
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=settings.ALLOW_METHODS,
        allow_headers=settings.ALLOW_HEADERS,
        expose_headers=["Location"],
        max_age=600,
    )

    @app.middleware("http")
    async def log_exceptions(request: Request, call_next):
        """Log unhandled exceptions with request context."""
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled exception", extra={"path": request.url.path})
            return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        """Apply defensive headers to every response, including errors."""
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        return response

    app.include_router(messages_router)
    app.include_router(info_router)
    return app


app = create_app()
