"""Run the relay under uvicorn."""

import uvicorn

from app.core.config import Settings, settings as default_settings


def build_server_config(settings: Settings) -> uvicorn.Config:
    """Map relay settings onto uvicorn's listener options.

    Keep-alive idleness and the graceful shutdown deadline are enforced by
    uvicorn itself; body read and handler deadlines by
    ``RequestTimeoutMiddleware``.
    """
    return uvicorn.Config(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        timeout_keep_alive=max(1, int(settings.IDLE_TIMEOUT_SECONDS)),
        timeout_graceful_shutdown=max(1, int(settings.SHUTDOWN_TIMEOUT_SECONDS)),
        log_level=settings.LOG_LEVEL.lower(),
        proxy_headers=True,
        server_header=False,
    )


def main() -> None:
    uvicorn.Server(build_server_config(default_settings)).run()


if __name__ == "__main__":
    main()
