from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "OneTimeRelay"
    PROJECT_VERSION: str = "1.0.0"
    DESCRIPTION: str = "Relay for one-time encrypted message exchange"

    # Listener
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Storage
    STORAGE_BACKEND: str = "redis"  # "redis" or "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "msg:"
    STORAGE_CONNECT_ATTEMPTS: int = 5
    STORAGE_CONNECT_RETRY_SECONDS: float = 2.0

    # Code lifecycle
    PLACEHOLDER_TTL_SECONDS: int = 60 * 10
    MESSAGE_TTL_SECONDS: int = 60 * 60 * 24
    CODE_LENGTH: int = 8
    CODE_MAX_ATTEMPTS: int = 10

    # Payload
    MAX_BODY_BYTES: int = 1 << 20
    REQUIRE_NONCE_PREFIX: bool = False
    NONCE_BYTES: int = 12

    # Admission control
    RATE_LIMIT_RPS: float = 10.0
    RATE_LIMIT_BURST: int = 20

    # CORS Settings
    ALLOWED_ORIGINS: str = "*"
    ALLOW_METHODS: list[str] = ["GET", "POST", "PUT", "OPTIONS"]
    ALLOW_HEADERS: list[str] = ["Content-Type"]

    # Timeouts
    READ_TIMEOUT_SECONDS: float = 10.0
    READ_HEADER_TIMEOUT_SECONDS: float = 5.0
    WRITE_TIMEOUT_SECONDS: float = 15.0
    IDLE_TIMEOUT_SECONDS: float = 60.0
    SHUTDOWN_TIMEOUT_SECONDS: float = 5.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # "json" or "text"
    LOG_FILE: str | None = None

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def max_body_bytes(self) -> int:
        return self.MAX_BODY_BYTES if self.MAX_BODY_BYTES > 0 else 1 << 20


settings = Settings()
