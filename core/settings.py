from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_NAME: str = "pagecraft"
    DATABASE_USER: str = "pagecraft"
    DATABASE_PASSWORD: str = "pagecraft"
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_POOL_SIZE: int = 5

    REDIS_URL: str | None = None
    # Cache I/O must never hold a request hostage
    REDIS_SOCKET_TIMEOUT: float = 0.5

    # Fixed time-to-live per cache key family (seconds)
    CACHE_TTL_PAGES: int = 300
    CACHE_TTL_TEMPLATES: int = 3600

    # Content document limits
    MAX_BLOCK_DEPTH: int = 16
    MAX_CONTENT_BYTES: int = 1_000_000

    @property
    def DATABASE_URL(self) -> str:
        return (
            f"postgresql+psycopg2://{self.DATABASE_USER}:"
            f"{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}:"
            f"{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    # Tokens are issued elsewhere; this service only verifies them
    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    SITE_NAME: str = "PageCraft"
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    # Sentry error tracking
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8"
    }


settings = Settings()
