"""
Application configuration module.

Loads settings from environment variables (or .env file) using pydantic-settings.
Database credentials come from the environment and are never hardcoded.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Investment Tracker API.

    Environment variables are loaded automatically from .env if present.
    """

    PROJECT_NAME: str = "Investment Tracker API"

    # All remote procedures live under this single endpoint prefix.
    RPC_PREFIX: str = "/rpc"

    # ── HTTP server ──
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 2022

    # ── SQLite mode (no external DB required) ──
    USE_SQLITE: bool = False

    # ── PostgreSQL connection parameters ──
    # Empty defaults so USE_SQLITE=true works without dummy PG variables;
    # the validator below enforces them when PostgreSQL is in use.
    POSTGRES_USER: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_SERVER: str = ""
    POSTGRES_DB: str = ""
    POSTGRES_PORT: int = 5432

    @model_validator(mode="after")
    def _require_pg_credentials_unless_sqlite(self) -> "Settings":
        """Fail fast if PostgreSQL credentials are missing in production mode."""
        if not self.USE_SQLITE:
            missing = [
                name
                for name in (
                    "POSTGRES_USER",
                    "POSTGRES_PASSWORD",
                    "POSTGRES_SERVER",
                    "POSTGRES_DB",
                )
                if not getattr(self, name)
            ]
            if missing:
                vars_list = ", ".join(missing)
                raise ValueError(
                    f"PostgreSQL mode requires these environment variables: "
                    f"{vars_list}.\n\n"
                    f"Either add them to a .env file in the project root, e.g.\n"
                    f"       POSTGRES_USER=tracker\n"
                    f"       POSTGRES_PASSWORD=tracker\n"
                    f"       POSTGRES_SERVER=127.0.0.1\n"
                    f"       POSTGRES_DB=investments\n\n"
                    f"or skip PostgreSQL entirely (in-memory SQLite):\n"
                    f"       USE_SQLITE=true investment-tracker"
                )
        return self

    # ── Connection pool tuning (PostgreSQL only) ──
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30  # seconds
    DB_POOL_RECYCLE: int = 1800  # seconds

    # ── CORS ──
    # Comma-separated list of allowed origins.
    CORS_ORIGINS: str = "*"

    # ── Logging ──
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_FILE_BACKUP_COUNT: int = 5

    @property
    def DATABASE_URL(self) -> str:
        """Construct the async database DSN."""
        if self.USE_SQLITE:
            return "sqlite+aiosqlite://"
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
