import logging
from pydantic_settings import BaseSettings
from pydantic import model_validator, ConfigDict
from functools import lru_cache

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "change-me-in-production"


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment: "development" or "production"
    environment: str = "development"
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost/iqol_dashboard"

    @model_validator(mode="before")
    @classmethod
    def _fix_database_url_for_asyncpg(cls, values: dict) -> dict:
        """Hosted Postgres hands out postgres:// or postgresql:// URLs; asyncpg needs postgresql+asyncpg://."""
        if not isinstance(values, dict):
            return values
        url = values.get("database_url") or ""
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        if url.startswith("postgresql://") and "+asyncpg" not in url:
            values["database_url"] = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return values

    secret_key: str = DEFAULT_SECRET_KEY
    access_token_expire_minutes: int = 60 * 24  # 24 hours

    first_admin_email: str = ""  # Bootstrap: create first admin if no users exist
    first_admin_password: str = ""
    first_admin_name: str = "Admin"

    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Dashboard / list sizes
    dashboard_top_n: int = 5
    recent_records_limit: int = 20

    # Persistence retry (0 = fail on first error)
    persistence_retries: int = 0
    persistence_retry_backoff: float = 0.2

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "Settings":
        """Enforce that critical secrets are set when running in production."""
        if self.is_production:
            if self.secret_key == DEFAULT_SECRET_KEY:
                raise ValueError(
                    "SECRET_KEY must be set to a secure value in production. "
                    "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
                )
            if not self.database_url or "localhost" in self.database_url:
                logger.warning("DATABASE_URL appears to point at localhost in production.")
        if self.persistence_retries < 0:
            raise ValueError("PERSISTENCE_RETRIES cannot be negative")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
