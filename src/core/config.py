"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Gatehouse API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)
    app_url: str = Field(
        default="http://localhost:3000",
        description="Public base URL used to build invitation and share links",
    )

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/gatehouse",
        description="PostgreSQL connection URL with asyncpg driver",
    )

    # For testing with SQLite
    test_database_url: str = Field(
        default="sqlite+aiosqlite:///./test.db",
        description="Test database URL",
    )

    # Tokens
    session_ttl_days: int = Field(default=7, description="Lifetime of a login session")
    invitation_ttl_days: int = Field(default=7, description="Default invitation lifetime")

    # Access control
    authorization_timeout_seconds: float | None = Field(
        default=5.0,
        description="Upper bound for a single authorization decision; a timeout is a deny",
    )

    # Schema repair
    schema_repair_enabled: bool = Field(
        default=True,
        description="Repair known schema drift on the fly and retry the failed query once",
    )

    # Outbound email (Resend-compatible HTTP API)
    email_api_key: str = Field(default="", description="Email API key; empty disables delivery")
    email_api_url: str = Field(default="https://api.resend.com/emails")
    email_from: str = Field(default="Gatehouse <onboarding@resend.dev>")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Render and other providers supply a standard ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
