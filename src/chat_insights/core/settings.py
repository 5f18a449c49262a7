"""Application settings and configuration.

This module defines all configuration options for the Chat Insights service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files. Only the
    composition root (``main`` and ``db.session``) reads them; services receive
    plain constructor arguments.
    """

    # Application metadata
    app_name: str = Field(default="Chat Insights", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Row store configuration
    database_url: str = Field(default="sqlite:///./chat_insights.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Civil timezone used for every day/hour bucket
    timezone_name: str = Field(default="America/Sao_Paulo", alias="TIMEZONE_NAME")
    timezone_utc_offset_minutes: int = Field(
        default=-180,
        alias="TIMEZONE_UTC_OFFSET_MINUTES",
    )

    # Sliding-window rate limiting (process local)
    rate_limit_max_requests: int = Field(default=100, ge=0, alias="RATE_LIMIT_MAX_REQUESTS")
    rate_limit_window_seconds: float = Field(
        default=60.0,
        gt=0,
        alias="RATE_LIMIT_WINDOW_SECONDS",
    )
    rate_limit_sweep_interval_seconds: float | None = Field(
        default=None,
        alias="RATE_LIMIT_SWEEP_INTERVAL_SECONDS",
    )

    # Analytics
    recent_conversations_limit: int = Field(
        default=10,
        ge=0,
        alias="RECENT_CONVERSATIONS_LIMIT",
    )
    phone_country_code: str = Field(default="55", alias="PHONE_COUNTRY_CODE")
    unknown_prefix_label: str = Field(default="unknown", alias="UNKNOWN_PREFIX_LABEL")

    # CORS configuration for the dashboard frontend
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def effective_sweep_interval(self) -> float:
        """Return how often idle limiter keys are reclaimed, in seconds."""
        if self.rate_limit_sweep_interval_seconds is None:
            return self.rate_limit_window_seconds
        return self.rate_limit_sweep_interval_seconds


settings = Settings()
