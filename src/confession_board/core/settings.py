"""Application settings and configuration.

This module defines all configuration options for the Confession Board
service. Settings are loaded from environment variables with sensible
defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Confession Board", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    public_base_url: str = Field(default="http://localhost:8080", alias="PUBLIC_BASE_URL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./confessions.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Content limits
    author_name_max_length: int = Field(default=50, alias="AUTHOR_NAME_MAX_LENGTH")
    title_max_length: int = Field(default=100, alias="TITLE_MAX_LENGTH")
    content_max_length: int = Field(default=2000, alias="CONTENT_MAX_LENGTH")
    comment_max_length: int = Field(default=1000, alias="COMMENT_MAX_LENGTH")
    report_reason_max_length: int = Field(default=500, alias="REPORT_REASON_MAX_LENGTH")
    max_tags: int = Field(default=5, alias="MAX_TAGS")

    # Anonymous voter identity
    identity_cookie_name: str = Field(default="vote_identifier", alias="IDENTITY_COOKIE_NAME")
    identity_header_name: str = Field(default="X-Vote-Identifier", alias="IDENTITY_HEADER_NAME")
    identity_cookie_max_age_days: int = Field(
        default=365,
        alias="IDENTITY_COOKIE_MAX_AGE_DAYS",
    )

    # Admin analytics
    analytics_top_authors: int = Field(default=5, alias="ANALYTICS_TOP_AUTHORS")
    analytics_window_days: int = Field(default=7, alias="ANALYTICS_WINDOW_DAYS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
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
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def identity_cookie_max_age(self) -> int:
        """Lifetime of the anonymous identity cookie in seconds."""
        return self.identity_cookie_max_age_days * 24 * 60 * 60


settings = Settings()  # type: ignore[call-arg]
