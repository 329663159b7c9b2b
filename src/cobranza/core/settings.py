"""Application settings and configuration.

This module defines all configuration options for the collection service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or a `.env` file at
    the project root.
    """

    # Application metadata
    app_name: str = Field(default="Cobranza API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(default="dev-secret-key-change-me", alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=120, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Database configuration
    database_url: str = Field(default="sqlite:///./cobranza.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Upper bound on how long a registration waits for the series counter lock.
    lock_timeout_seconds: int = Field(default=5, ge=1, alias="LOCK_TIMEOUT_SECONDS")

    # Ticket numbering and receipt layout
    ticket_series: str = Field(
        default="A",
        min_length=1,
        max_length=8,
        pattern=r"^[A-Za-z0-9]+$",
        alias="TICKET_SERIES",
    )
    ticket_default_header: str = Field(default="FUNERALES CÁRDENAS", alias="TICKET_DEFAULT_HEADER")
    ticket_default_footer: str = Field(
        default="Gracias por su preferencia",
        alias="TICKET_DEFAULT_FOOTER",
    )
    ticket_logo_path: str = Field(default="assets/logo_ticket.png", alias="TICKET_LOGO_PATH")
    ticket_timezone: str = Field(default="America/Mexico_City", alias="TICKET_TIMEZONE")

    # Print flow
    public_base_url: str = Field(default="http://localhost:8080", alias="PUBLIC_BASE_URL")
    auto_open_print: bool = Field(default=False, alias="AUTO_OPEN_PRINT")

    # CORS configuration for the collector web UI
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["Authorization", "Content-Type", "Idempotency-Key"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
