"""Application settings and configuration.

This module defines all configuration options for the gated feedback service.
Settings are loaded from environment variables with sensible defaults.
"""

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Gated Feedback", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./gated_feedback.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Blockchain node
    rpc_url: str = Field(default="https://testnet-rpc.monad.xyz", alias="RPC_URL")
    rpc_timeout_seconds: float = Field(default=10.0, alias="RPC_TIMEOUT_SECONDS")
    chain_id: int = Field(default=10143, alias="CHAIN_ID")

    # Fees
    payment_recipient: str = Field(
        default="0x758ae4ff7acfb8912e4938ec1cdcfb4327f7c397",
        alias="PAYMENT_RECIPIENT",
    )
    feedback_payment_amount: Decimal = Field(
        default=Decimal("0.01"),
        alias="FEEDBACK_PAYMENT_AMOUNT",
    )
    admin_payment_amount: Decimal = Field(default=Decimal("0.001"), alias="ADMIN_PAYMENT_AMOUNT")
    token_symbol: str = Field(default="MON", alias="TOKEN_SYMBOL")

    # Confirmation polling (client workflow)
    confirmation_poll_interval_seconds: float = Field(
        default=1.0,
        alias="CONFIRMATION_POLL_INTERVAL_SECONDS",
    )
    confirmation_max_attempts: int = Field(default=30, alias="CONFIRMATION_MAX_ATTEMPTS")

    # Submission rules
    feedback_max_length: int = Field(default=1000, alias="FEEDBACK_MAX_LENGTH")
    feedback_categories: list[str] = Field(
        default=["dev", "community"],
        alias="FEEDBACK_CATEGORIES",
    )
    radio_max_options: int = Field(default=4, alias="RADIO_MAX_OPTIONS")
    responses_default_page_size: int = Field(default=20, alias="RESPONSES_DEFAULT_PAGE_SIZE")
    responses_max_page_size: int = Field(default=100, alias="RESPONSES_MAX_PAGE_SIZE")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
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


settings = Settings()
