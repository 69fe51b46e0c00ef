"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here, no scattered magic strings.
"""

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        database_url: Explicit SQLAlchemy DSN. Built from postgres_* when unset.
        jwt_secret: Signing key for bearer tokens.
        token_ttl_hours: Lifetime of an issued bearer token.
        alpha_vantage_api_key: Credential for the international quote provider.
        price_refresh_interval_seconds: Delay between two refresh cycles.
        price_refresh_batch_size: Symbols fetched concurrently per batch.
        price_refresh_batch_delay_seconds: Pause between batches (upstream rate limits).
        minimum_amount: Smallest top-up, withdrawal or purchase, in base units.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "Trakvest"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Storage
    database_url: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "trakvest"

    # Access gateway
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = 24
    bcrypt_rounds: int = 10

    # Market data
    alpha_vantage_api_key: Optional[str] = None
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    domestic_symbol_suffix: str = ".NS"
    provider_timeout_seconds: float = 10.0

    # Outbound mail
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_sender_name: str = "Trakvest"
    smtp_timeout_seconds: float = 10.0

    # Price broadcast loop
    price_refresh_enabled: bool = True
    price_refresh_interval_seconds: int = 300
    price_refresh_batch_size: int = 5
    price_refresh_batch_delay_seconds: float = 60.0
    stream_send_timeout_seconds: float = 5.0

    # Business rules
    minimum_amount: Decimal = Decimal("100")
    max_profile_image_bytes: int = 1_048_576  # 1 MB

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"
    rate_limit_auth: str = "10/minute"

    def get_database_url(self) -> str:
        """Return the effective database DSN.

        Priority:
        1. Explicit `DATABASE_URL`
        2. Build DSN from postgres_* values (useful for Docker Compose or local setups)
        """
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}@"
            f"{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
