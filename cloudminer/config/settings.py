"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./cloudminer.db"
    database_echo: bool = False

    # Administrator identity (both must match for privileged operations)
    admin_account_id: str = Field(
        default="uid0000",
        min_length=1,
        description="Account id reserved for the single administrator",
    )
    admin_email: str = Field(
        default="admin@cloudminer.local",
        description="Email bound to the administrator account",
    )

    # Application
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/cloudminer.log"

    # Ledger
    min_withdrawal_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Minimum withdrawal amount (0 disables the check)",
    )

    # Price feed
    price_api_url: str = "https://api.coingecko.com/api/v3"
    price_request_timeout: float = Field(
        default=10.0, gt=0, description="Price feed request timeout in seconds"
    )

    # Security
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("admin_email")
    @classmethod
    def normalize_admin_email(cls, v: str) -> str:
        """Store the admin email in normalized form."""
        return v.strip().lower()

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ("sqlite+aiosqlite://", "postgresql://", "postgresql+asyncpg://")
        ):
            raise ValueError(
                "DATABASE_URL must start with sqlite+aiosqlite://, "
                "postgresql:// or postgresql+asyncpg://"
            )
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @model_validator(mode="after")
    def validate_production(self) -> "Settings":
        """Validate production-specific requirements."""
        if self.environment == "production":
            if self.debug:
                raise ValueError(
                    "DEBUG must be False in production environment. "
                    "Set DEBUG=false in your .env file."
                )
            if self.database_url.startswith("sqlite"):
                logger.warning(
                    "DATABASE_URL points to SQLite in production. "
                    "Concurrent writers from several processes are not serialized."
                )
        return self


# Global settings instance
settings = Settings()
