"""
cadastro/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, secrets, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="cadastro",
        description="MongoDB database name"
    )

    # WhatsApp/Twilio
    TWILIO_ACCOUNT_SID: Optional[str] = Field(
        default=None,
        description="Twilio account SID"
    )
    TWILIO_AUTH_TOKEN: Optional[str] = Field(
        default=None,
        description="Twilio auth token (also used to fetch inbound media)"
    )
    TWILIO_WHATSAPP_NUMBER: str = Field(
        default="whatsapp:+14155238886",
        description="Sender number with whatsapp: prefix"
    )

    # Email (verification codes)
    SENDGRID_API_KEY: Optional[str] = Field(
        default=None,
        description="SendGrid API key; sending is skipped when unset outside production"
    )
    MAIL_FROM: str = Field(
        default="no-reply@example.com",
        description="Sender address for verification emails"
    )
    MAIL_FROM_NAME: str = Field(
        default="Cadastro",
        description="Sender display name"
    )

    # Document storage
    UPLOAD_DIR: str = Field(
        default="uploads",
        description="Directory where uploaded documents are stored"
    )
    DOCUMENT_MAX_AGE_HOURS: int = Field(
        default=24,
        description="Stored documents older than this are swept"
    )
    SWEEP_INTERVAL_MINUTES: int = Field(
        default=24 * 60,
        description="Interval between maintenance sweeps"
    )
    DOCUMENT_VALIDATION_DELAY_SECONDS: float = Field(
        default=1.0,
        description="Simulated latency of the document validation stub"
    )

    # Registration flow
    REQUIRE_PASSWORD: bool = Field(
        default=False,
        description="Ask for a password before finalizing the registration"
    )
    PASSWORD_MIN_LENGTH: int = Field(
        default=6,
        description="Minimum password length when passwords are collected"
    )
    BCRYPT_ROUNDS: int = Field(
        default=10,
        description="bcrypt cost factor"
    )

    # Session Management
    SESSION_TIMEOUT_MINUTES: int = Field(
        default=30,
        description="Idle sessions older than this are discarded"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    # Security
    SECRET_KEY: str = Field(
        default="change-me-in-production",
        description="Application secret key"
    )

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v, info: ValidationInfo):
        """Ensure secret key is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == "change-me-in-production":
            raise ValueError("SECRET_KEY must be changed in production environment")
        return v

    @field_validator("PASSWORD_MIN_LENGTH", "BCRYPT_ROUNDS")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


# Global settings instance
settings = Settings()


def validate_settings(config: Optional[Settings] = None):
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    config = config or settings
    errors = []

    if not config.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not config.UPLOAD_DIR:
        errors.append("UPLOAD_DIR is required")

    # Production-specific validations
    if config.is_production:
        if not config.SENDGRID_API_KEY:
            errors.append("SENDGRID_API_KEY is required in production")
        if not config.TWILIO_ACCOUNT_SID or not config.TWILIO_AUTH_TOKEN:
            errors.append("TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN are required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
