"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Values come from environment variables (or a ``.env`` file), matched
    case-insensitively against the field names.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Metadata store
    database_url: str = Field(
        default="sqlite:///./novelhelper.db",
        description="Database connection URL"
    )

    # Blob store
    # Version, section and diff text lives here, one file per blob.
    content_dir: str = Field(
        default="./content",
        description="Root directory of the flat-file blob store"
    )

    # Remote object storage (S3-compatible, accessed with the MinIO client)
    s3_endpoint: str = Field(
        default="localhost:9000",
        description="Object storage endpoint as host[:port]"
    )
    s3_access_key: str = Field(default="", description="Object storage access key")
    s3_secret_key: str = Field(default="", description="Object storage secret key")
    s3_secure: bool = Field(default=False, description="Use HTTPS for object storage")
    s3_bucket: str = Field(
        default="novel-helper-app",
        description="Bucket that receives synced content"
    )
    s3_region: str = Field(default="", description="Bucket region (optional)")

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ('json', 'text'):
            raise ValueError("Invalid log format. Must be 'json' or 'text'")
        return v_lower

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if sync credentials are missing or
        CORS still points at localhost. In development this is a no-op;
        main.py logs warnings instead.

        Raises:
            ConfigurationError: If production config is unusable.
        """
        errors: list[str] = []

        if not self.s3_access_key or not self.s3_secret_key:
            errors.append(
                "S3_ACCESS_KEY / S3_SECRET_KEY are empty. "
                "Cloud sync cannot authenticate."
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is invalid:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
