# src/clone_api/config/settings.py
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_DEPLOYMENT_MODES = ["local-dev", "aws-mock", "aws-prod"]


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from clone_api.config.settings import get_settings
        settings = get_settings()
        base_url = settings.bot_public_base
    """

    # Application Settings
    app_name: str = Field(
        default="voice-clone-api",
        description="Application name"
    )

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        description="Deployment mode: local-dev, aws-mock, or aws-prod"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # Blob store (S3) Configuration
    s3_bucket_name: str = Field(
        default="voice-clone-uploads",
        description="S3 bucket for uploaded audio clips"
    )

    # Job queue (SQS) Configuration
    sqs_queue_name: str = Field(
        default="clone-jobs",
        description="SQS queue name"
    )

    sqs_queue_url: Optional[str] = Field(
        default=None,
        alias="SQS_QUEUE_URL",
        description="Full SQS queue URL (resolved from the queue name if unset)"
    )

    # Status store (DynamoDB) Configuration
    dynamodb_table_name: str = Field(
        default="clone-job-status",
        description="DynamoDB table holding job status records and rate-limit counters"
    )

    # Local storage root for local-dev mode
    storage_dir: str = Field(
        default="storage",
        description="Local storage directory"
    )

    # Public URLs
    bot_public_base: str = Field(
        default="http://localhost:8000",
        alias="BOT_PUBLIC_BASE",
        description="Base URL of the file-serving bot, used to build fileUrl"
    )

    public_origins: Optional[str] = Field(
        default=None,
        alias="PUBLIC_ORIGINS",
        description="Optional CSV allow-list of CORS origins"
    )

    # Rate limiting
    rate_limit_max_count: int = Field(
        default=10,
        ge=1,
        description="Jobs allowed per user per window"
    )

    rate_limit_window_ms: int = Field(
        default=60_000,
        ge=1,
        description="Rate-limit window length in milliseconds"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("deployment_mode", mode="before")
    @classmethod
    def normalize_deployment_mode(cls, v):
        """Normalize deployment mode values for backwards compatibility."""
        if v:
            mode_mapping = {
                "local": "local-dev",
                "local-mock": "local-dev",
                "mock_aws": "aws-mock",
                "cloud": "aws-prod",
            }
            return mode_mapping.get(v, v)
        return v

    @field_validator("deployment_mode")
    @classmethod
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        if v not in VALID_DEPLOYMENT_MODES:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {VALID_DEPLOYMENT_MODES}")
        return v

    @field_validator("bot_public_base")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @model_validator(mode="after")
    def set_mock_aws_defaults(self):
        """Point aws-mock at the local moto server with mock credentials unless overridden."""
        if self.deployment_mode == "aws-mock":
            if self.aws_endpoint_url is None:
                self.aws_endpoint_url = "http://localhost:5000"
            if self.aws_access_key_id is None:
                self.aws_access_key_id = "mock"
            if self.aws_secret_access_key is None:
                self.aws_secret_access_key = "mock"
        return self

    @property
    def cors_allow_origin(self) -> str:
        """Value for Access-Control-Allow-Origin: the joined allow-list, or '*'."""
        origins = [origin.strip() for origin in (self.public_origins or "").split(",")]
        origins = [origin for origin in origins if origin]
        return ",".join(origins) if origins else "*"

    def boto3_client_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments shared by every boto3 client/resource we create."""
        kwargs: Dict[str, Any] = {"region_name": self.aws_region}
        if self.aws_endpoint_url:
            kwargs["endpoint_url"] = self.aws_endpoint_url
        if self.aws_access_key_id and self.aws_secret_access_key:
            kwargs["aws_access_key_id"] = self.aws_access_key_id
            kwargs["aws_secret_access_key"] = self.aws_secret_access_key
        return kwargs

    def get_environment_dict(self) -> dict:
        """Get configuration as a dictionary suitable for docker-compose or subprocess.

        Returns:
            Dictionary of environment variables
        """
        return {
            'DEPLOYMENT_MODE': self.deployment_mode,
            'S3_BUCKET_NAME': self.s3_bucket_name,
            'SQS_QUEUE_NAME': self.sqs_queue_name,
            'SQS_QUEUE_URL': self.sqs_queue_url or '',
            'DYNAMODB_TABLE_NAME': self.dynamodb_table_name,
            'AWS_DEFAULT_REGION': self.aws_region,
            'AWS_ENDPOINT_URL': self.aws_endpoint_url or '',
            'STORAGE_DIR': self.storage_dir,
            'BOT_PUBLIC_BASE': self.bot_public_base,
            'PUBLIC_ORIGINS': self.public_origins or '',
            'RATE_LIMIT_MAX_COUNT': str(self.rate_limit_max_count),
            'RATE_LIMIT_WINDOW_MS': str(self.rate_limit_window_ms),
            'LOG_LEVEL': self.log_level,
        }

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
