"""
Configuration Management

Pydantic-settings based configuration for the submission relay.
All settings can be overridden via environment variables.
"""

from functools import lru_cache
from typing import Literal

from botocore.config import Config
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables are prefixed with RELAY_ and are case-insensitive.
    Example: RELAY_STORAGE_BUCKET_NAME=my-bucket
    """

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=[".env.local", ".env"],  # Try .env.local first
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Destination object store
    storage_bucket_name: str = Field(
        default="submission-archives",
        description="Bucket that receives relayed submission archives",
    )
    storage_credentials: str | None = Field(
        default=None,
        description="Base64-encoded JSON credential payload for the storage client",
    )
    storage_endpoint_url: str | None = Field(
        default=None,
        description="S3 endpoint URL (for local development)",
    )

    # Email
    email_credentials: str | None = Field(
        default=None,
        description="Base64-encoded JSON credential payload for the email client",
    )
    ses_domain: str = Field(
        default="gecoding.me",
        description="SES verified domain for sending emails",
    )
    ses_from_address: str = Field(
        default="noreply@gecoding.me",
        description="From address for outbound emails",
    )
    ses_from_name: str = Field(
        default="No Reply",
        description="Display name for outbound emails",
    )
    ses_configuration_set: str | None = Field(
        default=None,
        description="SES configuration set for tracking",
    )
    ses_endpoint_url: str | None = Field(
        default=None,
        description="SES endpoint URL (for local development)",
    )

    # Audit store
    audit_table_name: str = Field(
        default="SubmissionEmailStatus",
        description="DynamoDB table for per-invocation audit records",
    )
    dynamodb_endpoint_url: str | None = Field(
        default=None,
        description="DynamoDB endpoint URL (for local development)",
    )

    # AWS Configuration
    aws_region: str = Field(
        default="us-east-1",
        description="AWS region",
    )
    aws_connect_timeout: int = Field(default=5, ge=1, description="botocore connect timeout (s)")
    aws_read_timeout: int = Field(default=60, ge=1, description="botocore read timeout (s)")

    # HTTP / transfer bounds
    http_connect_timeout: float = Field(default=5.0, gt=0, description="HTTP connect timeout (s)")
    http_read_timeout: float = Field(default=30.0, gt=0, description="HTTP read timeout (s)")
    transfer_max_bytes: int = Field(
        default=512 * 1024 * 1024,
        gt=0,
        description="Largest archive the relay will copy",
    )
    transfer_deadline_seconds: float = Field(
        default=600.0,
        gt=0,
        description="Wall-clock bound for a single transfer",
    )
    transfer_chunk_size: int = Field(
        default=8 * 1024 * 1024,
        ge=5 * 1024 * 1024,  # S3 multipart minimum part size
        description="Download chunk and upload part size in bytes",
    )

    # Application Configuration
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    @model_validator(mode="after")
    def check_sender_domain(self) -> "Settings":
        """The From address must belong to the verified sending domain."""
        _, _, domain = self.ses_from_address.rpartition("@")
        if domain.lower() != self.ses_domain.lower():
            raise ValueError(
                f"ses_from_address {self.ses_from_address!r} is not in "
                f"ses_domain {self.ses_domain!r}"
            )
        return self

    @property
    def http_timeout(self) -> tuple[float, float]:
        """(connect, read) timeout tuple for requests."""
        return (self.http_connect_timeout, self.http_read_timeout)

    @property
    def botocore_config(self) -> Config:
        """Bounded botocore client configuration, no retries at this layer."""
        return Config(
            connect_timeout=self.aws_connect_timeout,
            read_timeout=self.aws_read_timeout,
            retries={"max_attempts": 1, "mode": "standard"},
        )

    @property
    def s3_config(self) -> dict:
        """S3 client configuration."""
        config = {"region_name": self.aws_region, "config": self.botocore_config}
        if self.storage_endpoint_url:
            config["endpoint_url"] = self.storage_endpoint_url
        return config

    @property
    def ses_config(self) -> dict:
        """SES client configuration."""
        config = {"region_name": self.aws_region, "config": self.botocore_config}
        if self.ses_endpoint_url:
            config["endpoint_url"] = self.ses_endpoint_url
        return config

    @property
    def dynamodb_config(self) -> dict:
        """DynamoDB resource configuration."""
        config = {"region_name": self.aws_region, "config": self.botocore_config}
        if self.dynamodb_endpoint_url:
            config["endpoint_url"] = self.dynamodb_endpoint_url
        return config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings hold no credentials in decoded form; the credential payloads
    are decoded per invocation by the pipeline.
    """
    return Settings()
