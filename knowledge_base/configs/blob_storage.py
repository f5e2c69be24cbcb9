"""
Blob storage configuration.

Settings for the S3 bucket holding raw uploaded files.

Dependencies: pydantic_settings
System role: Blob store configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BlobStorageSettings(BaseSettings):
    """Settings for the raw file bucket."""

    model_config = SettingsConfigDict(
        env_prefix="BLOB_STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(
        default="knowledge-base-dev-uploads",
        description="S3 bucket for raw uploaded files",
    )
    region: str = Field(
        default="us-east-1",
        description="AWS region for the bucket",
    )
    key_prefix: str = Field(
        default="uploads/",
        description="Key prefix prepended to every blob name",
    )
    endpoint_url: str | None = Field(
        default=None,
        description="Custom S3 endpoint (MinIO, LocalStack)",
    )
