"""Application settings using Pydantic Settings."""

from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_comma_separated_list(v):
    """Parse comma-separated string into list."""
    if isinstance(v, str):
        return [item.strip() for item in v.split(",") if item.strip()]
    if isinstance(v, list):
        return v
    return []


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="Chunk Relay", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Session store
    session_store: str = Field(default="redis", alias="SESSION_STORE")
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    active_session_key: str = Field(default="active_session", alias="ACTIVE_SESSION_KEY")
    session_commit_retries: int = Field(default=10, ge=1, alias="SESSION_COMMIT_RETRIES")

    # Chunking
    chunk_size_mb: int = Field(default=25, gt=0, alias="CHUNK_SIZE_MB")

    # Source fetching
    source_connect_timeout: float = Field(default=10.0, alias="SOURCE_CONNECT_TIMEOUT")
    source_read_timeout: float = Field(default=120.0, alias="SOURCE_READ_TIMEOUT")

    # Storage
    storage_provider: str = Field(default="s3", alias="STORAGE_PROVIDER")
    aws_access_key_id: str = Field(default="", alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str = Field(default="", alias="AWS_SECRET_ACCESS_KEY")
    aws_region: str = Field(default="us-east-1", alias="AWS_REGION")
    s3_bucket_name: str = Field(default="chunk-relay", alias="S3_BUCKET_NAME")

    # Cloudflare R2
    r2_account_id: str = Field(default="", alias="R2_ACCOUNT_ID")
    r2_access_key: str = Field(default="", alias="R2_ACCESS_KEY")
    r2_secret_key: str = Field(default="", alias="R2_SECRET_KEY")
    r2_bucket_name: str = Field(default="", alias="R2_BUCKET_NAME")

    # Oracle Cloud Storage
    oracle_access_key: str = Field(default="", alias="ORACLE_ACCESS_KEY")
    oracle_secret_key: str = Field(default="", alias="ORACLE_SECRET_KEY")
    oracle_bucket_name: str = Field(default="", alias="ORACLE_BUCKET_NAME")
    oracle_namespace: str = Field(default="", alias="ORACLE_NAMESPACE")

    # Wasabi
    wasabi_access_key: str = Field(default="", alias="WASABI_ACCESS_KEY")
    wasabi_secret_key: str = Field(default="", alias="WASABI_SECRET_KEY")
    wasabi_bucket_name: str = Field(default="", alias="WASABI_BUCKET_NAME")
    wasabi_endpoint: str = Field(
        default="https://s3.wasabisys.com", alias="WASABI_ENDPOINT"
    )

    # CORS (stored as string, parsed via property)
    allowed_origins_str: str = Field(
        default="*",
        alias="ALLOWED_ORIGINS",
        exclude=True,  # Don't include in model dump
    )

    @property
    def allowed_origins(self) -> List[str]:
        """Parse allowed origins from comma-separated string."""
        return parse_comma_separated_list(self.allowed_origins_str)

    # Rate Limiting
    rate_limit_per_minute: int = Field(default=60, alias="RATE_LIMIT_PER_MINUTE")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def chunk_size_bytes(self) -> int:
        """Convert chunk size from MiB to bytes."""
        return self.chunk_size_mb * 1024 * 1024


# Global settings instance
settings = Settings()
