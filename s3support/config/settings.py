"""
Configuration using Pydantic settings.

Configuration is loaded from environment variables (or a .env file) with
sensible defaults. Using Pydantic's BaseSettings means a wrong region code
or credentials source fails at load time instead of at the first upload.

Mock mode swaps the S3 client for an in-memory store so the CLI and
facade can be exercised without an account.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.errors import ConfigurationError
from ..core.models import DEFAULT_REGION, Region


CredentialsSource = Literal["settings", "environment", "properties", "session"]


class Settings(BaseSettings):
    """
    Settings loaded from environment variables.

    All settings can be overridden via environment variables, e.g.
    S3_BUCKET_NAME or S3_REGION.
    """

    # Target
    s3_bucket_name: Optional[str] = Field(
        default=None,
        description="Bucket used for uploads. May also be set per command."
    )
    s3_region: str = Field(
        default=DEFAULT_REGION.value,
        description="AWS region code for new clients and new buckets."
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="S3-compatible endpoint (MinIO, R2). Leave unset for AWS."
    )
    s3_addressing_style: Literal["path", "virtual", "auto"] = Field(
        default="path",
        description="Bucket addressing style passed to botocore."
    )

    # Credentials
    s3_credentials_source: CredentialsSource = Field(
        default="settings",
        description="Where credentials come from: settings, environment, properties or session."
    )
    s3_access_key_id: str = Field(
        default="",
        description="Access key ID, used when credentials source is 'settings'."
    )
    s3_secret_access_key: str = Field(
        default="",
        description="Secret access key, used when credentials source is 'settings'."
    )
    s3_credentials_file: str = Field(
        default="AwsCredentials.properties",
        description="Properties file with accessKey/secretKey, used when source is 'properties'."
    )
    s3_profile_name: Optional[str] = Field(
        default=None,
        description="boto3 profile, used when source is 'session'."
    )

    # Behaviour
    s3_mock_mode: bool = Field(
        default=False,
        description="Use an in-memory store instead of S3."
    )
    s3_reuse_clients: bool = Field(
        default=False,
        description="Reuse one client per region and provider instead of building one per call."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("s3_region")
    @classmethod
    def _check_region(cls, value: str) -> str:
        try:
            return Region.parse(value).value
        except ConfigurationError as e:
            # pydantic reports ValueError as a validation error
            raise ValueError(str(e))

    @property
    def region(self) -> Region:
        return Region(self.s3_region)

    def validate_required_fields(self) -> list[str]:
        """
        List the settings that are missing for the chosen credentials source.

        Separate from Pydantic validation because what is required depends
        on mock mode and the credentials source.
        """
        missing = []

        if self.s3_mock_mode:
            return missing

        if self.s3_credentials_source == "settings":
            if not self.s3_access_key_id:
                missing.append("S3_ACCESS_KEY_ID")
            if not self.s3_secret_access_key:
                missing.append("S3_SECRET_ACCESS_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process. For tests, call
    get_settings.cache_clear() to reset.
    """
    return Settings()
