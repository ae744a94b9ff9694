"""
Domain models for the storage facade.

These are plain values: regions, credential pairs, bucket descriptors and
the result of probing a credentials provider. None of them know about
boto3 or HTTP.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from .errors import ConfigurationError


class Region(str, Enum):
    """AWS region codes accepted by the facade (S3 commercial, GovCloud and China partitions)."""
    US_EAST_1 = "us-east-1"
    US_EAST_2 = "us-east-2"
    US_WEST_1 = "us-west-1"
    US_WEST_2 = "us-west-2"
    US_GOV_EAST_1 = "us-gov-east-1"
    US_GOV_WEST_1 = "us-gov-west-1"
    CA_CENTRAL_1 = "ca-central-1"
    CA_WEST_1 = "ca-west-1"
    MX_CENTRAL_1 = "mx-central-1"
    SA_EAST_1 = "sa-east-1"
    AF_SOUTH_1 = "af-south-1"
    EU_WEST_1 = "eu-west-1"
    EU_WEST_2 = "eu-west-2"
    EU_WEST_3 = "eu-west-3"
    EU_CENTRAL_1 = "eu-central-1"
    EU_CENTRAL_2 = "eu-central-2"
    EU_SOUTH_1 = "eu-south-1"
    EU_SOUTH_2 = "eu-south-2"
    EU_NORTH_1 = "eu-north-1"
    IL_CENTRAL_1 = "il-central-1"
    ME_SOUTH_1 = "me-south-1"
    ME_CENTRAL_1 = "me-central-1"
    AP_EAST_1 = "ap-east-1"
    AP_EAST_2 = "ap-east-2"
    AP_NORTHEAST_1 = "ap-northeast-1"
    AP_NORTHEAST_2 = "ap-northeast-2"
    AP_NORTHEAST_3 = "ap-northeast-3"
    AP_SOUTHEAST_1 = "ap-southeast-1"
    AP_SOUTHEAST_2 = "ap-southeast-2"
    AP_SOUTHEAST_3 = "ap-southeast-3"
    AP_SOUTHEAST_4 = "ap-southeast-4"
    AP_SOUTHEAST_5 = "ap-southeast-5"
    AP_SOUTHEAST_7 = "ap-southeast-7"
    AP_SOUTH_1 = "ap-south-1"
    AP_SOUTH_2 = "ap-south-2"
    CN_NORTH_1 = "cn-north-1"
    CN_NORTHWEST_1 = "cn-northwest-1"

    @classmethod
    def parse(cls, value: Union["Region", str]) -> "Region":
        """Accept a Region or its code, e.g. "eu-west-1"."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown region: {value!r}")


DEFAULT_REGION = Region.AP_NORTHEAST_1


@dataclass(frozen=True)
class Credentials:
    """
    An access key / secret pair, optionally with a session token.

    repr hides the secret so credentials can show up in logs and
    tracebacks without leaking.
    """
    access_key_id: str
    secret_access_key: str
    session_token: Optional[str] = None

    @property
    def is_well_formed(self) -> bool:
        """Both key and secret must be non-blank."""
        return bool(
            (self.access_key_id or "").strip()
            and (self.secret_access_key or "").strip()
        )

    def __repr__(self) -> str:
        return f"Credentials(access_key_id={self.access_key_id!r}, secret_access_key='***')"


@dataclass(frozen=True)
class BucketDescriptor:
    """A bucket as reported by the object store."""
    name: str
    creation_date: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Credential probe results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CredentialsAvailable:
    """The provider produced usable credentials."""
    credentials: Credentials

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class CredentialsUnavailable:
    """The provider is missing, failed, or returned malformed credentials."""
    reason: str

    @property
    def ok(self) -> bool:
        return False


CredentialProbeResult = Union[CredentialsAvailable, CredentialsUnavailable]
