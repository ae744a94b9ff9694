"""
s3support: a thin facade over an S3-compatible object store.

Configures credentials, region and bucket name, then forwards uploads,
bucket creation and bucket listing to an object-store client.
"""

from .core.errors import (
    ConfigurationError,
    CredentialError,
    DelegateError,
    StorageSupportError,
)
from .core.facade import StorageFacade, StorageFacadeConfig
from .core.models import BucketDescriptor, Credentials, Region
from .dependencies import create_storage_facade

__all__ = [
    "BucketDescriptor",
    "ConfigurationError",
    "CredentialError",
    "Credentials",
    "DelegateError",
    "Region",
    "StorageFacade",
    "StorageFacadeConfig",
    "StorageSupportError",
    "create_storage_facade",
]
