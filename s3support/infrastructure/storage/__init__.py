"""
Object storage clients for the storage facade.

Implements the ObjectStoreClient and ClientFactory protocols from
core.facade, backed by boto3 or an in-memory store.
"""

from .client import (
    Boto3ClientFactory,
    Boto3ObjectStoreClient,
    CachingClientFactory,
    InMemoryClientFactory,
    InMemoryObjectStore,
    InMemoryObjectStoreClient,
    create_client_factory,
    open_content,
)

__all__ = [
    "Boto3ClientFactory",
    "Boto3ObjectStoreClient",
    "CachingClientFactory",
    "InMemoryClientFactory",
    "InMemoryObjectStore",
    "InMemoryObjectStoreClient",
    "create_client_factory",
    "open_content",
]
