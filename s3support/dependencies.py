"""
Wiring between settings, infrastructure and the facade.

The core facade knows nothing about environment variables or boto3. This
module reads Settings and builds the concrete credentials provider and
client factory the facade is handed.
"""

import logging
from typing import Optional

from .config.settings import Settings, get_settings
from .core.facade import (
    ClientFactory,
    CredentialsProvider,
    StorageFacade,
    StorageFacadeConfig,
)
from .infrastructure.credentials import (
    EnvironmentCredentialsProvider,
    PropertiesFileCredentialsProvider,
    SessionCredentialsProvider,
    StaticCredentialsProvider,
)
from .infrastructure.storage import (
    CachingClientFactory,
    InMemoryObjectStore,
    create_client_factory,
)

logger = logging.getLogger(__name__)

MOCK_ACCESS_KEY_ID = "mock-access-key"
MOCK_SECRET_ACCESS_KEY = "mock-secret-key"


def create_credentials_provider(settings: Settings) -> CredentialsProvider:
    """Build the provider named by S3_CREDENTIALS_SOURCE."""
    source = settings.s3_credentials_source

    if source == "environment":
        return EnvironmentCredentialsProvider()
    if source == "properties":
        return PropertiesFileCredentialsProvider(settings.s3_credentials_file)
    if source == "session":
        return SessionCredentialsProvider(profile_name=settings.s3_profile_name)

    if settings.s3_mock_mode and not settings.s3_access_key_id:
        # The in-memory store accepts anything, but the probe wants non-blank keys
        return StaticCredentialsProvider(MOCK_ACCESS_KEY_ID, MOCK_SECRET_ACCESS_KEY)

    return StaticCredentialsProvider(
        settings.s3_access_key_id,
        settings.s3_secret_access_key,
    )


def create_facade_client_factory(
    settings: Settings,
    store: Optional[InMemoryObjectStore] = None,
) -> ClientFactory:
    factory = create_client_factory(
        mock_mode=settings.s3_mock_mode,
        endpoint_url=settings.s3_endpoint_url,
        addressing_style=settings.s3_addressing_style,
        store=store,
    )
    if settings.s3_reuse_clients:
        factory = CachingClientFactory(factory)
    return factory


def create_storage_facade(
    settings: Optional[Settings] = None,
    *,
    mock_mode: Optional[bool] = None,
    store: Optional[InMemoryObjectStore] = None,
) -> StorageFacade:
    """
    Build a facade from settings.

    Args:
        settings: Settings to use (defaults to get_settings())
        mock_mode: Overrides S3_MOCK_MODE when given
        store: In-memory store to share, only used in mock mode

    Returns:
        StorageFacade with its credentials already probed
    """
    settings = settings or get_settings()
    if mock_mode is not None and mock_mode != settings.s3_mock_mode:
        settings = settings.model_copy(update={"s3_mock_mode": mock_mode})

    if settings.s3_mock_mode and store is None:
        store = InMemoryObjectStore()
        if settings.s3_bucket_name:
            # A fresh store is empty; the configured bucket has to exist for uploads
            store.create_bucket(settings.s3_bucket_name)

    config = StorageFacadeConfig(
        bucket_name=settings.s3_bucket_name,
        credentials_provider=create_credentials_provider(settings),
        region=settings.region,
    )
    facade = StorageFacade(config, client_factory=create_facade_client_factory(settings, store))

    logger.info(
        "Created storage facade",
        extra={
            "bucket": config.bucket_name,
            "region": config.region.value,
            "credentials_source": settings.s3_credentials_source,
            "mock_mode": settings.s3_mock_mode,
            "enabled": facade.is_enabled(),
        },
    )

    return facade
