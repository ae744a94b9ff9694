"""
Storage facade: configuration plus pass-through storage operations.

The facade holds a bucket name, a credentials provider and a region, and
forwards uploads, bucket creation and bucket listing to an object store
client. It does not retry, chunk or pool anything itself. Those concerns
belong to the client library behind the ClientFactory.

Failures from the client propagate untouched. The only failure the facade
absorbs is a credentials provider that cannot produce credentials, which
is reported through is_enabled() instead of an exception.
"""

import io
import logging
import os
from dataclasses import dataclass, replace
from typing import BinaryIO, Optional, Protocol, Union

from .errors import ConfigurationError
from .models import (
    DEFAULT_REGION,
    BucketDescriptor,
    CredentialProbeResult,
    Credentials,
    CredentialsAvailable,
    CredentialsUnavailable,
    Region,
)

logger = logging.getLogger(__name__)


UploadSource = Union[str, "os.PathLike[str]", bytes, bytearray, memoryview, BinaryIO]


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class CredentialsProvider(Protocol):
    """
    Anything that can hand out an access key / secret pair.

    Implementations raise CredentialError when no credentials are available.
    """

    def get_credentials(self) -> Credentials:
        ...


class ObjectStoreClient(Protocol):
    """
    The operations the facade forwards to.

    Implementations raise DelegateError for transport, auth and service
    failures, chaining the original exception.
    """

    region: Region

    def put_object(
        self,
        *,
        bucket: str,
        key: str,
        content: UploadSource,
        content_type: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        """Upload the full content in a single request."""
        ...

    def create_bucket(self, *, name: str) -> BucketDescriptor:
        """Create a bucket and describe it as the store knows it."""
        ...

    def list_buckets(self) -> list[BucketDescriptor]:
        """All buckets visible to the credentials."""
        ...


class ClientFactory(Protocol):
    """
    Builds object store clients.

    Injected into the facade so callers decide between a fresh client per
    call and some form of reuse without changing the facade.
    """

    def create(
        self,
        *,
        region: Region,
        credentials_provider: CredentialsProvider,
    ) -> ObjectStoreClient:
        ...


# ---------------------------------------------------------------------------
# Credential probe
# ---------------------------------------------------------------------------

def probe_credentials(
    provider: Optional[CredentialsProvider],
) -> CredentialProbeResult:
    """
    Ask a provider for credentials and classify the answer.

    This is the one place provider failures are caught. Every failure mode
    (no provider, provider raised, nothing returned, blank key or secret)
    becomes CredentialsUnavailable with a reason.
    """
    if provider is None:
        return CredentialsUnavailable("no credentials provider configured")

    try:
        credentials = provider.get_credentials()
    except Exception as e:
        return CredentialsUnavailable(f"credentials provider failed: {e}")

    if credentials is None:
        return CredentialsUnavailable("credentials provider returned nothing")

    if not credentials.is_well_formed:
        return CredentialsUnavailable("access key or secret key is empty")

    return CredentialsAvailable(credentials)


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StorageFacadeConfig:
    """
    Everything the facade needs to build a client.

    Frozen: the facade swaps in a new instance on every change, so a
    snapshot obtained from StorageFacade.config never changes underneath
    its holder.
    """
    bucket_name: Optional[str] = None
    credentials_provider: Optional[CredentialsProvider] = None
    region: Region = DEFAULT_REGION


class StorageFacade:
    """
    Configuration holder with pass-through storage operations.

    Not thread-safe. Configure it first, then share it, or guard the
    setters with a lock of your own.
    """

    def __init__(
        self,
        config: Optional[StorageFacadeConfig] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        if client_factory is None:
            # Imported here so the core stays importable without boto3
            from ..infrastructure.storage.client import Boto3ClientFactory
            client_factory = Boto3ClientFactory()

        self._client_factory = client_factory
        self._config = config or StorageFacadeConfig()
        self._config = replace(self._config, region=Region.parse(self._config.region))
        self._enabled = False

        if self._config.credentials_provider is not None:
            self.refresh_enabled_state()

    # -- configuration ------------------------------------------------------

    @property
    def config(self) -> StorageFacadeConfig:
        return self._config

    @property
    def bucket_name(self) -> Optional[str]:
        return self._config.bucket_name

    @property
    def region(self) -> Region:
        return self._config.region

    @property
    def credentials_provider(self) -> Optional[CredentialsProvider]:
        return self._config.credentials_provider

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_bucket_name(self, name: str) -> None:
        """Store the target bucket. No validation, no network call."""
        self._config = replace(self._config, bucket_name=name)

    def set_credentials_provider(self, provider: Optional[CredentialsProvider]) -> None:
        """Store the provider and re-probe it."""
        self._config = replace(self._config, credentials_provider=provider)
        self.refresh_enabled_state()

    def set_region(self, region: Union[Region, str]) -> None:
        """Store the region used for clients built from now on."""
        self._config = replace(self._config, region=Region.parse(region))

    def refresh_enabled_state(self) -> bool:
        """
        Probe the current provider and cache the outcome.

        Never raises. Unavailable credentials disable the facade and are
        logged as a warning.
        """
        result = probe_credentials(self._config.credentials_provider)
        self._enabled = result.ok

        if isinstance(result, CredentialsUnavailable):
            logger.warning(
                "Storage credentials not available",
                extra={"reason": result.reason},
            )

        return self._enabled

    def is_enabled(self) -> bool:
        return self._enabled

    # -- operations ---------------------------------------------------------

    def build_client(self) -> ObjectStoreClient:
        """
        Build a client for the configured region and provider.

        Raises ConfigurationError when no provider has been set. Whether
        the returned client is fresh or reused is up to the client factory.
        """
        provider = self._config.credentials_provider
        if provider is None:
            raise ConfigurationError("Credentials provider must be set before building a client")

        return self._client_factory.create(
            region=self._config.region,
            credentials_provider=provider,
        )

    def upload_object(
        self,
        key: str,
        source: UploadSource,
        *,
        content_type: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> bool:
        """
        Upload a path, byte buffer or binary stream to the configured bucket.

        One request, full content, no retry. Returns True once the client
        accepts the upload. Client failures (including a missing file)
        propagate as DelegateError.
        """
        bucket = self._require_bucket_name()
        client = self.build_client()

        client.put_object(
            bucket=bucket,
            key=key,
            content=source,
            content_type=content_type,
            metadata=metadata,
        )

        logger.debug(
            "Uploaded object",
            extra={"bucket": bucket, "key": key, "source": _describe_source(source)},
        )

        return True

    def upload_file(self, key: str, path: Union[str, "os.PathLike[str]"], **kwargs) -> bool:
        return self.upload_object(key, os.fspath(path), **kwargs)

    def upload_bytes(self, key: str, data: bytes, **kwargs) -> bool:
        return self.upload_object(key, bytes(data), **kwargs)

    def upload_stream(self, key: str, stream: BinaryIO, **kwargs) -> bool:
        return self.upload_object(key, stream, **kwargs)

    def create_bucket(self, name: str) -> bool:
        """
        Create a bucket and make it the facade's bucket.

        The store may normalize the name, so the returned descriptor's name
        is adopted rather than the requested one.
        """
        client = self.build_client()
        bucket = client.create_bucket(name=name)

        self._config = replace(self._config, bucket_name=bucket.name)

        logger.info(
            "Created bucket",
            extra={"requested": name, "bucket": bucket.name, "region": self._config.region.value},
        )

        return True

    def list_bucket_names(self) -> set[str]:
        """Names of all buckets visible to the credentials."""
        client = self.build_client()
        names = {bucket.name for bucket in client.list_buckets()}

        logger.debug("Listed buckets", extra={"count": len(names)})

        return names

    def _require_bucket_name(self) -> str:
        if not self._config.bucket_name:
            raise ConfigurationError("Bucket name must be set before uploading")
        return self._config.bucket_name


def _describe_source(source: UploadSource) -> str:
    """Short label for logs; never the content itself."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return f"bytes[{len(source)}]"
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    if isinstance(source, io.IOBase):
        return type(source).__name__
    return "stream"
