"""
Object store clients for the storage facade.

Uses boto3 against AWS S3 or any S3-compatible endpoint (MinIO, R2).
Includes an in-memory store for local development and tests, and client
factories that decide whether clients are rebuilt per call or reused.

Every client method translates SDK and OS failures into DelegateError,
keeping the original exception as __cause__.
"""

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, BinaryIO, Callable, Iterator, Optional, Union

from ...core.errors import DelegateError
from ...core.facade import (
    ClientFactory,
    CredentialsProvider,
    ObjectStoreClient,
    UploadSource,
)
from ...core.models import BucketDescriptor, Credentials, Region

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Upload content
# ---------------------------------------------------------------------------

@contextmanager
def open_content(content: UploadSource) -> Iterator[Union[bytes, BinaryIO]]:
    """
    Turn an upload source into a request body.

    Paths are opened for the duration of the upload and closed afterwards.
    Byte buffers are passed through as bytes, streams as they are.
    """
    if isinstance(content, (bytes, bytearray, memoryview)):
        yield bytes(content)
        return

    if isinstance(content, (str, os.PathLike)):
        path = os.fspath(content)
        try:
            handle = open(path, "rb")
        except OSError as e:
            raise DelegateError(f"Cannot read upload source {path}: {e}") from e
        with handle:
            yield handle
        return

    if hasattr(content, "read"):
        yield content
        return

    raise TypeError(f"Unsupported upload source: {type(content).__name__}")


def resolve_credentials(credentials_provider: CredentialsProvider) -> Credentials:
    """
    Ask the provider for credentials while building a client.

    Unusable credentials are an auth failure of the store call, so they
    surface as DelegateError. CredentialError stays inside the probe.
    """
    try:
        credentials = credentials_provider.get_credentials()
    except Exception as e:
        raise DelegateError(f"Cannot authenticate to object store: {e}") from e

    if credentials is None:
        raise DelegateError("Cannot authenticate to object store: provider returned no credentials")

    return credentials


# ---------------------------------------------------------------------------
# boto3 client
# ---------------------------------------------------------------------------

class Boto3ObjectStoreClient:
    """
    S3 client backed by boto3.

    Credentials are resolved from the provider once, when the client is
    built. A client therefore reflects the provider's state at build time,
    which matches the facade building a client per operation.
    """

    def __init__(
        self,
        credentials_provider: CredentialsProvider,
        region: Region,
        *,
        endpoint_url: Optional[str] = None,
        addressing_style: str = "path",
    ) -> None:
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for S3 storage. Install with: pip install boto3"
            )

        self.region = Region.parse(region)
        self._endpoint_url = endpoint_url

        credentials = resolve_credentials(credentials_provider)

        try:
            boto_config = Config(
                signature_version="s3v4",
                s3={"addressing_style": (addressing_style or "path").strip().lower()},
            )

            self._s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                region_name=self.region.value,
                aws_access_key_id=credentials.access_key_id,
                aws_secret_access_key=credentials.secret_access_key,
                aws_session_token=credentials.session_token,
                config=boto_config,
            )
        except Exception as e:
            logger.error(
                "Failed to initialize S3 client",
                extra={"region": self.region.value, "endpoint": endpoint_url, "error": str(e)},
            )
            raise DelegateError(f"Client initialization failed: {e}") from e

        logger.info(
            "Initialized S3 client",
            extra={"region": self.region.value, "endpoint": endpoint_url},
        )

    def put_object(
        self,
        *,
        bucket: str,
        key: str,
        content: UploadSource,
        content_type: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        with open_content(content) as body:
            params: dict[str, Any] = {"Bucket": bucket, "Key": key, "Body": body}
            if content_type:
                params["ContentType"] = content_type
            if metadata:
                params["Metadata"] = metadata

            try:
                self._s3_client.put_object(**params)
            except Exception as e:
                logger.error(
                    "Failed to upload object",
                    extra={"bucket": bucket, "key": key, "error": str(e)},
                )
                raise DelegateError(f"Upload failed: {e}") from e

    def create_bucket(self, *, name: str) -> BucketDescriptor:
        """
        Create a bucket in the client's region.

        us-east-1 is the one region that rejects an explicit
        LocationConstraint. S3 does not echo the bucket name back, so the
        requested name is reported.
        """
        params: dict[str, Any] = {"Bucket": name}
        if self.region is not Region.US_EAST_1:
            params["CreateBucketConfiguration"] = {"LocationConstraint": self.region.value}

        try:
            self._s3_client.create_bucket(**params)
        except Exception as e:
            logger.error(
                "Failed to create bucket",
                extra={"bucket": name, "error": str(e)},
            )
            raise DelegateError(f"Bucket creation failed: {e}") from e

        return BucketDescriptor(name=name)

    def list_buckets(self) -> list[BucketDescriptor]:
        try:
            response = self._s3_client.list_buckets()
        except Exception as e:
            logger.error("Failed to list buckets", extra={"error": str(e)})
            raise DelegateError(f"Bucket listing failed: {e}") from e

        return [
            BucketDescriptor(name=bucket["Name"], creation_date=bucket.get("CreationDate"))
            for bucket in response.get("Buckets", [])
        ]


# ---------------------------------------------------------------------------
# In-memory store for local development
# ---------------------------------------------------------------------------

@dataclass
class StoredObject:
    """An object held by the in-memory store."""
    data: bytes
    content_type: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)


class InMemoryObjectStore:
    """
    Buckets and objects kept in dictionaries.

    Shared by every InMemoryObjectStoreClient built from the same factory,
    so an upload through one client is visible through the next.
    """

    def __init__(self, normalize_bucket_name: Optional[Callable[[str], str]] = None) -> None:
        # {bucket_name: {key: StoredObject}}
        self.buckets: dict[str, dict[str, StoredObject]] = {}
        self.creation_dates: dict[str, datetime] = {}
        self._normalize = normalize_bucket_name or (lambda name: name)
        self._lock = Lock()

    def create_bucket(self, name: str) -> BucketDescriptor:
        normalized = self._normalize(name)
        with self._lock:
            if normalized not in self.buckets:
                self.buckets[normalized] = {}
                self.creation_dates[normalized] = datetime.now(timezone.utc)
            return BucketDescriptor(name=normalized, creation_date=self.creation_dates[normalized])

    def put(self, bucket: str, key: str, obj: StoredObject) -> None:
        with self._lock:
            if bucket not in self.buckets:
                raise DelegateError(f"Bucket not found: {bucket}")
            self.buckets[bucket][key] = obj

    def get_object(self, bucket: str, key: str) -> bytes:
        """Content of a stored object. Test and debugging helper."""
        with self._lock:
            try:
                return self.buckets[bucket][key].data
            except KeyError:
                raise DelegateError(f"Object not found: {bucket}/{key}")

    def list_buckets(self) -> list[BucketDescriptor]:
        with self._lock:
            return [
                BucketDescriptor(name=name, creation_date=self.creation_dates.get(name))
                for name in self.buckets
            ]


class InMemoryObjectStoreClient:
    """
    ObjectStoreClient over an InMemoryObjectStore.

    Not suitable for production, but lets the facade and CLI run end to
    end without credentials for a real store.
    """

    def __init__(self, store: InMemoryObjectStore, region: Region) -> None:
        self.store = store
        self.region = Region.parse(region)

    def put_object(
        self,
        *,
        bucket: str,
        key: str,
        content: UploadSource,
        content_type: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        with open_content(content) as body:
            data = body if isinstance(body, bytes) else body.read()

        self.store.put(
            bucket,
            key,
            StoredObject(data=data, content_type=content_type, metadata=dict(metadata or {})),
        )

        logger.debug(
            "Stored object in memory",
            extra={"bucket": bucket, "key": key, "size_bytes": len(data)},
        )

    def create_bucket(self, *, name: str) -> BucketDescriptor:
        return self.store.create_bucket(name)

    def list_buckets(self) -> list[BucketDescriptor]:
        return self.store.list_buckets()


# ---------------------------------------------------------------------------
# Client factories
# ---------------------------------------------------------------------------

class Boto3ClientFactory:
    """A fresh boto3 client for every call."""

    def __init__(self, endpoint_url: Optional[str] = None, addressing_style: str = "path") -> None:
        self.endpoint_url = endpoint_url
        self.addressing_style = addressing_style

    def create(
        self,
        *,
        region: Region,
        credentials_provider: CredentialsProvider,
    ) -> ObjectStoreClient:
        return Boto3ObjectStoreClient(
            credentials_provider,
            region,
            endpoint_url=self.endpoint_url,
            addressing_style=self.addressing_style,
        )


class InMemoryClientFactory:
    """Clients that all share one InMemoryObjectStore."""

    def __init__(self, store: Optional[InMemoryObjectStore] = None) -> None:
        self.store = store or InMemoryObjectStore()
        logger.info("Initialized in-memory object store")

    def create(
        self,
        *,
        region: Region,
        credentials_provider: CredentialsProvider,
    ) -> ObjectStoreClient:
        # Fail the same way a real client would when credentials are unusable
        resolve_credentials(credentials_provider)
        return InMemoryObjectStoreClient(self.store, region)


class CachingClientFactory:
    """
    Reuses one client per (region, credentials provider) pair.

    Wraps another factory. Swapping the facade's provider or region yields
    a different key, so a stale client is never handed out for new
    configuration.
    """

    def __init__(self, inner: ClientFactory) -> None:
        self._inner = inner
        # Holding the provider keeps its id from being reused while cached
        self._clients: dict[
            tuple[Region, int], tuple[CredentialsProvider, ObjectStoreClient]
        ] = {}
        self._lock = Lock()

    def create(
        self,
        *,
        region: Region,
        credentials_provider: CredentialsProvider,
    ) -> ObjectStoreClient:
        cache_key = (region, id(credentials_provider))
        with self._lock:
            cached = self._clients.get(cache_key)
            if cached is None:
                client = self._inner.create(
                    region=region,
                    credentials_provider=credentials_provider,
                )
                cached = (credentials_provider, client)
                self._clients[cache_key] = cached
            return cached[1]

    def clear(self) -> None:
        with self._lock:
            self._clients.clear()


def create_client_factory(
    mock_mode: bool = False,
    endpoint_url: Optional[str] = None,
    addressing_style: str = "path",
    store: Optional[InMemoryObjectStore] = None,
) -> ClientFactory:
    """
    Pick a client factory.

    Args:
        mock_mode: If True, clients share an in-memory store
        endpoint_url: S3-compatible endpoint; None means AWS
        addressing_style: "path" or "virtual"
        store: Existing in-memory store to reuse in mock mode
    """
    if mock_mode:
        return InMemoryClientFactory(store)

    return Boto3ClientFactory(endpoint_url=endpoint_url, addressing_style=addressing_style)
