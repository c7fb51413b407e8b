"""
Object store capability consumed by the gateway service.

The gateway only ever talks to an :class:`ObjectStoreClient`. Which backend
sits behind it is decided once, at startup, by :func:`create_object_store`.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Dict, Iterable, Iterator, Optional

from files_gateway.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class ObjectInfo:
    """What a backend reports about a stored object."""
    path: str
    size: int
    metadata: Dict[str, str] = field(default_factory=dict)


class ObjectStream:
    """
    Readable object body with guaranteed release.

    Iterating yields chunks and closes the underlying handle once the
    iteration ends, fails, or is abandoned. ``close()`` is idempotent, and the
    stream is also a context manager for callers that may never iterate it.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        content_length: Optional[int] = None,
        on_close: Optional[Callable[[], None]] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self._chunks = chunks
        self._on_close = on_close
        self.content_length = content_length
        self.metadata = metadata or {}
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        try:
            for chunk in self._chunks:
                yield chunk
        finally:
            self.close()

    def read(self) -> bytes:
        """Read the remaining bytes. Only for small objects and tests."""
        return b"".join(self)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> "ObjectStream":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


class ObjectStoreClient(ABC):
    """Minimum capability set the gateway needs from a storage backend."""

    @abstractmethod
    def list(self, bucket: str, prefix: str = "", recursive: bool = True) -> Iterator[ObjectInfo]:
        """Yield every object under ``prefix``, following backend pagination."""

    @abstractmethod
    def put(
        self,
        bucket: str,
        path: str,
        stream: BinaryIO,
        length: Optional[int] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> ObjectInfo:
        """Store ``stream`` at ``path``, replacing any existing object.

        Returns the size the backend actually holds after the write.
        """

    @abstractmethod
    def get(self, bucket: str, path: str) -> ObjectStream:
        """Open the object at ``path``; raises ``NotFound`` when absent."""

    @abstractmethod
    def ping(self, bucket: str) -> None:
        """Raise a gateway error if ``bucket`` cannot be reached."""

    def create_bucket(self, bucket: str) -> None:
        """Create ``bucket``. Only used by development tooling."""
        raise NotImplementedError(f"{type(self).__name__} cannot create buckets")

    def close(self) -> None:
        """Release backend connections."""


def create_object_store(settings: Settings) -> ObjectStoreClient:
    """Build the object store for ``settings.deployment_mode``."""
    if settings.uses_s3:
        from files_gateway.adapters.s3_store import S3ObjectStore
        from files_gateway.s3.client import create_s3_client

        logger.info(f"Using S3 object store for bucket: {settings.s3_bucket_name}")
        return S3ObjectStore(create_s3_client(settings), chunk_size=settings.stream_chunk_size)

    from files_gateway.adapters.local_store import LocalObjectStore

    logger.info(f"Using local object store rooted at: {settings.storage_dir}")
    return LocalObjectStore(settings.storage_dir, chunk_size=settings.stream_chunk_size)
