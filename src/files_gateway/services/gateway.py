"""
Gateway service: the three file operations over an injected object store.

The service holds no per-request state. Every failure surfaces as a
:class:`~files_gateway.errors.GatewayError` subclass; nothing is turned
into an empty or partially filled success result.
"""

import logging
from typing import BinaryIO, List, Optional
from urllib.parse import quote

from files_gateway.adapters.object_store import ObjectInfo, ObjectStoreClient, ObjectStream
from files_gateway.errors import InvalidInput, PartialWrite
from files_gateway.schemas import ObjectDescriptor, ObjectMetadata
from files_gateway.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)


def normalize_object_path(path: Optional[str]) -> str:
    """
    Return ``path`` as ``/``-joined segments without leading or trailing slashes.

    :raises InvalidInput: if the path has no segments, an empty inner
        segment, or a ``.``/``..`` segment.
    """
    if path is None:
        raise InvalidInput("Object path is required")
    stripped = path.strip("/")
    if not stripped:
        raise InvalidInput("Object path must not be empty", {"path": path})
    segments = stripped.split("/")
    for segment in segments:
        if segment in ("", ".", ".."):
            raise InvalidInput(f"Invalid object path: {path}", {"path": path})
    return "/".join(segments)


def _require_bucket(bucket: Optional[str]) -> str:
    if not bucket or not bucket.strip():
        raise InvalidInput("Bucket name must not be empty")
    return bucket


class CountingReader:
    """
    Wrap a binary stream, count the bytes handed out and enforce a declared length.

    Raises :class:`PartialWrite` as soon as the wrapped stream ends short of
    ``expected_length`` or yields more than it.
    """

    def __init__(self, raw: BinaryIO, expected_length: Optional[int] = None):
        self._raw = raw
        self.expected_length = expected_length
        self.bytes_read = 0
        self.failed = False

    def read(self, size: int = -1) -> bytes:
        chunk = self._raw.read(size)
        self.bytes_read += len(chunk)
        if self.expected_length is None:
            return chunk

        at_eof = not chunk or size is None or size < 0
        if self.bytes_read > self.expected_length:
            self.failed = True
            raise PartialWrite(
                f"Payload is longer than the declared {self.expected_length} bytes",
                {"declared": str(self.expected_length), "received": str(self.bytes_read)},
            )
        if at_eof and self.bytes_read < self.expected_length:
            self.failed = True
            raise PartialWrite(
                f"Payload ended after {self.bytes_read} of {self.expected_length} declared bytes",
                {"declared": str(self.expected_length), "received": str(self.bytes_read)},
            )
        return chunk

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False


class GatewayService:
    """List, upload and download objects through an :class:`ObjectStoreClient`."""

    def __init__(self, object_store: ObjectStoreClient, public_base_url: str):
        self._store = object_store
        self._public_base_url = public_base_url.rstrip("/")

    def locator_for(self, path: str) -> str:
        """Static retrieval link for ``path``; the same path always yields the same URL."""
        return f"{self._public_base_url}/v1/objects/{quote(path, safe='/')}"

    def _describe(self, info: ObjectInfo) -> ObjectDescriptor:
        metadata = ObjectMetadata.from_store(info.metadata)
        return ObjectDescriptor(
            path=info.path,
            size=info.size,
            title=metadata.title,
            description=metadata.description,
            url=self.locator_for(info.path),
        )

    @log_execution_time
    def list_objects(self, bucket: str, prefix: Optional[str] = "", recursive: bool = True) -> List[ObjectDescriptor]:
        """
        Describe every object under ``prefix``.

        Backend pagination is consumed here; the returned list is complete.
        An empty bucket gives ``[]``; an unreachable or denying backend raises.
        """
        bucket = _require_bucket(bucket)
        prefix = (prefix or "").lstrip("/")
        descriptors = [self._describe(info) for info in self._store.list(bucket, prefix, recursive)]
        logger.info(f"Listed {len(descriptors)} objects in '{bucket}' (prefix='{prefix}', recursive={recursive})")
        return descriptors

    @log_execution_time
    def put_object(
        self,
        bucket: str,
        target_path: str,
        payload: Optional[BinaryIO],
        payload_length: Optional[int] = None,
        metadata: Optional[ObjectMetadata] = None,
    ) -> ObjectDescriptor:
        """
        Stream ``payload`` to ``target_path``, replacing any existing object.

        :param payload_length: declared byte count, or ``None`` to read until
            the stream ends.
        :raises InvalidInput: empty path, missing payload, negative length.
        :raises PartialWrite: the payload did not match its declared length,
            or the backend holds a different size than was sent.
        """
        bucket = _require_bucket(bucket)
        path = normalize_object_path(target_path)
        if payload is None:
            raise InvalidInput("Payload is required", {"path": path})
        if payload_length is not None and payload_length < 0:
            raise InvalidInput(f"Payload length must be >= 0, got {payload_length}", {"path": path})

        metadata = metadata or ObjectMetadata()
        reader = CountingReader(payload, payload_length)
        try:
            stored = self._store.put(bucket, path, reader, payload_length, metadata.to_store())
        except PartialWrite:
            raise
        except Exception as exc:
            # Some transports wrap errors raised while reading the payload.
            if reader.failed:
                raise PartialWrite(
                    f"Upload of {path} aborted: payload did not match its declared length",
                    {"path": path},
                ) from exc
            raise

        if stored.size != reader.bytes_read:
            raise PartialWrite(
                f"Backend holds {stored.size} bytes for {path} but {reader.bytes_read} were sent",
                {"path": path, "stored": str(stored.size), "sent": str(reader.bytes_read)},
            )
        return self._describe(stored)

    @log_execution_time
    def get_object(self, bucket: str, path: str) -> ObjectStream:
        """
        Open the object at ``path`` for streaming.

        The caller owns the returned stream and must close it (iterate it to
        the end, call ``close()``, or use it as a context manager).

        :raises NotFound: if no object exists at ``path``.
        """
        bucket = _require_bucket(bucket)
        return self._store.get(bucket, normalize_object_path(path))

    def check_storage(self, bucket: str) -> None:
        """Raise a gateway error if ``bucket`` is unreachable."""
        self._store.ping(_require_bucket(bucket))
