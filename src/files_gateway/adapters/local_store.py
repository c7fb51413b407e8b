"""Filesystem-backed object store for local-dev mode.

Each bucket is a directory under the storage root holding one flat record
file per object, named by a hash of the full object path. A record starts
with a JSON header line (the path and its metadata) followed by the payload
bytes, so ``a`` and ``a/b`` are independent objects, as they are in S3.

Records are written to a temporary file next to the destination and
published with ``os.replace``. Readers and concurrent writers only ever see
a complete record, and the payload and metadata of a record always come
from the same upload.
"""

import hashlib
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

from files_gateway.adapters.object_store import ObjectInfo, ObjectStoreClient, ObjectStream
from files_gateway.errors import NotFound, StorageDenied, StorageUnavailable

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
RECORD_SUFFIX = ".obj"
TEMP_PREFIX = ".upload-"


def record_name(path: str) -> str:
    """File name of the record holding the object at ``path``."""
    return hashlib.sha256(path.encode("utf-8")).hexdigest() + RECORD_SUFFIX


class CorruptRecord(ValueError):
    """A record file whose header cannot be parsed."""


def _read_header(handle: BinaryIO) -> Tuple[str, Dict[str, str]]:
    """Parse the header line of an open record; leaves ``handle`` at the payload."""
    line = handle.readline()
    try:
        header = json.loads(line.decode("utf-8"))
        return header["path"], dict(header.get("metadata") or {})
    except (UnicodeDecodeError, ValueError, KeyError, TypeError) as exc:
        raise CorruptRecord(str(exc)) from exc


class LocalObjectStore(ObjectStoreClient):
    """Object store rooted at a local directory."""

    def __init__(self, root: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._root = Path(root)
        self._chunk_size = chunk_size

    def _bucket_dir(self, bucket: str) -> Path:
        bucket_dir = self._root / bucket
        if not bucket_dir.is_dir():
            raise StorageUnavailable(f"Bucket '{bucket}' does not exist", {"bucket": bucket})
        return bucket_dir

    def list(self, bucket: str, prefix: str = "", recursive: bool = True) -> Iterator[ObjectInfo]:
        bucket_dir = self._bucket_dir(bucket)
        found: List[ObjectInfo] = []
        try:
            with os.scandir(bucket_dir) as entries:
                for entry in entries:
                    if not entry.name.endswith(RECORD_SUFFIX) or entry.name.startswith(TEMP_PREFIX):
                        continue
                    try:
                        with open(entry.path, "rb") as handle:
                            key, _ = _read_header(handle)
                            size = os.fstat(handle.fileno()).st_size - handle.tell()
                    except FileNotFoundError:
                        # removed while scanning
                        continue
                    except CorruptRecord as exc:
                        raise StorageUnavailable(
                            f"Corrupt record '{entry.name}' in bucket '{bucket}'",
                            {"bucket": bucket, "record": entry.name},
                        ) from exc
                    if not key.startswith(prefix):
                        continue
                    if not recursive and "/" in key[len(prefix):]:
                        continue
                    found.append(ObjectInfo(path=key, size=size))
        except PermissionError as exc:
            raise StorageDenied(f"Cannot read bucket '{bucket}': {exc}", {"bucket": bucket}) from exc
        except OSError as exc:
            raise StorageUnavailable(f"Cannot list bucket '{bucket}': {exc}", {"bucket": bucket}) from exc

        # S3 lists keys in lexicographic order
        found.sort(key=lambda info: info.path)
        return iter(found)

    def put(
        self,
        bucket: str,
        path: str,
        stream: BinaryIO,
        length: Optional[int] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> ObjectInfo:
        bucket_dir = self._bucket_dir(bucket)
        header = json.dumps({"path": path, "metadata": dict(metadata or {})}).encode("utf-8") + b"\n"
        try:
            size = self._write_record(bucket_dir / record_name(path), header, stream)
        except PermissionError as exc:
            raise StorageDenied(f"Cannot write '{path}': {exc}", {"path": path}) from exc
        except OSError as exc:
            raise StorageUnavailable(f"Cannot write '{path}': {exc}", {"path": path}) from exc

        logger.info(f"Stored {path} in local bucket '{bucket}' ({size} bytes)")
        return ObjectInfo(path=path, size=size, metadata=dict(metadata or {}))

    def _write_record(self, destination: Path, header: bytes, stream: BinaryIO) -> int:
        """Write header and payload to a temporary file, then publish it; returns the payload size."""
        tmp = tempfile.NamedTemporaryFile(dir=destination.parent, prefix=TEMP_PREFIX, delete=False)
        try:
            with tmp:
                tmp.write(header)
                shutil.copyfileobj(stream, tmp, self._chunk_size)
                tmp.flush()
                size = os.fstat(tmp.fileno()).st_size - len(header)
            os.replace(tmp.name, destination)
        except BaseException:
            Path(tmp.name).unlink(missing_ok=True)
            raise
        return size

    def get(self, bucket: str, path: str) -> ObjectStream:
        bucket_dir = self._bucket_dir(bucket)
        try:
            handle = open(bucket_dir / record_name(path), "rb")
        except FileNotFoundError as exc:
            raise NotFound(f"No object at path: {path}", {"bucket": bucket, "path": path}) from exc
        except PermissionError as exc:
            raise StorageDenied(f"Cannot read '{path}': {exc}", {"path": path}) from exc
        except OSError as exc:
            raise StorageUnavailable(f"Cannot read '{path}': {exc}", {"path": path}) from exc

        try:
            _, metadata = _read_header(handle)
            content_length = os.fstat(handle.fileno()).st_size - handle.tell()
        except (CorruptRecord, OSError) as exc:
            handle.close()
            raise StorageUnavailable(f"Cannot read '{path}': corrupt record", {"path": path}) from exc

        return ObjectStream(
            chunks=iter(lambda: handle.read(self._chunk_size), b""),
            content_length=content_length,
            on_close=handle.close,
            metadata=metadata,
        )

    def ping(self, bucket: str) -> None:
        self._bucket_dir(bucket)

    def create_bucket(self, bucket: str) -> None:
        """Create the bucket directory for local development."""
        (self._root / bucket).mkdir(parents=True, exist_ok=True)
