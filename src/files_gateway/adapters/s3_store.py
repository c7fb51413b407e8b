"""S3-backed object store (aws-mock and aws-prod modes)."""

import logging
from typing import BinaryIO, Dict, Iterator, Optional
from urllib.parse import quote, unquote

from files_gateway.adapters.object_store import ObjectInfo, ObjectStoreClient, ObjectStream
from files_gateway.s3.errors import translate_s3_errors
from files_gateway.s3.read_objects import (
    fetch_s3_object,
    fetch_s3_object_head,
    fetch_s3_objects_metadata,
)
from files_gateway.s3.write_objects import upload_s3_object

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def _encode_metadata(metadata: Optional[Dict[str, str]]) -> Dict[str, str]:
    # S3 user metadata travels in HTTP headers, which must be ASCII.
    return {key: quote(value, safe="") for key, value in (metadata or {}).items()}


def _decode_metadata(metadata: Optional[Dict[str, str]]) -> Dict[str, str]:
    return {key: unquote(value) for key, value in (metadata or {}).items()}


class S3ObjectStore(ObjectStoreClient):
    """Object store backed by a shared, thread-safe boto3 S3 client."""

    def __init__(self, s3_client: "S3Client", chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._s3_client = s3_client
        self._chunk_size = chunk_size

    def list(self, bucket: str, prefix: str = "", recursive: bool = True) -> Iterator[ObjectInfo]:
        with translate_s3_errors("list_objects_v2", bucket):
            for obj in fetch_s3_objects_metadata(
                bucket_name=bucket,
                s3_client=self._s3_client,
                prefix=prefix,
                recursive=recursive,
            ):
                yield ObjectInfo(path=obj["path"], size=obj["size"])

    def put(
        self,
        bucket: str,
        path: str,
        stream: BinaryIO,
        length: Optional[int] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> ObjectInfo:
        with translate_s3_errors("put_object", bucket, path):
            upload_s3_object(
                bucket_name=bucket,
                object_key=path,
                file_content=stream,
                s3_client=self._s3_client,
                metadata=_encode_metadata(metadata),
            )
        # A missing object right after a successful upload is a backend fault, not a NotFound.
        with translate_s3_errors("head_object", bucket):
            head = fetch_s3_object_head(bucket, path, self._s3_client)
        logger.info(f"Uploaded s3://{bucket}/{path} ({head['ContentLength']} bytes)")
        return ObjectInfo(
            path=path,
            size=head["ContentLength"],
            metadata=_decode_metadata(head.get("Metadata")),
        )

    def get(self, bucket: str, path: str) -> ObjectStream:
        with translate_s3_errors("get_object", bucket, path):
            response = fetch_s3_object(bucket, path, self._s3_client)
        body = response["Body"]
        return ObjectStream(
            chunks=self._iter_body(body, bucket, path),
            content_length=response.get("ContentLength"),
            on_close=body.close,
            metadata=_decode_metadata(response.get("Metadata")),
        )

    def _iter_body(self, body, bucket: str, path: str) -> Iterator[bytes]:
        with translate_s3_errors("read_object_body", bucket, path):
            for chunk in body.iter_chunks(chunk_size=self._chunk_size):
                yield chunk

    def ping(self, bucket: str) -> None:
        with translate_s3_errors("head_bucket", bucket):
            self._s3_client.head_bucket(Bucket=bucket)

    def create_bucket(self, bucket: str) -> None:
        """Create ``bucket`` for local development; the gateway itself never does."""
        create_kwargs = {"Bucket": bucket}
        region = self._s3_client.meta.region_name
        if region and region != "us-east-1":
            create_kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}
        with translate_s3_errors("create_bucket", bucket):
            self._s3_client.create_bucket(**create_kwargs)

    def close(self) -> None:
        self._s3_client.close()
