"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

from typing import Any, Dict, Iterator

try:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import GetObjectOutputTypeDef, HeadObjectOutputTypeDef
except ImportError:
    ...


def fetch_s3_objects_metadata(
    bucket_name: str,
    s3_client: "S3Client",
    prefix: str = "",
    recursive: bool = True,
) -> Iterator[Dict[str, Any]]:
    """
    Yield ``{"path", "size"}`` for every object under ``prefix``.

    Pagination is followed to the end. With ``recursive=False`` only objects
    directly under the prefix are yielded; deeper "directories" are skipped.

    :param bucket_name: The name of the S3 bucket.
    :param s3_client: A boto3 S3 client.
    :param prefix: Key prefix to restrict the listing to.
    :param recursive: Whether to descend below the first ``/`` after the prefix.
    """
    paginator = s3_client.get_paginator("list_objects_v2")
    paginate_kwargs: Dict[str, Any] = {"Bucket": bucket_name, "Prefix": prefix}
    if not recursive:
        paginate_kwargs["Delimiter"] = "/"

    for page in paginator.paginate(**paginate_kwargs):
        for obj in page.get("Contents", []):
            yield {"path": obj["Key"], "size": obj["Size"]}


def fetch_s3_object(bucket_name: str, object_key: str, s3_client: "S3Client") -> "GetObjectOutputTypeDef":
    """Open an object; its ``Body`` is an unread ``StreamingBody``."""
    return s3_client.get_object(Bucket=bucket_name, Key=object_key)


def fetch_s3_object_head(bucket_name: str, object_key: str, s3_client: "S3Client") -> "HeadObjectOutputTypeDef":
    """Fetch an object's size and user metadata without its body."""
    return s3_client.head_object(Bucket=bucket_name, Key=object_key)
