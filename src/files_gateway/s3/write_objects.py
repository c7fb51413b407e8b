"""Functions for writing objects to an S3 bucket--the "C" and "U" in CRUD."""

from typing import BinaryIO, Dict, Optional

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...


def upload_s3_object(
    bucket_name: str,
    object_key: str,
    file_content: BinaryIO,
    s3_client: "S3Client",
    content_type: Optional[str] = None,
    metadata: Optional[Dict[str, str]] = None,
) -> None:
    """
    Stream a file object to an S3 bucket.

    Large payloads go through a multipart upload, which the transfer manager
    aborts if reading ``file_content`` fails, so no partial object is left behind.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param file_content: A readable binary stream with the object's bytes.
    :param s3_client: A boto3 S3 client.
    :param content_type: The MIME type of the file, e.g. "text/plain" for a text file.
    :param metadata: User metadata stored with the object (``x-amz-meta-*``).
    """
    extra_args: Dict[str, object] = {"ContentType": content_type or "application/octet-stream"}
    if metadata:
        extra_args["Metadata"] = metadata
    s3_client.upload_fileobj(
        Fileobj=file_content,
        Bucket=bucket_name,
        Key=object_key,
        ExtraArgs=extra_args,
    )
