"""Translation of botocore failures into the gateway error taxonomy."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from botocore.exceptions import BotoCoreError, ClientError

from files_gateway.errors import GatewayError, NotFound, StorageDenied, StorageUnavailable

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}
DENIED_CODES = {
    "AccessDenied",
    "AllAccessDisabled",
    "Forbidden",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "403",
}


def client_error_to_gateway_error(
    exc: ClientError,
    bucket_name: str,
    object_key: Optional[str] = None,
) -> GatewayError:
    """Pick the gateway error matching an S3 ``ClientError`` code."""
    code = str(exc.response.get("Error", {}).get("Code", ""))
    details = {"bucket": bucket_name, "code": code}
    if object_key is not None:
        details["path"] = object_key

    if code in NOT_FOUND_CODES and object_key is not None:
        return NotFound(f"No object at path: {object_key}", details)
    if code in DENIED_CODES:
        return StorageDenied(f"Storage backend denied access to bucket '{bucket_name}'", details)
    if code == "NoSuchBucket":
        return StorageUnavailable(f"Bucket '{bucket_name}' does not exist", details)
    return StorageUnavailable(f"Storage backend error ({code or 'unknown'})", details)


@contextmanager
def translate_s3_errors(operation: str, bucket_name: str, object_key: Optional[str] = None) -> Iterator[None]:
    """
    Re-raise botocore failures raised inside the block as gateway errors.

    :param operation: name of the S3 operation, used for logging.
    :param bucket_name: bucket the operation targets.
    :param object_key: object key, when the operation targets one object.
    """
    try:
        yield
    except ClientError as exc:
        error = client_error_to_gateway_error(exc, bucket_name, object_key)
        if isinstance(error, NotFound):
            logger.info(f"{operation}: {error.message}")
        else:
            logger.error(f"{operation} failed on bucket '{bucket_name}': {exc}")
        raise error from exc
    except BotoCoreError as exc:
        logger.error(f"{operation} could not reach the storage backend: {exc}")
        raise StorageUnavailable(
            f"Storage backend unreachable: {exc}",
            {"bucket": bucket_name},
        ) from exc
