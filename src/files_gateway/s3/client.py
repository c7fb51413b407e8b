"""S3 client construction from settings."""

import logging
import os
from typing import Any, Dict

import boto3
from botocore.config import Config

from files_gateway.config.settings import Settings

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)


def create_s3_client(settings: Settings) -> "S3Client":
    """
    Create a boto3 S3 client for the configured deployment mode.

    The client is thread-safe; its connection pool is sized so concurrent
    requests can share it.
    """
    client_kwargs: Dict[str, Any] = {
        "region_name": settings.aws_region,
        "config": Config(max_pool_connections=settings.s3_max_pool_connections),
    }

    aws_profile = os.environ.get("AWS_PROFILE")
    if aws_profile and settings.deployment_mode == "aws-prod":
        logger.info(f"Creating S3 client using profile: {aws_profile}")
        session = boto3.Session(profile_name=aws_profile)
        return session.client("s3", **client_kwargs)

    if settings.aws_access_key_id:
        client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
    if settings.aws_secret_access_key:
        client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
    if settings.aws_endpoint_url:
        client_kwargs["endpoint_url"] = settings.aws_endpoint_url

    logger.info(
        f"Creating S3 client (mode={settings.deployment_mode}, region={settings.aws_region}, "
        f"endpoint={settings.aws_endpoint_url})"
    )
    return boto3.client("s3", **client_kwargs)
