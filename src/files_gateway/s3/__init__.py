"""Thin boto3 helpers used by the S3 object store adapter."""
