import io

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from files_gateway.errors import NotFound, StorageDenied, StorageUnavailable
from files_gateway.s3.errors import client_error_to_gateway_error, translate_s3_errors
from files_gateway.s3.read_objects import fetch_s3_object_head, fetch_s3_objects_metadata
from files_gateway.s3.write_objects import upload_s3_object
from tests.consts import TEST_BUCKET_NAME


def _client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def test_upload_s3_object_sets_content_type_and_metadata(mocked_aws):
    upload_s3_object(
        bucket_name=TEST_BUCKET_NAME,
        object_key="notes/a.txt",
        file_content=io.BytesIO(b"notes"),
        s3_client=mocked_aws,
        metadata={"title": "Notes"},
    )

    head = fetch_s3_object_head(TEST_BUCKET_NAME, "notes/a.txt", mocked_aws)
    assert head["ContentLength"] == 5
    assert head["ContentType"] == "application/octet-stream"
    assert head["Metadata"] == {"title": "Notes"}


def test_fetch_s3_objects_metadata_follows_pagination(mocked_aws):
    for i in range(1005):
        mocked_aws.put_object(Bucket=TEST_BUCKET_NAME, Key=f"many/{i:04d}.txt", Body=b"x")

    objects = list(fetch_s3_objects_metadata(TEST_BUCKET_NAME, mocked_aws, prefix="many/"))

    assert len(objects) == 1005
    assert objects[0] == {"path": "many/0000.txt", "size": 1}


def test_s3_store_get_missing_key(s3_store):
    with pytest.raises(NotFound):
        s3_store.get(TEST_BUCKET_NAME, "nope.txt")


def test_s3_store_missing_bucket(s3_store):
    with pytest.raises(StorageUnavailable):
        list(s3_store.list("bucket-that-does-not-exist"))


@pytest.mark.parametrize(
    "code, object_key, expected",
    [
        ("NoSuchKey", "a.txt", NotFound),
        ("404", "a.txt", NotFound),
        ("AccessDenied", "a.txt", StorageDenied),
        ("InvalidAccessKeyId", None, StorageDenied),
        ("SignatureDoesNotMatch", None, StorageDenied),
        ("NoSuchBucket", None, StorageUnavailable),
        ("InternalError", "a.txt", StorageUnavailable),
        # a 404 without an object key means the bucket itself is missing
        ("404", None, StorageUnavailable),
    ],
)
def test_client_error_mapping(code, object_key, expected):
    error = client_error_to_gateway_error(_client_error(code), TEST_BUCKET_NAME, object_key)

    assert type(error) is expected
    assert error.details["code"] == code


def test_translate_s3_errors_chains_cause():
    cause = EndpointConnectionError(endpoint_url="http://storage.invalid")

    with pytest.raises(StorageUnavailable) as exc_info:
        with translate_s3_errors("get_object", TEST_BUCKET_NAME, "a.txt"):
            raise cause

    assert exc_info.value.__cause__ is cause
