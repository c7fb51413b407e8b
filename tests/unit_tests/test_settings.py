import pytest
from pydantic import ValidationError

from files_gateway.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "DEPLOYMENT_MODE",
        "AWS_ENDPOINT_URL",
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "S3_BUCKET_NAME",
        "PUBLIC_BASE_URL",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings()

    assert settings.deployment_mode == "local-dev"
    assert settings.uses_s3 is False
    assert settings.aws_endpoint_url is None


def test_aws_mock_points_at_local_moto_server():
    settings = Settings(deployment_mode="aws-mock")

    assert settings.uses_s3 is True
    assert settings.aws_endpoint_url == "http://localhost:5000"
    assert settings.aws_access_key_id == "mock"
    assert settings.aws_secret_access_key == "mock"


def test_aws_mock_keeps_explicit_endpoint(monkeypatch):
    monkeypatch.setenv("AWS_ENDPOINT_URL", "http://minio:9000")

    assert Settings(deployment_mode="aws-mock").aws_endpoint_url == "http://minio:9000"


def test_legacy_mode_names_are_mapped():
    assert Settings(deployment_mode="cloud").deployment_mode == "aws-prod"
    assert Settings(deployment_mode="local-mock").deployment_mode == "local-dev"


def test_invalid_mode_is_rejected():
    with pytest.raises(ValidationError):
        Settings(deployment_mode="on-prem")


def test_empty_bucket_is_rejected(monkeypatch):
    monkeypatch.setenv("S3_BUCKET_NAME", "  ")

    with pytest.raises(ValidationError):
        Settings()


def test_public_base_url_trailing_slash_is_stripped():
    assert Settings(public_base_url="https://files.example.com/").public_base_url == "https://files.example.com"
