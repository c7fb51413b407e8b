"""App and service fixtures for tests."""
import pytest
from fastapi.testclient import TestClient

from files_gateway.config.settings import Settings
from files_gateway.main import create_app
from files_gateway.services.gateway import GatewayService
from tests.consts import TEST_BUCKET_NAME, TEST_PUBLIC_BASE_URL


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        deployment_mode="aws-prod",
        s3_bucket_name=TEST_BUCKET_NAME,
        public_base_url=TEST_PUBLIC_BASE_URL,
        storage_dir=str(tmp_path / "storage"),
        upload_spool_max_bytes=16 * 1024,
    )


@pytest.fixture
def gateway(object_store) -> GatewayService:
    return GatewayService(object_store, TEST_PUBLIC_BASE_URL)


@pytest.fixture
def client(test_settings, s3_store) -> TestClient:
    """Test client serving from the moto-backed S3 store."""
    app = create_app(settings=test_settings, object_store=s3_store)
    with TestClient(app) as client:
        yield client
