import pytest
from click.testing import CliRunner

from files_gateway.cli import cli
from files_gateway.config.settings import get_settings


@pytest.fixture
def local_env(monkeypatch, tmp_path):
    # the CLI writes DEPLOYMENT_MODE itself; registering it here restores it afterwards
    monkeypatch.setenv("DEPLOYMENT_MODE", "local-dev")
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path / "storage"))
    monkeypatch.setenv("S3_BUCKET_NAME", "cli-bucket")
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


def test_show_config(local_env):
    result = CliRunner().invoke(cli, ["show-config", "--mode", "local-dev"])

    assert result.exit_code == 0
    assert "Deployment Mode: local-dev" in result.output
    assert "S3 Bucket: cli-bucket" in result.output


def test_ensure_bucket_creates_local_bucket(local_env):
    result = CliRunner().invoke(cli, ["ensure-bucket", "--mode", "local-dev"])

    assert result.exit_code == 0
    assert "Created bucket 'cli-bucket'" in result.output
    assert (local_env / "storage" / "cli-bucket").is_dir()

    result = CliRunner().invoke(cli, ["ensure-bucket", "--mode", "local-dev"])
    assert "already exists" in result.output


def test_ensure_bucket_refuses_prod(local_env):
    result = CliRunner().invoke(cli, ["ensure-bucket", "--mode", "aws-prod"])

    assert result.exit_code != 0
    assert "Refusing to create buckets" in result.output
