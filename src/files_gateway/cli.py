# cli.py
import logging
import os

import click

from files_gateway.adapters.object_store import create_object_store
from files_gateway.config.settings import VALID_DEPLOYMENT_MODES, Settings, get_settings
from files_gateway.errors import GatewayError

# Configure logging
logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _load_settings(mode=None) -> Settings:
    if mode:
        os.environ["DEPLOYMENT_MODE"] = mode
        # Clear settings cache to pick up new mode
        get_settings.cache_clear()
    settings = get_settings()
    configure_logging(settings)
    return settings


@click.group()
def cli():
    """CLI commands for the Files Gateway"""
    pass


@cli.command()
@click.option("--mode", type=click.Choice(VALID_DEPLOYMENT_MODES), default=None,
              help="Deployment mode (defaults to DEPLOYMENT_MODE)")
def show_config(mode):
    """Show current configuration"""
    settings = _load_settings(mode)

    print("Current Configuration:")
    print(f"  Deployment Mode: {settings.deployment_mode}")
    print(f"  AWS Region: {settings.aws_region}")
    print(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    print(f"  S3 Bucket: {settings.s3_bucket_name}")
    print(f"  Storage Dir: {settings.storage_dir}")
    print(f"  Public Base URL: {settings.public_base_url}")
    print(f"  Stream Chunk Size: {settings.stream_chunk_size}")
    print(f"  Upload Spool Max Bytes: {settings.upload_spool_max_bytes}")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", default=8000, type=int, help="Port to bind")
@click.option("--mode", type=click.Choice(VALID_DEPLOYMENT_MODES), default=None,
              help="Deployment mode (defaults to DEPLOYMENT_MODE)")
def serve(host, port, mode):
    """Run the gateway with uvicorn"""
    import uvicorn
    from files_gateway.main import create_app

    settings = _load_settings(mode)
    print(f"Starting Files Gateway in {settings.deployment_mode} mode on {host}:{port}...")
    uvicorn.run(create_app(settings), host=host, port=port)


@cli.command()
@click.option("--mode", type=click.Choice(VALID_DEPLOYMENT_MODES), default=None,
              help="Deployment mode (defaults to DEPLOYMENT_MODE)")
def ensure_bucket(mode):
    """Create the configured bucket for local development"""
    settings = _load_settings(mode)
    if settings.deployment_mode == "aws-prod":
        raise click.ClickException("Refusing to create buckets in aws-prod mode")

    store = create_object_store(settings)
    try:
        try:
            store.ping(settings.s3_bucket_name)
            print(f"✅ Bucket '{settings.s3_bucket_name}' already exists")
            return
        except GatewayError:
            logger.info(f"Bucket '{settings.s3_bucket_name}' not reachable, creating it")

        try:
            store.create_bucket(settings.s3_bucket_name)
        except GatewayError as e:
            raise click.ClickException(f"Failed to create bucket: {e.message}") from e
        print(f"✅ Created bucket '{settings.s3_bucket_name}'")
    finally:
        store.close()


if __name__ == "__main__":
    cli()
