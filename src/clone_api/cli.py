# cli.py
import logging

import click

from clone_api.adapters.queue import QueueFactory
from clone_api.adapters.status_store import StatusStoreFactory
from clone_api.adapters.storage import BlobStoreFactory
from clone_api.config.settings import get_settings

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for the Voice Clone API"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  Deployment Mode: {settings.deployment_mode}")
    click.echo(f"  AWS Region: {settings.aws_region}")
    click.echo(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    click.echo(f"  S3 Bucket: {settings.s3_bucket_name}")
    click.echo(f"  SQS Queue Name: {settings.sqs_queue_name}")
    click.echo(f"  SQS Queue URL: {settings.sqs_queue_url}")
    click.echo(f"  DynamoDB Table: {settings.dynamodb_table_name}")
    click.echo(f"  Storage Dir: {settings.storage_dir}")
    click.echo(f"  Bot Public Base: {settings.bot_public_base}")
    click.echo(f"  CORS Allow-Origin: {settings.cors_allow_origin}")
    click.echo(f"  Rate Limit: {settings.rate_limit_max_count} jobs / {settings.rate_limit_window_ms} ms")


@cli.command()
def bootstrap():
    """Create the bucket, queue and status table for the configured mode"""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    BlobStoreFactory.get_blob_store(settings).ensure_bucket()
    QueueFactory.get_queue_handler(settings).ensure_queue()
    StatusStoreFactory.get_status_store(settings).ensure_schema()

    click.echo(f"Resources ready for {settings.deployment_mode} mode")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Reload on code changes (development only)")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Starting Voice Clone API on {host}:{port} ({settings.deployment_mode})")
    uvicorn.run("clone_api.main:create_app", factory=True, host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
