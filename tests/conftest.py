import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from clone_api.config.settings import Settings
from clone_api.main import create_app
from tests.consts import (
    TEST_BUCKET_NAME,
    TEST_PUBLIC_BASE,
    TEST_QUEUE_NAME,
    TEST_REGION,
    TEST_TABLE_NAME,
)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """local-dev settings rooted in a per-test temporary directory."""
    return Settings(
        _env_file=None,
        deployment_mode="local-dev",
        storage_dir=str(tmp_path / "storage"),
        BOT_PUBLIC_BASE=TEST_PUBLIC_BASE,
        PUBLIC_ORIGINS=None,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials so no test can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)
    monkeypatch.delenv("SQS_QUEUE_URL", raising=False)


@pytest.fixture
def mocked_aws(aws_credentials):
    with mock_aws():
        yield


@pytest.fixture
def aws_settings(mocked_aws, tmp_path) -> Settings:
    """aws-prod settings pointing at moto-backed S3, SQS and DynamoDB."""
    return Settings(
        _env_file=None,
        deployment_mode="aws-prod",
        AWS_DEFAULT_REGION=TEST_REGION,
        s3_bucket_name=TEST_BUCKET_NAME,
        sqs_queue_name=TEST_QUEUE_NAME,
        dynamodb_table_name=TEST_TABLE_NAME,
        storage_dir=str(tmp_path / "storage"),
        BOT_PUBLIC_BASE=TEST_PUBLIC_BASE,
        PUBLIC_ORIGINS=None,
    )
