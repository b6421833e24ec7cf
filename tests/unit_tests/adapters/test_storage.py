import boto3
import pytest

from clone_api.adapters.storage import BlobStoreFactory, LocalBlobStore, S3BlobStore
from tests.consts import TEST_AUDIO_CONTENT, TEST_AUDIO_CONTENT_TYPE, TEST_BUCKET_NAME, TEST_REGION

TEST_KEY = "u/0b8f3c4e-2a53-4f7e-9d57-3f6a1c2b9e10_clip.wav"


@pytest.fixture
def local_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(str(tmp_path / "blobs"))


@pytest.fixture
def s3_store(aws_settings) -> S3BlobStore:
    store = S3BlobStore(aws_settings)
    store.ensure_bucket()
    return store


async def test_local_put_and_get(local_store):
    assert await local_store.get(TEST_KEY) is None

    await local_store.put(TEST_KEY, TEST_AUDIO_CONTENT, content_type=TEST_AUDIO_CONTENT_TYPE)

    blob = await local_store.get(TEST_KEY)
    assert blob.key == TEST_KEY
    assert blob.content == TEST_AUDIO_CONTENT
    assert blob.content_type == TEST_AUDIO_CONTENT_TYPE


async def test_local_default_content_type(local_store):
    await local_store.put(TEST_KEY, b"raw")

    blob = await local_store.get(TEST_KEY)
    assert blob.content_type == "application/octet-stream"


async def test_local_rejects_keys_outside_root(local_store):
    with pytest.raises(ValueError):
        await local_store.put("../outside.wav", b"raw")


async def test_s3_put_and_get(s3_store):
    await s3_store.put(TEST_KEY, TEST_AUDIO_CONTENT, content_type=TEST_AUDIO_CONTENT_TYPE)

    s3_client = boto3.client("s3", region_name=TEST_REGION)
    head = s3_client.head_object(Bucket=TEST_BUCKET_NAME, Key=TEST_KEY)
    assert head["ContentType"] == TEST_AUDIO_CONTENT_TYPE

    blob = await s3_store.get(TEST_KEY)
    assert blob.content == TEST_AUDIO_CONTENT
    assert blob.content_type == TEST_AUDIO_CONTENT_TYPE


async def test_s3_missing_key(s3_store):
    assert await s3_store.get("u/missing_clip.wav") is None


def test_factory_picks_store_by_mode(settings, aws_settings):
    assert isinstance(BlobStoreFactory.get_blob_store(settings), LocalBlobStore)
    assert isinstance(BlobStoreFactory.get_blob_store(aws_settings), S3BlobStore)
