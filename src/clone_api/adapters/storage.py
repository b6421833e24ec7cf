"""
Blob storage for uploaded audio clips.

Local mode writes under `<storage_dir>/blobs`, with the content type kept in a
JSON sidecar; the AWS modes write objects to S3.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import boto3
from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

from clone_api.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class StoredBlob:
    key: str
    content: bytes
    content_type: str


class BaseBlobStore:
    """Base class for blob stores (to be extended by specific implementations)"""

    async def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> None:
        raise NotImplementedError

    async def get(self, key: str) -> Optional[StoredBlob]:
        raise NotImplementedError

    def ensure_bucket(self) -> None:
        """Create the backing container if needed. No-op by default."""


class LocalBlobStore(BaseBlobStore):
    """Handles blob storage on the local file system"""

    def __init__(self, root_dir: str):
        self.root = Path(root_dir)
        self.ensure_bucket()
        logger.info("LocalBlobStore initialized at: %s", self.root)

    def ensure_bucket(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise ValueError(f"Blob key escapes storage root: {key}")
        return path

    async def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        meta_path = path.with_name(path.name + ".meta.json")
        meta_path.write_text(json.dumps({"content_type": content_type or DEFAULT_CONTENT_TYPE}))
        logger.info("Stored blob %s (%d bytes)", key, len(content))

    async def get(self, key: str) -> Optional[StoredBlob]:
        path = self._path_for(key)
        if not path.is_file():
            return None
        meta_path = path.with_name(path.name + ".meta.json")
        content_type = DEFAULT_CONTENT_TYPE
        if meta_path.exists():
            content_type = json.loads(meta_path.read_text()).get("content_type", DEFAULT_CONTENT_TYPE)
        return StoredBlob(key=key, content=path.read_bytes(), content_type=content_type)


class S3BlobStore(BaseBlobStore):
    """Handles blob storage in an AWS S3 bucket"""

    def __init__(self, settings: Optional[Settings] = None, s3_client: Optional["S3Client"] = None):
        settings = settings or get_settings()
        self.bucket_name = settings.s3_bucket_name
        self.region = settings.aws_region
        self.s3 = s3_client or boto3.client("s3", **settings.boto3_client_kwargs())

        logger.info(f"S3BlobStore initialized")
        logger.info(f"  Endpoint: {settings.aws_endpoint_url}")
        logger.info(f"  Bucket: {self.bucket_name}")

    def ensure_bucket(self) -> None:
        try:
            self.s3.head_bucket(Bucket=self.bucket_name)
            return
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in ("404", "NoSuchBucket"):
                raise

        logger.info(f"Creating S3 bucket {self.bucket_name}")
        if self.region == "us-east-1":
            self.s3.create_bucket(Bucket=self.bucket_name)
        else:
            self.s3.create_bucket(
                Bucket=self.bucket_name,
                CreateBucketConfiguration={"LocationConstraint": self.region},
            )

    async def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> None:
        self.s3.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=content,
            ContentType=content_type or DEFAULT_CONTENT_TYPE,
        )
        logger.info(f"Uploaded {len(content)} bytes to s3://{self.bucket_name}/{key}")

    async def get(self, key: str) -> Optional[StoredBlob]:
        try:
            response = self.s3.get_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        return StoredBlob(
            key=key,
            content=response["Body"].read(),
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
        )


class BlobStoreFactory:
    """Factory to initialize the correct blob store based on deployment mode"""

    @staticmethod
    def get_blob_store(settings: Optional[Settings] = None) -> BaseBlobStore:
        settings = settings or get_settings()

        deployment_mode = settings.deployment_mode
        if deployment_mode == "local-dev":
            return LocalBlobStore(str(Path(settings.storage_dir) / "blobs"))
        if deployment_mode in ("aws-mock", "aws-prod"):
            return S3BlobStore(settings)
        raise ValueError(
            f"Invalid deployment_mode: {deployment_mode}. "
            f"Choose from ['local-dev', 'aws-mock', 'aws-prod']"
        )
