import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

from clone_api.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class BaseQueue:
    """Base class for job queues (to be extended by specific implementations)"""

    async def send(self, job: Dict[str, Any]) -> None:
        """Hand a job message to the downstream worker. Nothing is returned to the caller."""
        raise NotImplementedError

    async def receive(self) -> Optional[Dict[str, Any]]:
        """Pop the next job message, or None when the queue is empty."""
        raise NotImplementedError

    def ensure_queue(self) -> None:
        """Create the backing queue if needed. No-op by default."""


class LocalQueue(BaseQueue):
    """Handles local queue using file system for IPC"""

    def __init__(self, queue_dir: str):
        self.queue_dir = Path(queue_dir)
        self.ensure_queue()
        self._sequence = 0
        logger.info("LocalQueue initialized at: %s", self.queue_dir)

    def ensure_queue(self) -> None:
        self.queue_dir.mkdir(parents=True, exist_ok=True)

    async def send(self, job: Dict[str, Any]) -> None:
        # Millisecond timestamp plus pid and a per-process sequence keeps names unique and ordered.
        self._sequence += 1
        filename = f"{int(time.time() * 1000):013d}_{os.getpid()}_{self._sequence:06d}.json"
        filepath = self.queue_dir / filename
        tmp_path = filepath.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(job))
        tmp_path.rename(filepath)
        logger.info("Added job to queue: %s", job.get("jobId"))

    async def receive(self) -> Optional[Dict[str, Any]]:
        files = sorted(self.queue_dir.glob("*.json"))
        if not files:
            return None

        task_file = files[0]
        try:
            job = json.loads(task_file.read_text())
        except json.JSONDecodeError as e:
            logger.error("Error reading task file %s: %s", task_file, str(e))
            error_dir = self.queue_dir / "errors"
            error_dir.mkdir(exist_ok=True)
            task_file.rename(error_dir / task_file.name)
            return None

        task_file.unlink()
        logger.info("Retrieved job from queue: %s", job.get("jobId"))
        return job


class SQSQueue(BaseQueue):
    """Handles AWS SQS queue"""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()

        self.sqs = boto3.client("sqs", **settings.boto3_client_kwargs())
        self.queue_name = settings.sqs_queue_name
        self._queue_url = settings.sqs_queue_url

        logger.info(f"SQSQueue initialized")
        logger.info(f"  Endpoint: {settings.aws_endpoint_url}")
        logger.info(f"  Queue: {self._queue_url or self.queue_name}")
        logger.info(f"  Region: {settings.aws_region}")

    @property
    def queue_url(self) -> str:
        if self._queue_url is None:
            self._queue_url = self.sqs.get_queue_url(QueueName=self.queue_name)["QueueUrl"]
        return self._queue_url

    def ensure_queue(self) -> None:
        try:
            self.sqs.get_queue_url(QueueName=self.queue_name)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in (
                "AWS.SimpleQueueService.NonExistentQueue",
                "QueueDoesNotExist",
            ):
                raise
            logger.info(f"Creating SQS queue {self.queue_name}")
            self._queue_url = self.sqs.create_queue(QueueName=self.queue_name)["QueueUrl"]

    async def send(self, job: Dict[str, Any]) -> None:
        response = self.sqs.send_message(
            QueueUrl=self.queue_url,
            MessageBody=json.dumps(job),
        )
        logger.info(f"Job {job.get('jobId')} added to SQS queue with ID: {response.get('MessageId')}")

    async def receive(self) -> Optional[Dict[str, Any]]:
        messages = self.sqs.receive_message(
            QueueUrl=self.queue_url,
            MaxNumberOfMessages=1,
            WaitTimeSeconds=1,
        )
        if "Messages" not in messages:
            return None

        message = messages["Messages"][0]
        self.sqs.delete_message(
            QueueUrl=self.queue_url,
            ReceiptHandle=message["ReceiptHandle"],
        )
        job = json.loads(message["Body"])
        logger.info(f"Retrieved job from SQS queue: {job.get('jobId')}")
        return job


class QueueFactory:
    """Factory to initialize the correct queue handler based on deployment mode"""

    @staticmethod
    def get_queue_handler(settings: Optional[Settings] = None) -> BaseQueue:
        settings = settings or get_settings()

        deployment_mode = settings.deployment_mode
        if deployment_mode == "local-dev":
            return LocalQueue(str(Path(settings.storage_dir) / "queue_data"))
        if deployment_mode in ("aws-mock", "aws-prod"):
            return SQSQueue(settings)
        raise ValueError(
            f"Invalid deployment_mode: {deployment_mode}. "
            f"Choose from ['local-dev', 'aws-mock', 'aws-prod']"
        )
