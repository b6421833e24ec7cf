"""
Key-value status store for job status records and rate-limit counters.

Values are opaque strings; callers serialize JSON themselves. Entries written
with a TTL are invisible to `get` once expired, even if the backing store has
not physically removed them yet.
"""
import logging
import sqlite3
import time
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from clone_api.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class BaseStatusStore:
    """Base class for status stores (to be extended by specific implementations)"""

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        raise NotImplementedError

    async def incr_if_below(self, key: str, maximum: int, ttl_seconds: int) -> bool:
        """
        Increment the integer counter at `key` unless it already reached `maximum`.

        Returns True when the increment happened. This default is a plain
        read-then-write: two concurrent callers can both read the same count
        and both increment, overshooting `maximum` for that window. Stores
        with an atomic conditional update override it.
        """
        raw = await self.get(key)
        count = int(raw) if raw else 0
        if count >= maximum:
            return False
        await self.put(key, str(count + 1), ttl_seconds=ttl_seconds)
        return True

    def ensure_schema(self) -> None:
        """Create whatever backing table the store needs. No-op by default."""


class SQLiteStatusStore(BaseStatusStore):
    """Status store backed by a local SQLite file, used in local-dev mode."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.ensure_schema()
        logger.info("SQLiteStatusStore initialized at: %s", self.db_path)

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def ensure_schema(self) -> None:
        conn = self._get_connection()
        try:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS kv_entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at REAL
                )
            ''')
            conn.commit()
        finally:
            conn.close()

    async def get(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT value, expires_at FROM kv_entries WHERE key = ?", (key,)
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        value, expires_at = row
        if expires_at is not None and expires_at <= time.time():
            return None
        return value

    async def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        expires_at = time.time() + ttl_seconds if ttl_seconds is not None else None
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO kv_entries (key, value, expires_at) VALUES (?, ?, ?)",
                (key, value, expires_at),
            )
            conn.commit()
        finally:
            conn.close()

    def purge_expired(self) -> int:
        """Physically delete expired rows; returns how many were removed."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "DELETE FROM kv_entries WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (time.time(),),
            )
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()


class DynamoDBStatusStore(BaseStatusStore):
    """
    Status store backed by a DynamoDB table keyed on `key`.

    String values live in `value`; rate-limit counters live in the numeric
    `hits` attribute so they can be bumped atomically. `expires_at` holds the
    epoch-seconds deadline and doubles as the table's TTL attribute.
    """

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.table_name = settings.dynamodb_table_name
        self.dynamodb = boto3.resource("dynamodb", **settings.boto3_client_kwargs())
        self.table = self.dynamodb.Table(self.table_name)

        logger.info(f"DynamoDBStatusStore initialized")
        logger.info(f"  Endpoint: {settings.aws_endpoint_url}")
        logger.info(f"  Table: {self.table_name}")

    def ensure_schema(self) -> None:
        client = self.dynamodb.meta.client
        try:
            client.describe_table(TableName=self.table_name)
            return
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
                raise

        logger.info(f"Creating DynamoDB table {self.table_name}")
        client.create_table(
            TableName=self.table_name,
            KeySchema=[{"AttributeName": "key", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "key", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        client.get_waiter("table_exists").wait(TableName=self.table_name)
        client.update_time_to_live(
            TableName=self.table_name,
            TimeToLiveSpecification={"Enabled": True, "AttributeName": "expires_at"},
        )

    async def get(self, key: str) -> Optional[str]:
        item = self.table.get_item(Key={"key": key}).get("Item")
        if not item:
            return None
        expires_at = item.get("expires_at")
        if expires_at is not None and int(expires_at) <= int(time.time()):
            return None
        if "value" in item:
            return item["value"]
        if "hits" in item:
            return str(int(item["hits"]))
        return None

    async def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        item = {"key": key, "value": value}
        if ttl_seconds is not None:
            item["expires_at"] = int(time.time()) + ttl_seconds
        self.table.put_item(Item=item)

    async def incr_if_below(self, key: str, maximum: int, ttl_seconds: int) -> bool:
        """Atomic conditional increment; concurrent callers cannot overshoot `maximum`."""
        try:
            self.table.update_item(
                Key={"key": key},
                UpdateExpression="ADD #hits :one SET #expires = if_not_exists(#expires, :expires)",
                ConditionExpression="attribute_not_exists(#hits) OR #hits < :max",
                ExpressionAttributeNames={"#hits": "hits", "#expires": "expires_at"},
                ExpressionAttributeValues={
                    ":one": 1,
                    ":max": maximum,
                    ":expires": int(time.time()) + ttl_seconds,
                },
            )
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return False
            raise


class StatusStoreFactory:
    """Factory to initialize the correct status store based on deployment mode"""

    @staticmethod
    def get_status_store(settings: Optional[Settings] = None) -> BaseStatusStore:
        settings = settings or get_settings()

        deployment_mode = settings.deployment_mode
        if deployment_mode == "local-dev":
            return SQLiteStatusStore(str(Path(settings.storage_dir) / "status.db"))
        if deployment_mode in ("aws-mock", "aws-prod"):
            return DynamoDBStatusStore(settings)
        raise ValueError(
            f"Invalid deployment_mode: {deployment_mode}. "
            f"Choose from ['local-dev', 'aws-mock', 'aws-prod']"
        )
