"""In-memory stand-ins for the adapters, for tests that need to observe or break them."""
from typing import Any, Dict, List, Optional

from clone_api.adapters.queue import BaseQueue
from clone_api.adapters.status_store import BaseStatusStore


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 0):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class InMemoryStatusStore(BaseStatusStore):
    def __init__(self):
        self.values: Dict[str, str] = {}
        self.ttls: Dict[str, Optional[int]] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self.values[key] = value
        self.ttls[key] = ttl_seconds


class RecordingQueue(BaseQueue):
    """Keeps every sent message, plus what the status store held for it at send time."""

    def __init__(self, status_store: Optional[BaseStatusStore] = None):
        self.status_store = status_store
        self.sent: List[Dict[str, Any]] = []
        self.records_at_send: List[Optional[str]] = []

    async def send(self, job: Dict[str, Any]) -> None:
        if self.status_store is not None:
            self.records_at_send.append(await self.status_store.get(job["jobId"]))
        self.sent.append(job)

    async def receive(self) -> Optional[Dict[str, Any]]:
        return self.sent.pop(0) if self.sent else None


class FailingQueue(BaseQueue):
    async def send(self, job: Dict[str, Any]) -> None:
        raise RuntimeError("queue unavailable")
