from clone_api.adapters.status_store import SQLiteStatusStore
from clone_api.rate_limit import FixedWindowRateLimiter
from tests.fixtures.fakes import FakeClock, InMemoryStatusStore


def test_bucket_key_uses_window_index():
    limiter = FixedWindowRateLimiter(InMemoryStatusStore(), window_ms=60_000, clock=FakeClock(125_000))

    assert limiter.bucket_key("alice") == "rl:alice:2"
    assert limiter.bucket_key("alice", at_ms=59_999) == "rl:alice:0"


def test_ttl_is_window_seconds_plus_grace():
    assert FixedWindowRateLimiter(InMemoryStatusStore(), window_ms=60_000).ttl_seconds == 65
    assert FixedWindowRateLimiter(InMemoryStatusStore(), window_ms=1_500).ttl_seconds == 7


async def test_allows_up_to_max_count_then_denies():
    store = InMemoryStatusStore()
    limiter = FixedWindowRateLimiter(store, max_count=3, window_ms=60_000, clock=FakeClock())

    results = [await limiter.allow("bob") for _ in range(5)]

    assert results == [True, True, True, False, False]
    assert store.values["rl:bob:0"] == "3"
    assert store.ttls["rl:bob:0"] == 65


async def test_window_rollover_resets_count():
    clock = FakeClock(start_ms=59_000)
    limiter = FixedWindowRateLimiter(InMemoryStatusStore(), max_count=1, window_ms=60_000, clock=clock)

    assert await limiter.allow("carol") is True
    assert await limiter.allow("carol") is False

    clock.advance(1_000)
    assert await limiter.allow("carol") is True


async def test_users_have_independent_buckets():
    limiter = FixedWindowRateLimiter(InMemoryStatusStore(), max_count=1, clock=FakeClock())

    assert await limiter.allow("dave") is True
    assert await limiter.allow("erin") is True
    assert await limiter.allow("dave") is False


async def test_limits_on_sqlite_store(tmp_path):
    store = SQLiteStatusStore(str(tmp_path / "status.db"))
    limiter = FixedWindowRateLimiter(store, max_count=2, clock=FakeClock())

    assert [await limiter.allow("frank") for _ in range(3)] == [True, True, False]
    assert await store.get("rl:frank:0") == "2"
