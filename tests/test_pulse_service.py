from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from txpulse.core.history import HistoryGenerator
from txpulse.core.snapshot import SnapshotBuilder
from txpulse.core.tagger import Tagger
from txpulse.schemas import published_payload
from txpulse.services.cache import MemorySnapshotCache
from txpulse.services.pulse import PulseService, first_available
from txpulse.sources.collector import CollectionError

from conftest import raw_post


class FakeCollector:
    name = "fake"

    def __init__(self, batches):
        self.batches = list(batches)
        self.calls = 0

    async def fetch_raw_posts(self):
        self.calls += 1
        batch = self.batches.pop(0)
        if isinstance(batch, Exception):
            raise batch
        return batch


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


GOOD_POSTS = [
    raw_post("ERCOT grid crisis in Houston", post_id="a", engagement=4),
    raw_post("Great new school funding support in Austin", post_id="b", engagement=2),
]


def make_service(config, collector, clock, use_demo=False):
    return PulseService(
        collector,
        Tagger(config),
        SnapshotBuilder(config, weighting="engagement"),
        HistoryGenerator(config),
        MemorySnapshotCache(clock),
        use_demo=use_demo,
        clock=clock,
    )


@pytest.fixture
def clock():
    return Clock(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))


@pytest.mark.asyncio
async def test_live_snapshot_is_served_and_cached(config, clock) -> None:
    service = make_service(config, FakeCollector([GOOD_POSTS]), clock)
    snapshot = await service.today()

    assert snapshot.source == "live"
    assert snapshot.total_volume == 2
    assert snapshot.stale is None
    assert {t.name for t in snapshot.topics} == {"energy & grid", "education"}
    assert service.cache.load().cached_at == clock.now.isoformat()


@pytest.mark.asyncio
async def test_failed_collection_without_cache_serves_demo(config, clock) -> None:
    service = make_service(config, FakeCollector([CollectionError("rate limited")]), clock)
    snapshot = await service.today()
    assert snapshot.source == "demo"
    assert snapshot.date == clock.now.date()


@pytest.mark.asyncio
async def test_empty_collection_is_treated_like_failure(config, clock) -> None:
    service = make_service(config, FakeCollector([[]]), clock)
    assert (await service.today()).source == "demo"


@pytest.mark.asyncio
async def test_posts_without_topics_fall_through(config, clock) -> None:
    service = make_service(config, FakeCollector([[raw_post("nothing relevant here")]]), clock)
    assert (await service.today()).source == "demo"


@pytest.mark.asyncio
async def test_failure_after_success_serves_stale_cache(config, clock) -> None:
    service = make_service(config, FakeCollector([GOOD_POSTS, CollectionError("timeout")]), clock)
    live = await service.today()
    cached = await service.today()

    assert cached.source == "cached"
    assert cached.stale is True
    assert cached.cached_at == clock.now.isoformat()
    assert cached.topics == live.topics

    payload = published_payload(cached)
    assert payload["stale"] is True
    assert payload["cachedAt"] == clock.now.isoformat()


@pytest.mark.asyncio
async def test_demo_mode_skips_collection(config, clock) -> None:
    collector = FakeCollector([GOOD_POSTS])
    service = make_service(config, collector, clock, use_demo=True)
    assert (await service.today()).source == "demo"
    assert collector.calls == 0


@pytest.mark.asyncio
async def test_score_delta_uses_previous_day(config, clock) -> None:
    day_two_posts = [raw_post("ERCOT grid failed again", post_id="c", engagement=1)]
    service = make_service(config, FakeCollector([GOOD_POSTS, day_two_posts]), clock)

    first = await service.today()
    clock.now = clock.now + timedelta(days=1)
    second = await service.today()

    assert second.date == first.date + timedelta(days=1)
    assert second.overall_score == -1.0
    assert second.score_delta == round(second.overall_score - first.overall_score, 2)


@pytest.mark.asyncio
async def test_first_available_skips_raising_suppliers() -> None:
    async def broken():
        raise RuntimeError("boom")

    async def empty():
        return None

    snapshot = SimpleNamespace(date="2026-10-19")

    async def fallback():
        return snapshot

    result = await first_available([("broken", broken), ("empty", empty), ("fallback", fallback)])
    assert result is snapshot
    assert await first_available([("empty", empty)]) is None


def test_history_uses_service_clock(config, clock) -> None:
    service = make_service(config, None, clock)
    points = service.history(5)
    assert len(points) == 5
    assert points[-1].date == clock.now.date()
