"""
Today's sentiment with an explicit fallback chain: live, then cached, then demo.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from txpulse.config import PulseConfig, Settings, default_config
from txpulse.core.history import HistoryGenerator
from txpulse.core.snapshot import SnapshotBuilder
from txpulse.core.tagger import Tagger, tag_posts
from txpulse.schemas import DailySnapshot, HistoryPoint
from txpulse.services.cache import MemorySnapshotCache, SnapshotCache
from txpulse.sources.collector import CollectionError, Collector, build_collector
from txpulse.utils import now_utc

logger = logging.getLogger(__name__)

SnapshotSupplier = Callable[[], Awaitable[Optional[DailySnapshot]]]


async def first_available(suppliers: Sequence[Tuple[str, SnapshotSupplier]]) -> Optional[DailySnapshot]:
    """
    Try each supplier in order and return the first snapshot produced.

    A supplier that returns None or raises is logged and skipped.

    Args:
        suppliers: (name, supplier) pairs in priority order

    Returns:
        First non-empty snapshot, or None if every supplier came up empty
    """
    for name, supplier in suppliers:
        try:
            snapshot = await supplier()
        except Exception:
            logger.exception("Snapshot supplier %r failed", name)
            continue
        if snapshot is not None:
            logger.info("Serving %s snapshot for %s", name, snapshot.date)
            return snapshot
        logger.info("Snapshot supplier %r produced nothing", name)
    return None


class PulseService:
    """Builds and serves the daily snapshot and the history series."""

    def __init__(
        self,
        collector: Optional[Collector],
        tagger: Tagger,
        builder: SnapshotBuilder,
        history: HistoryGenerator,
        cache: Optional[SnapshotCache] = None,
        *,
        use_demo: bool = False,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.collector = collector
        self.tagger = tagger
        self.builder = builder
        self.history_generator = history
        self.cache = cache if cache is not None else MemorySnapshotCache(clock)
        self.use_demo = use_demo
        self._clock = clock
        self._prior_day: Optional[DailySnapshot] = None

    @classmethod
    def from_settings(cls, settings: Settings, config: Optional[PulseConfig] = None) -> "PulseService":
        config = config or default_config(settings.sentiment_formula)
        return cls(
            collector=None if settings.USE_DEMO else build_collector(settings),
            tagger=Tagger(config),
            builder=SnapshotBuilder(config, weighting=settings.score_weighting),
            history=HistoryGenerator(config),
            use_demo=settings.USE_DEMO,
        )

    def _today(self) -> date:
        return self._clock().date()

    def _previous_for(self, today: date) -> Optional[DailySnapshot]:
        cached = self.cache.load()
        if cached is not None and cached.date < today:
            return cached
        return self._prior_day

    def _remember(self, snapshot: DailySnapshot) -> None:
        cached = self.cache.load()
        if cached is not None and cached.date < snapshot.date:
            self._prior_day = cached
        self.cache.save(snapshot)

    async def live_snapshot(self) -> Optional[DailySnapshot]:
        if self.collector is None:
            return None
        today = self._today()
        try:
            raw_posts = await self.collector.fetch_raw_posts()
        except CollectionError as e:
            logger.warning("Collection from %s failed: %s", self.collector.name, e)
            return None

        tagged = tag_posts(self.tagger, raw_posts, source_platform=self.collector.name)
        snapshot = self.builder.build(tagged, self._previous_for(today), as_of=today, source="live")
        if not snapshot.topics:
            logger.warning("Live collection matched no topics (%d posts)", len(raw_posts))
            return None

        self._remember(snapshot)
        return snapshot

    async def cached_snapshot(self) -> Optional[DailySnapshot]:
        cached = self.cache.load()
        if cached is None:
            return None
        return cached.model_copy(update={"source": "cached", "stale": True})

    async def demo_snapshot(self) -> DailySnapshot:
        return self.history_generator.demo_snapshot(self._today())

    def suppliers(self) -> List[Tuple[str, SnapshotSupplier]]:
        chain: List[Tuple[str, SnapshotSupplier]] = []
        if not self.use_demo:
            chain.append(("live", self.live_snapshot))
            chain.append(("cached", self.cached_snapshot))
        chain.append(("demo", self.demo_snapshot))
        return chain

    async def today(self) -> DailySnapshot:
        """
        Today's snapshot. Degrades to cached or demo data instead of failing.

        Returns:
            DailySnapshot whose `source` tells where it came from
        """
        snapshot = await first_available(self.suppliers())
        if snapshot is None:
            return await self.demo_snapshot()
        return snapshot

    def history(self, days: int) -> List[HistoryPoint]:
        return self.history_generator.history(days, self._today())
