"""
Synthetic history series and demo snapshot.

Both are generated from the seeded functions in txpulse.core.seeded and are
keyed only by calendar date, so any two calls that cover the same day agree
on that day's numbers, and the demo snapshot matches the newest history point.
"""
from __future__ import annotations

import datetime as dt
import math
from typing import Dict, List, Optional, Sequence, Tuple

from txpulse.config import SAMPLE_MENTIONS, PulseConfig
from txpulse.core.seeded import day_key, gen_sentiment, gen_volume, seed, seeded_random
from txpulse.schemas import (
    CategorySummary,
    DailySnapshot,
    HistoryPoint,
    HistoryTopic,
    Mention,
    Mover,
    RegionStat,
    TopicSummary,
)
from txpulse.utils import round2

MIN_ACTIVE_TOPICS = 6
ACTIVE_TOPIC_SPREAD = 5  # 6..10 active topics per day
MAX_MOVERS = 5
DEMO_SOURCE = "demo"

# (name, sentiment, volume)
TopicPoint = Tuple[str, float, int]


def active_topics(topic_names: Sequence[str], key: int) -> List[str]:
    """
    Deterministic subset of topics considered active on a given day.

    Args:
        topic_names: Every monitored topic
        key: Day key from day_key()

    Returns:
        Active topic names, in the day's shuffled order
    """
    count = MIN_ACTIVE_TOPICS + math.floor(seeded_random(seed("active", key)) * ACTIVE_TOPIC_SPREAD)
    shuffled = sorted(topic_names, key=lambda name: seed(name, key))
    return shuffled[:count]


def day_topics(topic_names: Sequence[str], key: int) -> List[TopicPoint]:
    return [(name, gen_sentiment(name, key), gen_volume(name, key)) for name in active_topics(topic_names, key)]


def volume_weighted_score(points: Sequence[Tuple[float, int]]) -> float:
    total_weight = sum(volume for _, volume in points)
    if total_weight == 0:
        return 0.0
    return round2(sum(sentiment * volume for sentiment, volume in points) / total_weight)


class HistoryGenerator:
    """Generates pseudo-historical topic series and the demo snapshot."""

    def __init__(self, config: PulseConfig):
        self.config = config
        self.topic_names = config.topic_names
        self.region_ids = tuple(config.regions)

    def point(self, day: dt.date) -> HistoryPoint:
        key = day_key(day)
        return HistoryPoint(
            date=day,
            topics=[HistoryTopic(name=n, sentiment=s, volume=v) for n, s, v in day_topics(self.topic_names, key)],
        )

    def history(self, days: int, today: dt.date) -> List[HistoryPoint]:
        """
        Series of `days` consecutive points ending on `today`, oldest first.

        Args:
            days: Number of points; values below 1 yield an empty list
            today: Last day of the series

        Returns:
            List of HistoryPoint
        """
        return [self.point(today - dt.timedelta(days=offset)) for offset in reversed(range(max(days, 0)))]

    def _demo_topic(self, name: str, sentiment: float, volume: int, key: int) -> TopicSummary:
        by_region: Dict[str, RegionStat] = {}
        for region in self.region_ids:
            share = 0.08 + seeded_random(seed(name + region + "v", key)) * 0.25
            by_region[region] = RegionStat(
                sentiment=gen_sentiment(name + region, key),
                volume=math.floor(volume * share),
            )

        headlines = SAMPLE_MENTIONS.get(name) or (f"Trending discussion about {name} in Texas",)
        mentions = [
            Mention(
                text=text,
                sentiment=gen_sentiment(f"{name}mention{i}", key),
                source=DEMO_SOURCE,
                region=self.region_ids[math.floor(seeded_random(seed(f"{name}mr{i}", key)) * len(self.region_ids))],
            )
            for i, text in enumerate(headlines)
        ]
        return TopicSummary(name=name, sentiment=sentiment, volume=volume, by_region=by_region, top_mentions=mentions)

    def _demo_categories(self, topics: Sequence[TopicSummary], key: int) -> List[CategorySummary]:
        by_name = {t.name: t for t in topics}
        yesterday = {name: (s, v) for name, s, v in day_topics(self.topic_names, key - 1)}
        categories: List[CategorySummary] = []
        for category, keywords in self.config.categories.items():
            members = [name for name in self.topic_names if name in keywords]
            active = [by_name[name] for name in members if name in by_name]
            if not active:
                categories.append(CategorySummary(
                    name=category,
                    sentiment=gen_sentiment(category, key),
                    volume=gen_volume(category, key),
                    topics=members,
                ))
                continue
            sentiment = volume_weighted_score([(t.sentiment, t.volume) for t in active])
            previous = [yesterday[name] for name in members if name in yesterday]
            prior = volume_weighted_score(previous) if previous else gen_sentiment(category, key - 1)
            categories.append(CategorySummary(
                name=category,
                sentiment=sentiment,
                volume=sum(t.volume for t in active),
                delta=round2(sentiment - prior),
                topics=members,
            ))
        return categories

    def demo_snapshot(self, today: dt.date, regions: Optional[Dict[str, str]] = None) -> DailySnapshot:
        """
        Synthetic snapshot for `today`, used when neither live nor cached data exist.

        Args:
            today: Calendar date of the snapshot
            regions: Region label mapping; defaults to the configured labels

        Returns:
            DailySnapshot tagged with source "demo"
        """
        key = day_key(today)
        points = day_topics(self.topic_names, key)
        topics = sorted(
            (self._demo_topic(name, sentiment, volume, key) for name, sentiment, volume in points),
            key=lambda t: t.volume,
            reverse=True,
        )

        overall = volume_weighted_score([(t.sentiment, t.volume) for t in topics])
        yesterday = volume_weighted_score([(s, v) for _, s, v in day_topics(self.topic_names, key - 1)])

        deltas = [(t, round2(t.sentiment - gen_sentiment(t.name, key - 1))) for t in topics]
        ranked = sorted(deltas, key=lambda pair: abs(pair[1]), reverse=True)[:MAX_MOVERS]
        movers = [Mover(name=t.name, sentiment=t.sentiment, delta=d, volume=t.volume) for t, d in ranked]

        return DailySnapshot(
            date=today,
            source=DEMO_SOURCE,
            overall_score=overall,
            score_delta=round2(overall - yesterday),
            total_volume=sum(t.volume for t in topics),
            categories=self._demo_categories(topics, key),
            biggest_movers=movers,
            topics=topics,
            regions=dict(regions if regions is not None else self.config.region_labels),
        )
