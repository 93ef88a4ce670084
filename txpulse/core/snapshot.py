"""
Daily snapshot assembly.

The builder holds no state between calls: today's snapshot is a function of
the tagged posts, the previous snapshot the caller kept, and the date.
"""
from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Sequence

from txpulse.config import PulseConfig, ScoreWeighting
from txpulse.core.aggregator import Aggregator
from txpulse.models import TaggedPost
from txpulse.schemas import CategorySummary, DailySnapshot, Mover
from txpulse.utils import round2

MAX_MOVERS = 5
GENERAL_TOPIC = "general"


def calculate_overall_score(posts: Sequence[TaggedPost], weighting: ScoreWeighting = "engagement") -> float:
    """
    Weighted average sentiment across all posts.

    Args:
        posts: Tagged posts
        weighting: "engagement" weighs by upvotes + comments, "uniform" by 1

    Returns:
        Score rounded to 2 decimals, 0.0 when the total weight is 0
    """
    if weighting == "uniform":
        weights = [1.0] * len(posts)
    else:
        weights = [p.engagement for p in posts]

    total_weight = sum(weights)
    if total_weight == 0:
        return 0.0
    weighted_sum = sum(p.sentiment * w for p, w in zip(posts, weights))
    return round2(weighted_sum / total_weight)


def _delta(today: float, previous: Optional[float]) -> float:
    return round2(today - previous) if previous is not None else 0.0


class SnapshotBuilder:
    """Combines aggregator output with totals and metadata into a DailySnapshot."""

    def __init__(self, config: PulseConfig, aggregator: Optional[Aggregator] = None,
                 weighting: ScoreWeighting = "engagement"):
        self.config = config
        self.aggregator = aggregator or Aggregator(config)
        self.weighting = weighting

    def biggest_movers(self, posts: Sequence[TaggedPost], previous: Optional[DailySnapshot]) -> List[Mover]:
        # sorted() is stable: equal engagement keeps collection order
        ranked = sorted(posts, key=lambda p: p.engagement, reverse=True)[:MAX_MOVERS]
        movers: List[Mover] = []
        for tagged in ranked:
            name = tagged.matched_topics[0] if tagged.matched_topics else GENERAL_TOPIC
            prior = previous.topic(name) if previous is not None else None
            movers.append(
                Mover(
                    name=name,
                    sentiment=tagged.sentiment,
                    delta=_delta(tagged.sentiment, prior.sentiment if prior else None),
                    volume=int(round(tagged.engagement)),
                )
            )
        return movers

    def _with_deltas(self, categories: Iterable[CategorySummary],
                     previous: Optional[DailySnapshot]) -> List[CategorySummary]:
        if previous is None:
            return list(categories)
        result = []
        for category in categories:
            prior = previous.category(category.name)
            result.append(category.model_copy(update={
                "delta": _delta(category.sentiment, prior.sentiment if prior else None),
            }))
        return result

    def build(self, posts: Iterable[TaggedPost], previous: Optional[DailySnapshot] = None, *,
              as_of: dt.date, source: str = "live") -> DailySnapshot:
        """
        Build the day's snapshot. Never raises for empty input.

        Args:
            posts: Tagged posts from one collection cycle
            previous: Yesterday's snapshot, if the caller kept one
            as_of: Calendar date the snapshot describes
            source: Provenance tag ("live", "cached" or "demo")

        Returns:
            Immutable DailySnapshot
        """
        batch = list(posts)
        rollup = self.aggregator.aggregate(batch)
        overall = calculate_overall_score(batch, self.weighting)

        return DailySnapshot(
            date=as_of,
            source=source,
            overall_score=overall,
            score_delta=_delta(overall, previous.overall_score if previous else None),
            total_volume=len(batch),
            categories=self._with_deltas(rollup.categories, previous),
            biggest_movers=self.biggest_movers(batch, previous),
            topics=rollup.topics,
            regions=dict(self.config.region_labels),
        )
