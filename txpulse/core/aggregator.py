"""
Topic and category rollups over tagged posts.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from txpulse.config import PulseConfig
from txpulse.models import TaggedPost
from txpulse.schemas import CategorySummary, Mention, RegionStat, TopicSummary
from txpulse.utils import mean, round2

MAX_MENTIONS = 6


@dataclass
class _RegionBucket:
    sentiments: List[float] = field(default_factory=list)

    def finalize(self) -> RegionStat:
        return RegionStat(sentiment=round2(mean(self.sentiments)), volume=len(self.sentiments))


@dataclass
class _TopicBucket:
    name: str
    sentiments: List[float] = field(default_factory=list)
    mentions: List[Mention] = field(default_factory=list)
    by_region: Dict[str, _RegionBucket] = field(default_factory=dict)

    def add(self, tagged: TaggedPost) -> None:
        self.sentiments.append(tagged.sentiment)
        if len(self.mentions) < MAX_MENTIONS:
            self.mentions.append(
                Mention(
                    text=tagged.mention_text,
                    sentiment=tagged.sentiment,
                    source=tagged.post.source_platform,
                    region=tagged.region,
                )
            )
        # posts without a detected region only count statewide
        if tagged.region is not None:
            self.by_region.setdefault(tagged.region, _RegionBucket()).sentiments.append(tagged.sentiment)

    def finalize(self) -> TopicSummary:
        return TopicSummary(
            name=self.name,
            sentiment=round2(mean(self.sentiments)),
            volume=len(self.sentiments),
            by_region={region: bucket.finalize() for region, bucket in self.by_region.items()},
            top_mentions=list(self.mentions),
        )


@dataclass(frozen=True)
class Aggregate:
    topics: List[TopicSummary]
    categories: List[CategorySummary]


def categorize(matched_topics: Iterable[str], categories: Mapping[str, Sequence[str]]) -> Optional[str]:
    """
    Pick the first category whose keyword set intersects the matched topics.

    Args:
        matched_topics: Topic names matched on a post
        categories: Ordered category -> keywords table

    Returns:
        Category name, or None when nothing matches
    """
    topics = set(matched_topics)
    for category, keywords in categories.items():
        if topics.intersection(keywords):
            return category
    return None


class Aggregator:
    """Folds tagged posts into topic-indexed and category-indexed summaries."""

    def __init__(self, config: PulseConfig):
        self.config = config

    def summarize_topics(self, posts: Sequence[TaggedPost]) -> List[TopicSummary]:
        buckets: Dict[str, _TopicBucket] = {}
        for tagged in posts:
            for topic in tagged.matched_topics:
                bucket = buckets.get(topic)
                if bucket is None:
                    bucket = buckets[topic] = _TopicBucket(name=topic)
                bucket.add(tagged)

        # sorted() is stable, so equal volumes keep first-seen order
        topics = [bucket.finalize() for bucket in buckets.values()]
        return sorted(topics, key=lambda t: t.volume, reverse=True)

    def summarize_categories(self, posts: Sequence[TaggedPost]) -> List[CategorySummary]:
        members: Dict[str, List[TaggedPost]] = {name: [] for name in self.config.categories}
        for tagged in posts:
            category = categorize(tagged.matched_topics, self.config.categories)
            if category is not None:
                members[category].append(tagged)

        summaries: List[CategorySummary] = []
        for name, category_posts in members.items():
            if not category_posts:
                continue
            seen: Dict[str, None] = {}
            for tagged in category_posts:
                for topic in tagged.matched_topics:
                    seen.setdefault(topic, None)
            summaries.append(
                CategorySummary(
                    name=name,
                    sentiment=round2(mean(p.sentiment for p in category_posts)),
                    volume=len(category_posts),
                    delta=0.0,
                    topics=list(seen),
                )
            )
        return summaries

    def aggregate(self, posts: Iterable[TaggedPost]) -> Aggregate:
        """
        Build the topic and category rollups for a batch of tagged posts.

        Args:
            posts: Tagged posts in collection order

        Returns:
            Aggregate with topics sorted by volume and categories in table order
        """
        batch = list(posts)
        return Aggregate(
            topics=self.summarize_topics(batch),
            categories=self.summarize_categories(batch),
        )
