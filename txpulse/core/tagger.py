"""
Lexical topic, region and sentiment tagging.

This module tags each collected post with the policy topics it mentions, the
Texas region it refers to, and a word-list sentiment score. The scorer is a
deliberately simple heuristic; two formulas exist and a Tagger is bound to
exactly one of them through its PulseConfig.
"""
from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern, Tuple, get_args

from txpulse.config import PulseConfig, SentimentFormula
from txpulse.models import JsonDict, MalformedPostError, RawPost, TaggedPost
from txpulse.utils import clamp_sentiment

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _word_pattern(word: str) -> Pattern[str]:
    return re.compile(rf"\b{re.escape(word)}\b")


def count_word_hits(lowered: str, words: Iterable[str]) -> int:
    """
    Count whole-word occurrences of every word in an already lower-cased text.

    Args:
        lowered: Lower-cased text
        words: Word list to look for

    Returns:
        Total number of occurrences across all words
    """
    return sum(len(_word_pattern(word).findall(lowered)) for word in words)


def ratio_sentiment(pos_hits: int, neg_hits: int) -> float:
    """
    Word-ratio form: (pos - neg) / (pos + neg), 0 when there are no hits.

    Returns:
        Score in [-1.0, 1.0]
    """
    total = pos_hits + neg_hits
    if total == 0:
        return 0.0
    return clamp_sentiment((pos_hits - neg_hits) / total)


def density_sentiment(pos_hits: int, neg_hits: int, word_count: int) -> float:
    """
    Normalized-density form: (pos - neg) scaled down for texts over 100 words.

    Returns:
        Score in [-1.0, 1.0]
    """
    raw_score = pos_hits - neg_hits
    return clamp_sentiment(raw_score / max(word_count / 100, 1))


def score_text(text: str, config: PulseConfig) -> float:
    """
    Score a text with the formula named in the config.

    Args:
        text: Original post text (any case)
        config: Pipeline configuration carrying word lists and formula

    Returns:
        Sentiment score in [-1.0, 1.0]
    """
    lowered = text.lower()
    pos_hits = count_word_hits(lowered, config.positive_words)
    neg_hits = count_word_hits(lowered, config.negative_words)
    return _apply_formula(config.sentiment_formula, pos_hits, neg_hits, len(text.split()))


def _apply_formula(formula: SentimentFormula, pos_hits: int, neg_hits: int, word_count: int) -> float:
    if formula == "ratio":
        return ratio_sentiment(pos_hits, neg_hits)
    if formula == "densityNormalized":
        return density_sentiment(pos_hits, neg_hits, word_count)
    raise ValueError(f"Unknown sentiment formula: {formula!r}")


def match_topics(lowered: str, config: PulseConfig) -> Tuple[str, ...]:
    """Topics with at least one trigger substring in the text, in seed order."""
    return tuple(
        topic
        for topic, triggers in config.topic_seeds.items()
        if any(trigger in lowered for trigger in triggers)
    )


def match_region(lowered: str, config: PulseConfig) -> Optional[str]:
    """First region (in declaration order) with a place-name hit, else None."""
    for region_id, places in config.regions.items():
        if any(place in lowered for place in places):
            return region_id
    return None


class Tagger:
    """Tags raw posts with topics, region and sentiment."""

    def __init__(self, config: PulseConfig):
        if config.sentiment_formula not in get_args(SentimentFormula):
            raise ValueError(f"Unknown sentiment formula: {config.sentiment_formula!r}")
        self.config = config

    @property
    def formula(self) -> SentimentFormula:
        return self.config.sentiment_formula

    def tag(self, post: RawPost) -> TaggedPost:
        """
        Tag a single post. Pure: identical text always yields identical tags.

        Args:
            post: Raw post from a collector

        Returns:
            TaggedPost with matched topics, region and sentiment
        """
        text = post.full_text
        lowered = text.lower()
        return TaggedPost(
            post=post,
            matched_topics=match_topics(lowered, self.config),
            region=match_region(lowered, self.config),
            sentiment=score_text(text, self.config),
        )

    def tag_all(self, posts: Iterable[RawPost]) -> List[TaggedPost]:
        return [self.tag(post) for post in posts]


def tag_posts(tagger: Tagger, items: Iterable[RawPost | JsonDict], source_platform: str = "unknown") -> List[TaggedPost]:
    """
    Tag a batch of posts, skipping individual malformed entries.

    Args:
        tagger: Tagger bound to the pipeline's configuration
        items: RawPost objects or raw upstream mappings
        source_platform: Platform tag applied to mappings that lack one

    Returns:
        Tagged posts in input order, without the skipped ones
    """
    tagged: List[TaggedPost] = []
    for item in items:
        try:
            post = item if isinstance(item, RawPost) else RawPost.from_mapping(item, source_platform)
        except MalformedPostError as e:
            logger.warning("Skipping malformed post: %s", e)
            continue
        tagged.append(tagger.tag(post))
    return tagged
