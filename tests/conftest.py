from datetime import datetime, timezone
from typing import Optional, Sequence

import pytest

from txpulse.config import default_config
from txpulse.core.aggregator import Aggregator
from txpulse.core.snapshot import SnapshotBuilder
from txpulse.core.tagger import Tagger
from txpulse.models import RawPost, TaggedPost

CREATED = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def raw_post(text: str = "", post_id: str = "p1", engagement: Optional[float] = None,
             source: str = "reddit", title: str = "") -> RawPost:
    return RawPost(
        id=post_id,
        text=text,
        title=title,
        created_at=CREATED,
        source_platform=source,
        engagement_score=engagement,
    )


def tagged_post(topics: Sequence[str] = (), sentiment: float = 0.0, region: Optional[str] = None,
                engagement: Optional[float] = None, text: str = "", post_id: str = "p1") -> TaggedPost:
    return TaggedPost(
        post=raw_post(text=text or f"post {post_id}", post_id=post_id, engagement=engagement),
        matched_topics=tuple(topics),
        region=region,
        sentiment=sentiment,
    )


@pytest.fixture
def config():
    return default_config("ratio")


@pytest.fixture
def tagger(config):
    return Tagger(config)


@pytest.fixture
def aggregator(config):
    return Aggregator(config)


@pytest.fixture
def builder(config):
    return SnapshotBuilder(config, weighting="engagement")
