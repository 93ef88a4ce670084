"""
Google News RSS search for free-text issue collection.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence
from urllib.parse import urlencode

import feedparser

from txpulse.config import ISSUE_TERMS, Settings
from txpulse.models import RawPost
from txpulse.sources.collector import CollectionError
from txpulse.sources.common import clean_text, make_post_id, parse_utc_datetime, within_window
from txpulse.utils import now_utc

logger = logging.getLogger(__name__)


def extract_publisher_from_entry(entry) -> Optional[str]:
    """
    Extract publisher name from RSS entry.

    Args:
        entry: RSS feed entry

    Returns:
        Publisher name or None if not found
    """
    source = entry.get("source")
    if isinstance(source, dict):
        title = source.get("title")
        if title:
            return clean_text(title)
    return None


class GoogleNewsCollector:
    """Fetches issue headlines from a Google News RSS search."""

    name = "google_news"
    BASE_URL = "https://news.google.com/rss/search"

    def __init__(
        self,
        terms: Sequence[str] = ISSUE_TERMS,
        *,
        window_hours: int = 24,
        user_agent: str = "txpulse/0.1",
        parse: Callable[..., Any] = feedparser.parse,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.terms = tuple(terms)
        self.window_hours = window_hours
        self.user_agent = user_agent
        self._parse = parse
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleNewsCollector":
        return cls(window_hours=settings.POST_WINDOW_HOURS, user_agent=settings.USER_AGENT)

    @property
    def url(self) -> str:
        params = urlencode({
            "q": " OR ".join(self.terms),
            "hl": "en-US",
            "gl": "US",
            "ceid": "US:en",
        })
        return f"{self.BASE_URL}?{params}"

    async def fetch_raw_posts(self) -> List[RawPost]:
        """
        Run the search and map feed entries to RawPosts.

        Returns:
            RawPost list in feed order (no engagement metric)

        Raises:
            CollectionError: when the feed cannot be fetched or parsed
        """
        logger.info("Searching Google News for %d issue terms", len(self.terms))
        try:
            feed = await asyncio.to_thread(self._parse, self.url, agent=self.user_agent)
        except Exception as e:
            raise CollectionError(f"Google News fetch failed: {e}") from e

        if feed.get("bozo") and not feed.get("entries"):
            raise CollectionError(f"Google News feed unreadable: {feed.get('bozo_exception')}")

        now = self._clock()
        posts: List[RawPost] = []
        for entry in feed.get("entries", []):
            title = clean_text(entry.get("title"))
            link = clean_text(entry.get("link"))
            if not title or not link:
                continue
            try:
                published_at = parse_utc_datetime(entry.get("published"))
            except (ValueError, OverflowError) as e:
                logger.warning("Skipping entry with bad date %r: %s", entry.get("published"), e)
                continue
            if not within_window(published_at, now, self.window_hours):
                continue

            posts.append(RawPost(
                id=make_post_id(link, title, published_at),
                title=title,
                text=clean_text(entry.get("summary")),
                url=link,
                created_at=published_at,
                source_platform=self.name,
                author_id=extract_publisher_from_entry(entry),
            ))

        logger.info("Google News: %d entries in window", len(posts))
        return posts
