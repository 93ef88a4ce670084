"""
File: txpulse/sources/reddit.py
Reddit listing fetcher (public JSON, unauthenticated) for keyword-based collection.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional, Sequence

import httpx

from txpulse.config import MONITORED_KEYWORDS, MONITORED_SUBREDDITS, Settings
from txpulse.models import MalformedPostError, RawPost, _optional_float
from txpulse.sources.collector import CollectionError
from txpulse.sources.common import clean_text, within_window
from txpulse.utils import now_utc

logger = logging.getLogger(__name__)

# old.reddit.com is more permissive with unauthenticated clients
LISTING_URL = "https://old.reddit.com/r/{subreddit}/new.json"


def matches_keywords(text: str, keywords: Sequence[str] = MONITORED_KEYWORDS) -> List[str]:
    lowered = text.lower()
    return [keyword for keyword in keywords if keyword.lower() in lowered]


class RedditCollector:
    """Fetches recent posts from monitored subreddits, one subreddit at a time."""

    name = "reddit"

    def __init__(
        self,
        subreddits: Sequence[str] = MONITORED_SUBREDDITS,
        keywords: Sequence[str] = MONITORED_KEYWORDS,
        *,
        limit: int = 100,
        window_hours: int = 24,
        delay_seconds: float = 1.0,
        timeout: float = 15.0,
        user_agent: str = "txpulse/0.1",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.subreddits = tuple(subreddits)
        self.keywords = tuple(keywords)
        self.limit = limit
        self.window_hours = window_hours
        self.delay_seconds = delay_seconds
        self.timeout = timeout
        self.headers = {
            "User-Agent": user_agent,
            "Accept": "application/json",
            "Accept-Language": "en-US,en;q=0.9",
            "Cache-Control": "no-cache",
        }
        self._transport = transport
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedditCollector":
        return cls(
            limit=settings.REDDIT_LISTING_LIMIT,
            window_hours=settings.POST_WINDOW_HOURS,
            delay_seconds=settings.REQUEST_DELAY_SECONDS,
            timeout=settings.FETCH_TIMEOUT_SECONDS,
            user_agent=settings.USER_AGENT,
        )

    async def fetch_listing(self, client: httpx.AsyncClient, subreddit: str) -> List[Any]:
        url = LISTING_URL.format(subreddit=subreddit)
        r = await client.get(url, params={"limit": self.limit, "raw_json": 1})
        r.raise_for_status()
        data = r.json()
        # non-mapping children are passed through and rejected per post
        return [child.get("data") if isinstance(child, dict) else child for child in data.get("data", {}).get("children", [])]

    def to_raw_post(self, p: Any, now: datetime) -> Optional[RawPost]:
        """
        Map one listing entry to a RawPost.

        Args:
            p: Listing child `data` mapping
            now: Reference time for the collection window

        Returns:
            RawPost, or None when the post is outside the window or matches no keyword

        Raises:
            MalformedPostError: when the entry has no id or an unreadable timestamp
        """
        if not isinstance(p, dict):
            raise MalformedPostError(f"expected a mapping, got {type(p).__name__}")

        permalink = p.get("permalink")
        post = RawPost.from_mapping(
            {
                "id": p.get("id"),
                "created_at": p.get("created_utc"),
                "title": clean_text(p.get("title")),
                "text": clean_text(p.get("selftext")),
                "url": f"https://reddit.com{permalink}" if isinstance(permalink, str) and permalink else p.get("url"),
                "author_id": p.get("author") or "[deleted]",
                "engagement_score": (_optional_float(p.get("score")) or 0.0)
                + (_optional_float(p.get("num_comments")) or 0.0),
            },
            source_platform=self.name,
        )
        if not within_window(post.created_at, now, self.window_hours):
            return None
        if not matches_keywords(post.full_text, self.keywords):
            return None
        return post

    def keep_posts(self, subreddit: str, listing: List[Any], now: datetime) -> List[RawPost]:
        kept: List[RawPost] = []
        for p in listing:
            try:
                post = self.to_raw_post(p, now)
            except MalformedPostError as e:
                logger.warning("Skipping malformed post in r/%s: %s", subreddit, e)
                continue
            if post is not None:
                kept.append(post)
        return kept

    async def fetch_raw_posts(self) -> List[RawPost]:
        """
        Collect keyword-matching posts from the last window, sequentially with a delay.

        Returns:
            RawPost list in subreddit order

        Raises:
            CollectionError: when every subreddit request failed
        """
        posts: List[RawPost] = []
        failures = 0
        now = self._clock()
        logger.info("Starting Reddit collection across %d subreddits", len(self.subreddits))

        async with httpx.AsyncClient(headers=self.headers, timeout=self.timeout, transport=self._transport) as client:
            for i, subreddit in enumerate(self.subreddits):
                try:
                    listing = await self.fetch_listing(client, subreddit)
                except (httpx.HTTPError, ValueError, AttributeError) as e:
                    failures += 1
                    logger.warning("Error fetching r/%s: %s", subreddit, e)
                else:
                    kept = self.keep_posts(subreddit, listing, now)
                    logger.info("r/%s: kept %d of %d posts", subreddit, len(kept), len(listing))
                    posts.extend(kept)

                # rate limiting between sequential requests
                if i < len(self.subreddits) - 1:
                    await self._sleep(self.delay_seconds)

        if self.subreddits and failures == len(self.subreddits):
            raise CollectionError(f"All {failures} subreddit requests failed")

        logger.info("Reddit collection complete: %d posts", len(posts))
        return posts
