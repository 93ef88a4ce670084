"""
Collector contract and factory.
"""
from __future__ import annotations

from typing import List, Protocol

from txpulse.config import Settings
from txpulse.models import RawPost


class CollectionError(RuntimeError):
    """Upstream fetch failed: network, auth, rate limit or malformed response."""


class Collector(Protocol):
    """Anything that can fetch a batch of raw posts from an upstream source."""

    name: str

    async def fetch_raw_posts(self) -> List[RawPost]:
        ...


def build_collector(settings: Settings) -> Collector:
    """
    Instantiate the collector named in settings.

    Args:
        settings: Runtime settings (COLLECTOR selects the adapter)

    Returns:
        Collector instance
    """
    # Imported here so each adapter's dependencies load only when selected
    if settings.COLLECTOR == "reddit":
        from txpulse.sources.reddit import RedditCollector
        return RedditCollector.from_settings(settings)
    if settings.COLLECTOR == "google_news":
        from txpulse.sources.google_news import GoogleNewsCollector
        return GoogleNewsCollector.from_settings(settings)
    raise ValueError(f"Unknown collector: {settings.COLLECTOR!r}")
