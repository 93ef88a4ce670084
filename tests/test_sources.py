from datetime import datetime, timedelta, timezone

import httpx
import pytest

from txpulse.config import Settings
from txpulse.sources.collector import CollectionError, build_collector
from txpulse.sources.google_news import GoogleNewsCollector
from txpulse.sources.reddit import RedditCollector, matches_keywords

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
RECENT = (NOW - timedelta(hours=1)).timestamp()
OLD = (NOW - timedelta(days=2)).timestamp()

LISTINGS = {
    "texas": [
        {"id": "t1", "created_utc": RECENT, "title": "ERCOT warns of grid strain", "selftext": "",
         "permalink": "/r/texas/comments/t1/", "score": 10, "num_comments": 5, "author": "alice"},
        {"id": "t2", "created_utc": OLD, "title": "Property taxes up again", "selftext": "",
         "permalink": "/r/texas/comments/t2/", "score": 50, "num_comments": 9},
        {"id": "t3", "created_utc": RECENT, "title": "Bluebonnets are blooming", "selftext": "",
         "permalink": "/r/texas/comments/t3/", "score": 80, "num_comments": 2},
        {"id": "t4", "title": "Rent without a timestamp"},
    ],
    "houston": [
        {"id": "h1", "created_utc": RECENT, "title": "Houston rent keeps rising",
         "selftext": "Landlords blame insurance", "permalink": "/r/houston/comments/h1/",
         "score": 3, "num_comments": 0, "author": None},
    ],
}


def listing_response(subreddit):
    children = [{"kind": "t3", "data": post} for post in LISTINGS[subreddit]]
    return httpx.Response(200, json={"data": {"children": children}})


def make_reddit(handler, sleeps):
    async def sleep(seconds):
        sleeps.append(seconds)

    return RedditCollector(
        subreddits=("texas", "houston"),
        transport=httpx.MockTransport(handler),
        sleep=sleep,
        clock=lambda: NOW,
        delay_seconds=1.0,
    )


def test_matches_keywords_is_case_insensitive() -> None:
    assert matches_keywords("New ERCOT rules for the Power Grid") == ["power grid", "ercot"]
    assert matches_keywords("nothing to see") == []


@pytest.mark.asyncio
async def test_reddit_keeps_recent_keyword_posts() -> None:
    sleeps = []
    seen_paths = []

    def handler(request):
        seen_paths.append(request.url.path)
        assert request.url.params["raw_json"] == "1"
        return listing_response(request.url.path.split("/")[2])

    posts = await make_reddit(handler, sleeps).fetch_raw_posts()

    assert seen_paths == ["/r/texas/new.json", "/r/houston/new.json"]
    assert sleeps == [1.0]
    assert [p.id for p in posts] == ["t1", "h1"]

    ercot = posts[0]
    assert ercot.engagement_score == 15
    assert ercot.url == "https://reddit.com/r/texas/comments/t1/"
    assert ercot.source_platform == "reddit"
    assert ercot.author_id == "alice"
    assert posts[1].author_id == "[deleted]"
    assert posts[1].text == "Landlords blame insurance"


@pytest.mark.asyncio
async def test_reddit_skips_failed_subreddit() -> None:
    def handler(request):
        subreddit = request.url.path.split("/")[2]
        if subreddit == "texas":
            return httpx.Response(503)
        return listing_response(subreddit)

    posts = await make_reddit(handler, []).fetch_raw_posts()
    assert [p.id for p in posts] == ["h1"]


@pytest.mark.asyncio
async def test_reddit_raises_when_every_subreddit_fails() -> None:
    def handler(request):
        return httpx.Response(429)

    with pytest.raises(CollectionError):
        await make_reddit(handler, []).fetch_raw_posts()


class StubFeed(dict):
    pass


def stub_parser(feed=None, error=None):
    calls = []

    def parse(url, agent=None):
        calls.append((url, agent))
        if error:
            raise error
        return feed

    parse.calls = calls
    return parse


@pytest.mark.asyncio
async def test_google_news_maps_entries() -> None:
    feed = StubFeed(bozo=False, entries=[
        {"title": "ERCOT <b>grid</b> strain", "link": "https://example.com/a",
         "summary": "<p>Houston braces for outages</p>", "published": "Mon, 19 Oct 2026 10:00:00 GMT",
         "source": {"title": "Texas Tribune"}},
        {"title": "Old story", "link": "https://example.com/b", "published": "Mon, 12 Oct 2026 10:00:00 GMT"},
        {"title": "", "link": "https://example.com/c", "published": "Mon, 19 Oct 2026 10:00:00 GMT"},
    ])
    parse = stub_parser(feed)
    collector = GoogleNewsCollector(terms=("ERCOT", "Texas housing"), parse=parse, clock=lambda: NOW)

    posts = await collector.fetch_raw_posts()

    assert len(posts) == 1
    post = posts[0]
    assert post.title == "ERCOT grid strain"
    assert post.text == "Houston braces for outages"
    assert post.author_id == "Texas Tribune"
    assert post.engagement_score is None
    assert post.source_platform == "google_news"
    assert post.created_at == datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)
    assert "ERCOT+OR+Texas+housing" in parse.calls[0][0]


@pytest.mark.asyncio
async def test_google_news_errors_become_collection_errors() -> None:
    failing = GoogleNewsCollector(parse=stub_parser(error=OSError("dns")), clock=lambda: NOW)
    with pytest.raises(CollectionError):
        await failing.fetch_raw_posts()

    unreadable = StubFeed(bozo=True, entries=[], bozo_exception="not xml")
    broken = GoogleNewsCollector(parse=stub_parser(unreadable), clock=lambda: NOW)
    with pytest.raises(CollectionError):
        await broken.fetch_raw_posts()


def test_build_collector_follows_settings() -> None:
    assert isinstance(build_collector(Settings(COLLECTOR="reddit")), RedditCollector)
    assert isinstance(build_collector(Settings(COLLECTOR="google_news")), GoogleNewsCollector)


@pytest.mark.asyncio
async def test_reddit_skips_malformed_entries_and_keeps_the_rest() -> None:
    children = [
        {"kind": "t3", "data": {"id": "ok", "created_utc": RECENT, "title": "ERCOT grid strain"}},
        {"kind": "t3", "data": {"id": "bad", "created_utc": "yesterday"}},
        {"kind": "t3", "data": {"id": "counts", "created_utc": RECENT, "title": "Rent hike",
                                "score": "12", "num_comments": "many"}},
        {"kind": "t3", "data": {"id": "typed", "created_utc": RECENT, "title": 42, "selftext": "ERCOT again"}},
        {"kind": "t3", "data": {"created_utc": RECENT, "title": "ERCOT without an id"}},
        "junk",
    ]

    def handler(request):
        return httpx.Response(200, json={"data": {"children": children}})

    collector = RedditCollector(
        subreddits=("texas",),
        transport=httpx.MockTransport(handler),
        clock=lambda: NOW,
    )
    posts = await collector.fetch_raw_posts()

    assert [p.id for p in posts] == ["ok", "counts", "typed"]
    assert posts[1].engagement_score == 12.0
    assert posts[2].title == ""
    assert posts[2].text == "ERCOT again"
