# txpulse/schemas.py
import datetime as dt
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Published(BaseModel):
    # camelCase on the wire, snake_case in Python; frozen once built
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Mention(_Published):
    text: str
    sentiment: float
    source: str
    region: Optional[str] = None


class RegionStat(_Published):
    sentiment: float
    volume: int


class TopicSummary(_Published):
    name: str
    sentiment: float
    volume: int
    by_region: Dict[str, RegionStat] = Field(default_factory=dict)
    top_mentions: List[Mention] = Field(default_factory=list)


class CategorySummary(_Published):
    name: str
    sentiment: float
    volume: int
    delta: float = 0.0
    topics: List[str] = Field(default_factory=list)


class Mover(_Published):
    name: str
    sentiment: float
    delta: float = 0.0
    volume: int


class DailySnapshot(_Published):
    date: dt.date
    source: Literal["live", "cached", "demo"]
    overall_score: float = 0.0
    score_delta: float = 0.0
    total_volume: int = 0
    categories: List[CategorySummary] = Field(default_factory=list)
    biggest_movers: List[Mover] = Field(default_factory=list)
    topics: List[TopicSummary] = Field(default_factory=list)
    regions: Dict[str, str] = Field(default_factory=dict)
    stale: Optional[bool] = None            # only set on cached results
    cached_at: Optional[str] = None

    def topic(self, name: str) -> Optional[TopicSummary]:
        return next((t for t in self.topics if t.name == name), None)

    def category(self, name: str) -> Optional[CategorySummary]:
        return next((c for c in self.categories if c.name == name), None)


class HistoryTopic(_Published):
    name: str
    sentiment: float
    volume: int


class HistoryPoint(_Published):
    date: dt.date
    topics: List[HistoryTopic] = Field(default_factory=list)


def published_payload(snapshot: DailySnapshot) -> Dict[str, Any]:
    """JSON-ready dict with the field names dashboard consumers expect."""
    data = snapshot.model_dump(mode="json", by_alias=True)
    for key in ("stale", "cachedAt"):
        if data.get(key) is None:
            data.pop(key, None)
    for topic in data["topics"]:
        if not topic.get("byRegion"):
            topic.pop("byRegion", None)
    return data


def history_payload(points: List[HistoryPoint]) -> List[Dict[str, Any]]:
    return [point.model_dump(mode="json", by_alias=True) for point in points]
