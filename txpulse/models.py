"""
File: txpulse/models.py
Internal data structures used during collection and tagging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from dateutil import parser as dateparser

from txpulse.utils import normalize_text


JsonDict = Dict[str, Any]


class MalformedPostError(ValueError):
    """A raw upstream post is missing a required field."""


def _parse_created_at(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str) and value.strip():
        parsed = dateparser.parse(value)
        if parsed.tzinfo:
            return parsed.astimezone(timezone.utc)
        return parsed.replace(tzinfo=timezone.utc)
    raise MalformedPostError(f"unusable createdAt: {value!r}")


def _optional_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class RawPost:
    """A post as received from a collector. Immutable once received."""

    id: str
    text: str
    created_at: datetime
    source_platform: str
    title: str = ""
    url: str = ""
    author_id: Optional[str] = None
    engagement_score: Optional[float] = None  # upvotes + comments, None when unknown

    @property
    def full_text(self) -> str:
        return " ".join(part for part in (self.title, self.text) if isinstance(part, str) and part)

    @classmethod
    def from_mapping(cls, data: JsonDict, source_platform: str = "unknown") -> "RawPost":
        """Build a RawPost from loosely-typed upstream data.

        Raises MalformedPostError when the id is missing or the timestamp cannot be read.
        Missing or non-string text is treated as empty.
        """
        if not isinstance(data, dict):
            raise MalformedPostError(f"expected a mapping, got {type(data).__name__}")

        post_id = data.get("id")
        if post_id is None or str(post_id).strip() == "":
            raise MalformedPostError("post has no id")

        created = data.get("createdAt", data.get("created_at"))
        try:
            created_at = _parse_created_at(created)
        except (ValueError, OverflowError, OSError) as e:
            raise MalformedPostError(f"post {post_id}: {e}") from e

        author = data.get("authorId", data.get("author_id"))
        return cls(
            id=str(post_id),
            text=normalize_text(data.get("text")),
            title=normalize_text(data.get("title")),
            url=data.get("url") if isinstance(data.get("url"), str) else "",
            created_at=created_at,
            source_platform=str(data.get("sourcePlatform", data.get("source_platform", source_platform))),
            author_id=str(author) if author is not None else None,
            engagement_score=_optional_float(data.get("engagementScore", data.get("engagement_score"))),
        )


@dataclass(frozen=True)
class TaggedPost:
    """A RawPost plus the tagger's derived fields."""

    post: RawPost
    matched_topics: Tuple[str, ...] = field(default_factory=tuple)
    region: Optional[str] = None
    sentiment: float = 0.0

    @property
    def engagement(self) -> float:
        return max(self.post.engagement_score or 0.0, 0.0)

    @property
    def mention_text(self) -> str:
        return self.post.title or self.post.text


__all__ = ["RawPost", "TaggedPost", "MalformedPostError", "JsonDict"]
