"""
Common utilities for post collectors.
"""
from __future__ import annotations

import hashlib
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from dateutil import parser as dateparser


def make_post_id(url: str, title: str, published_at: datetime) -> str:
    """
    Generate a deterministic unique ID for a post that has no upstream id.

    Args:
        url: Post or article URL
        title: Post title
        published_at: Publication timestamp

    Returns:
        16-character hexadecimal string ID
    """
    key = f"{url}|{title}|{published_at.isoformat()}".encode("utf-8", "ignore")
    return hashlib.blake2b(key, digest_size=8).hexdigest()


def parse_utc_datetime(date_string: Optional[str]) -> datetime:
    """
    Parse a date string and convert to UTC datetime.

    Args:
        date_string: Date string in various formats, or None

    Returns:
        UTC datetime object, or current UTC time if input is None/empty
    """
    if not date_string:
        return datetime.now(timezone.utc)

    parsed_date = dateparser.parse(date_string)
    if parsed_date.tzinfo:
        return parsed_date.astimezone(timezone.utc)
    else:
        return parsed_date.replace(tzinfo=timezone.utc)


def clean_text(text: Any) -> str:
    """
    Strip markup and collapse whitespace.

    Args:
        text: Raw text string; anything else is treated as missing

    Returns:
        Cleaned text string, empty string if input is not a non-empty string
    """
    if not text or not isinstance(text, str):
        return ""
    text = re.sub(r"<[^>]+>", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def within_window(published_at: datetime, now: datetime, window_hours: int) -> bool:
    return published_at >= now - timedelta(hours=window_hours)
