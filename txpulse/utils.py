"""
Shared utility functions for the sentiment pipeline.
"""
from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Iterable


def now_utc() -> datetime:
    """
    Get current UTC datetime with timezone information.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def normalize_text(text: Any) -> str:
    """
    Normalize whitespace in text content.

    Args:
        text: Input value; anything that is not a string counts as empty

    Returns:
        Normalized text with single spaces and trimmed edges
    """
    if not isinstance(text, str) or not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def clamp_sentiment(value: float) -> float:
    """
    Clamp a sentiment value to the range [-1.0, 1.0].

    Args:
        value: Input float value

    Returns:
        Value clamped to [-1.0, 1.0] range
    """
    return max(-1.0, min(1.0, value))


def round2(value: float) -> float:
    """Round to 2 decimals, halves toward positive infinity."""
    return math.floor(value * 100 + 0.5) / 100


def mean(values: Iterable[float]) -> float:
    items = list(values)
    return sum(items) / len(items) if items else 0.0
