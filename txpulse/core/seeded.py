"""
Deterministic string-seeded pseudo-random numbers for demo and history data.
"""
from __future__ import annotations

import datetime as dt
import math
import struct

EPOCH = dt.date(2026, 1, 1)


def _utf16_units(key: str) -> tuple:
    raw = key.encode("utf-16-le")
    return struct.unpack(f"<{len(raw) // 2}H", raw)


def seed(key: str, offset: int = 0) -> int:
    """
    Polynomial rolling hash of a string (h = h * 31 + unit, wrapped to int32), plus an offset.

    Args:
        key: String to hash, iterated as UTF-16 code units
        offset: Integer added after hashing, usually a day key

    Returns:
        Deterministic integer seed
    """
    h = 0
    for unit in _utf16_units(key):
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h + offset


def seeded_random(s: int) -> float:
    """Fractional part of sin(s) * 10000, a float in [0, 1)."""
    x = math.sin(s) * 10000
    return x - math.floor(x)


def day_key(day: dt.date) -> int:
    """Days since the fixed epoch (negative before it)."""
    return (day - EPOCH).days


def gen_sentiment(key: str, offset: int) -> float:
    """Pseudo-random sentiment in [-1, 1], 2 decimals."""
    return math.floor((seeded_random(seed(key, offset)) * 2 - 1) * 100 + 0.5) / 100


def gen_volume(key: str, offset: int) -> int:
    """Pseudo-random volume in [40, 300)."""
    return math.floor(40 + seeded_random(seed(key + "vol", offset)) * 260)
