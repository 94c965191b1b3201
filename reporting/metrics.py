"""Rounding, percentage and label helpers shared by the queries and the report builder."""

from __future__ import annotations

import math
import re
from datetime import datetime

NOT_SET = "(not set)"
PLACEHOLDER = "-"
OTHER_SERIES_KEY = "other"

WHITESPACE = re.compile(r"\s+")


def round_half_up(value: float) -> int:
    # Ties round up, unlike round().
    return int(math.floor(value + 0.5))


def click_through_rate(clicks: int, loads: int) -> float:
    if loads <= 0:
        return 0
    return round_half_up(clicks / loads * 1000) / 10


def percentage_share(value: int, total: int) -> float:
    """Two-decimal share of `total`; 0 when there is nothing to share."""
    if total <= 0:
        return 0
    return round_half_up(value / total * 10000) / 100


def percentage_of(value: int, total: int) -> float:
    """One-decimal percentage of `total`."""
    if total <= 0:
        return 0
    return round_half_up(value / total * 1000) / 10


def is_reportable(value: str | None) -> bool:
    return bool(value) and value not in (NOT_SET, PLACEHOLDER)


def format_duration(seconds: float) -> str:
    minutes = int(seconds // 60)
    secs = round_half_up(seconds % 60)
    return f"{minutes:02d}:{secs:02d}"


def format_date_label(value: str) -> str:
    """Turn a GA4 `YYYYMMDD` date dimension into a short label such as `Jan 17`."""
    parsed = datetime.strptime(value, "%Y%m%d")
    return f"{parsed:%b} {parsed.day}"


def format_long_date(value: str) -> str:
    """Turn `YYYY-MM-DD` into `Jan 17, 2026`."""
    parsed = datetime.strptime(value, "%Y-%m-%d")
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def series_key(community: str) -> str:
    """
    Key used for a community inside a time-series record.

    Whitespace is removed and the first character lowercased, so
    "Kings Landing" becomes "kingsLanding". Blank names map to "other".
    """
    compact = WHITESPACE.sub("", community or "")
    if not compact:
        return OTHER_SERIES_KEY
    return compact[0].lower() + compact[1:]


def slugify(text: str) -> str:
    return WHITESPACE.sub("-", text.strip()).lower()
