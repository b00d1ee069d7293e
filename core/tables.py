"""Spreadsheet-ready tables and other display formatting for Mentions.

Truncation and local-time rendering happen here only, so the Mention itself
stays a faithful copy of what the source sent.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Union

from dateutil import parser as date_parser

from core.models import MONITORING, NEWS, SOCIAL, Mention

Cell = Union[str, int]
Table = list[list[Cell]]

CONTENT_PREVIEW_CHARS = 100

HEADERS: dict[str, list[str]] = {
    SOCIAL: ["Link", "Views", "Handle", "Followers", "Content", "Timestamp"],
    NEWS: ["Publication", "Headline", "Link", "Reporter", "Timestamp", "Notes"],
    MONITORING: [
        "Publication", "Headline", "Link", "Reporter",
        "Timestamp", "Reach", "Sentiment", "Notes",
    ],
}

# Worksheet that receives each kind of table
SHEET_NAMES: dict[str, str] = {
    SOCIAL: "Twitter",
    NEWS: "News",
    MONITORING: "Meltwater",
}


def _parse(timestamp: str) -> datetime | None:
    try:
        parsed = date_parser.parse(timestamp)
    except (ValueError, OverflowError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(timestamp: str) -> str:
    """Local-time display string such as ``1/15/2024, 10:30:00 AM``.

    Anything that cannot be parsed or shifted to local time is returned as is.
    """
    parsed = _parse(timestamp)
    if parsed is None:
        return timestamp
    try:
        local = parsed.astimezone()
    except (OverflowError, ValueError, OSError):
        # Dates at the edge of the calendar (0001-01-01) cannot shift west.
        return timestamp
    hour = local.hour % 12 or 12
    return (
        f"{local.month}/{local.day}/{local.year}, "
        f"{hour}:{local:%M}:{local:%S} {'AM' if local.hour < 12 else 'PM'}"
    )


def truncate(text: str, limit: int = CONTENT_PREVIEW_CHARS) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def _row(mention: Mention, kind: str) -> list[Cell]:
    when = format_timestamp(mention.timestamp)
    if kind == SOCIAL:
        return [
            mention.link,
            mention.views or 0,
            mention.author,
            mention.followers or 0,
            truncate(mention.content),
            when,
        ]
    if kind == NEWS:
        return [
            mention.publication,
            mention.headline,
            mention.link,
            mention.author,
            when,
            mention.notes,
        ]
    return [
        mention.publication,
        mention.headline,
        mention.link,
        mention.author,
        when,
        mention.reach or 0,
        mention.sentiment or "neutral",
        mention.notes,
    ]


def to_table(mentions: Iterable[Mention], kind: str) -> Table:
    """Header row followed by one row per mention, in input order."""
    if kind not in HEADERS:
        raise ValueError(f"No table layout for {kind!r}")
    return [list(HEADERS[kind])] + [_row(m, kind) for m in mentions]


def column_letter(width: int) -> str:
    letters = ""
    while width > 0:
        width, rem = divmod(width - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def humanize_count(num: int) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return str(num)


def time_ago(timestamp: str, now: datetime | None = None) -> str:
    parsed = _parse(timestamp)
    if parsed is None:
        return timestamp
    now = now or datetime.now(timezone.utc)
    seconds = int((now - parsed).total_seconds())
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"
