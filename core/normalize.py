"""Map raw vendor records onto the canonical Mention shape.

Every function here is total: anything that is missing, blank or of the wrong
type falls back to the Mention defaults instead of raising. A missing or
unparseable publication time becomes "now", so an undated item cannot be told
apart from one published at collection time.
"""

from __future__ import annotations

import logging
import secrets
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from dateutil import parser as date_parser

from core.models import (
    MONITORING,
    NEWS,
    NO_TITLE,
    SENTIMENTS,
    SOCIAL,
    UNKNOWN,
    Mention,
)

log = logging.getLogger(__name__)

_EMPTY: Mapping[str, Any] = {}


# ── helpers ──────────────────────────────────────────────────────────


def generate_id(tag: str) -> str:
    """Best-effort unique id: source tag, epoch millis and a random suffix."""
    return f"{tag}_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else _EMPTY


def _text(value: Any, default: str = "") -> str:
    if value is None or isinstance(value, (bool, Mapping, list, tuple, set)):
        return default
    text = str(value)
    return text if text.strip() else default


def _ident(value: Any) -> str:
    return _text(value).strip()


def _count(value: Any) -> int:
    """Non-negative integer from an int, float or "1,234"-style string."""
    if isinstance(value, bool):
        return 0
    try:
        if isinstance(value, (int, float)):
            number = int(value)
        elif isinstance(value, str):
            number = int(float(value.strip().replace(",", "")))
        else:
            return 0
    except (ValueError, OverflowError):
        return 0
    return max(number, 0)


def _timestamp(value: Any) -> str:
    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 1e12 else value
        try:
            parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            parsed = None
    elif isinstance(value, str) and value.strip():
        try:
            parsed = date_parser.parse(value.strip())
        except (ValueError, OverflowError):
            log.debug("Unparseable timestamp %r, using current time", value)

    if parsed is None:
        parsed = datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat()


def _sentiment(value: Any) -> str:
    sentiment = _text(value).strip().lower()
    return sentiment if sentiment in SENTIMENTS else "neutral"


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [_text(v) for v in value]
    else:
        return []
    return [item.strip() for item in items if item.strip()]


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    """First non-blank value among several spellings of the same column."""
    for key in keys:
        value = row.get(key)
        if _text(value):
            return value
    return None


def infer_media_type(media_type: Any, source_name: Any = "") -> str:
    kind = _text(media_type).lower()
    source = _text(source_name).lower()
    if "social" in kind or "twitter" in source or "facebook" in source:
        return "social"
    if "news" in kind or "print" in kind:
        return "news"
    if "blog" in kind:
        return "blog"
    return "unknown"


# ── per-source normalisers ───────────────────────────────────────────


def normalize_tweet(raw: Any, user: Any = None) -> Mention:
    """Tweet from the v2 search API, with its expanded author if known.

    ``user`` may also be embedded in the tweet under ``"user"``.
    """
    tweet = _as_mapping(raw)
    author = _as_mapping(user if user is not None else tweet.get("user"))
    metrics = _as_mapping(tweet.get("public_metrics"))
    author_metrics = _as_mapping(author.get("public_metrics"))

    tweet_id = _ident(tweet.get("id"))
    username = _ident(author.get("username")).lstrip("@")
    if tweet_id and username:
        link = f"https://x.com/{username}/status/{tweet_id}"
    elif tweet_id:
        link = f"https://x.com/i/web/status/{tweet_id}"
    else:
        link = ""

    text = _text(tweet.get("text"))
    return Mention(
        id=tweet_id or generate_id("tweet"),
        source=SOCIAL,
        type="social",
        headline=text or NO_TITLE,
        content=text,
        link=link,
        publication="Twitter",
        author=f"@{username}" if username else UNKNOWN,
        timestamp=_timestamp(tweet.get("created_at")),
        views=_count(metrics.get("impression_count")),
        followers=_count(author_metrics.get("followers_count")),
        retweets=_count(metrics.get("retweet_count")),
        likes=_count(metrics.get("like_count")),
    )


def normalize_article(raw: Any) -> Mention:
    article = _as_mapping(raw)
    outlet = _as_mapping(article.get("source"))
    return Mention(
        id=_ident(article.get("id")) or generate_id("article"),
        source=NEWS,
        type="news",
        headline=_text(article.get("title"), NO_TITLE),
        content=_text(article.get("description")) or _text(article.get("content")),
        link=_ident(article.get("url")),
        publication=_text(outlet.get("name"), UNKNOWN),
        author=_text(article.get("author"), UNKNOWN),
        timestamp=_timestamp(article.get("publishedAt")),
    )


def normalize_document(raw: Any) -> Mention:
    """Document from the monitoring vendor's search API or webhook push."""
    doc = _as_mapping(raw)
    publication = _text(_as_mapping(doc.get("source")).get("name")) or _text(
        doc.get("sourceName"), UNKNOWN
    )
    return Mention(
        id=_ident(doc.get("id")) or generate_id("meltwater"),
        source=MONITORING,
        type=infer_media_type(doc.get("mediaType"), publication),
        headline=_text(doc.get("title")) or _text(doc.get("headline"), NO_TITLE),
        content=_text(doc.get("content")) or _text(doc.get("summary")),
        link=_ident(doc.get("url")) or _ident(doc.get("link")),
        publication=publication,
        author=_text(doc.get("author"), UNKNOWN),
        timestamp=_timestamp(doc.get("publishedAt") or doc.get("date")),
        reach=_count(doc.get("reach")),
        engagement=_count(doc.get("engagement")),
        sentiment=_sentiment(doc.get("sentiment")),
        tags=_string_list(doc.get("tags")),
        mentions=_string_list(doc.get("mentions")),
        language=_text(doc.get("language"), "en"),
        country=_text(doc.get("country"), "unknown"),
    )


def normalize_csv_row(raw: Any) -> Mention:
    """Row from a monitoring-vendor CSV export; column names vary by export."""
    row = _as_mapping(raw)
    publication = _text(_first(row, "Source", "Publication", "source"), UNKNOWN)
    return Mention(
        id=_ident(_first(row, "ID", "id")) or generate_id("meltwater_csv"),
        source=MONITORING,
        type=infer_media_type(
            _first(row, "Media Type", "mediaType"),
            _first(row, "Source", "source"),
        ),
        headline=_text(_first(row, "Title", "Headline", "title"), NO_TITLE),
        content=_text(_first(row, "Content", "Summary", "content")),
        link=_ident(_first(row, "URL", "Link", "url")),
        publication=publication,
        author=_text(_first(row, "Author", "Reporter", "author"), UNKNOWN),
        timestamp=_timestamp(_first(row, "Date", "Published Date", "publishedAt")),
        reach=_count(_first(row, "Reach", "reach")),
        engagement=_count(_first(row, "Engagement", "engagement")),
        sentiment=_sentiment(_first(row, "Sentiment", "sentiment")),
        tags=_string_list(_first(row, "Tags", "tags")),
        mentions=_string_list(_first(row, "Mentions", "mentions")),
        language=_text(_first(row, "Language", "language"), "en"),
        country=_text(_first(row, "Country", "country"), "unknown"),
    )


NORMALIZERS: dict[str, Callable[[Any], Mention]] = {
    "social": normalize_tweet,
    "news": normalize_article,
    "monitoring": normalize_document,
    "monitoring_csv": normalize_csv_row,
}


def normalize(kind: str, raw: Any) -> Mention:
    try:
        normalizer = NORMALIZERS[kind]
    except KeyError:
        raise ValueError(f"Unknown record kind: {kind!r}") from None
    return normalizer(raw)
