from __future__ import annotations

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Mapping

from core.errors import ConfigurationError

# Mention.source values
SOCIAL = "social"
NEWS = "news"
MONITORING = "monitoring"

MENTION_TYPES = ("social", "news", "blog", "unknown")
SENTIMENTS = ("positive", "neutral", "negative")

NO_TITLE = "No title"
UNKNOWN = "Unknown"

_SOCIAL_FIELDS = ("views", "followers", "retweets", "likes")
_MONITORING_FIELDS = (
    "reach", "engagement", "sentiment", "tags", "mentions", "language", "country",
)


@dataclass
class Mention:
    """A single piece of coverage normalised from any source."""

    id: str
    source: str  # "social", "news", "monitoring"
    timestamp: str  # ISO-8601, UTC
    type: str = "unknown"
    headline: str = NO_TITLE
    content: str = ""
    link: str = ""
    publication: str = UNKNOWN
    author: str = UNKNOWN
    notes: str = ""
    # social only
    views: int | None = None
    followers: int | None = None
    retweets: int | None = None
    likes: int | None = None
    # monitoring only
    reach: int | None = None
    engagement: int | None = None
    sentiment: str | None = None
    tags: list[str] | None = None
    mentions: list[str] | None = None
    language: str | None = None
    country: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.source != SOCIAL:
            for key in _SOCIAL_FIELDS:
                data.pop(key)
        if self.source != MONITORING:
            for key in _MONITORING_FIELDS:
                data.pop(key)
        return data


# Report keys, in the order sources are listed to the operator.
SOURCE_TOTAL_KEYS = {
    "twitter": "totalPosts",
    "news": "totalArticles",
    "meltwater": "totalMeltwaterItems",
}


@dataclass(frozen=True)
class Report:
    """Outcome of one collection run: mentions per source plus errors."""

    mentions: Mapping[str, tuple[Mention, ...]]
    errors: tuple[str, ...] = ()
    duration_seconds: float = 0.0

    @classmethod
    def build(
        cls,
        mentions: Mapping[str, list[Mention]],
        errors: list[str],
        duration_seconds: float = 0.0,
    ) -> Report:
        frozen = {source: tuple(items) for source, items in mentions.items()}
        return cls(
            mentions=MappingProxyType(frozen),
            errors=tuple(errors),
            duration_seconds=duration_seconds,
        )

    def get(self, source: str) -> tuple[Mention, ...]:
        return self.mentions.get(source, ())

    @property
    def total(self) -> int:
        return sum(len(items) for items in self.mentions.values())

    @property
    def totals(self) -> dict[str, int]:
        return {
            key: len(self.get(source)) for source, key in SOURCE_TOTAL_KEYS.items()
        }

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            source: [m.to_dict() for m in items]
            for source, items in self.mentions.items()
        }
        data["errors"] = list(self.errors)
        return data


@dataclass(frozen=True)
class CollectionConfig:
    """Operator configuration for one run. Empty string means "not set"."""

    client_name: str = ""
    search_terms: str = ""
    twitter_bearer_token: str = ""
    google_api_key: str = ""
    meltwater_api_key: str = ""
    google_sheets_id: str = ""

    @property
    def sheets_enabled(self) -> bool:
        return bool(self.google_sheets_id.strip() and self.google_api_key.strip())

    def validate(self, require_credentials: bool = False) -> list[str]:
        problems: list[str] = []
        if not self.client_name.strip():
            problems.append("Client name is required")
        if not self.search_terms.strip():
            problems.append("Search terms are required")
        if require_credentials and not any(
            token.strip()
            for token in (
                self.twitter_bearer_token,
                self.google_api_key,
                self.meltwater_api_key,
            )
        ):
            problems.append(
                "At least one API key (Twitter, Google or Meltwater) is required"
            )
        return problems

    def ensure_valid(self, require_credentials: bool = False) -> None:
        problems = self.validate(require_credentials)
        if problems:
            raise ConfigurationError("; ".join(problems))
