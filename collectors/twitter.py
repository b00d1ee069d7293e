"""Social collector backed by the Twitter/X v2 recent-search API."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from collectors.base import BaseCollector
from config.settings import settings
from core.models import SOCIAL, CollectionConfig, Mention
from core.normalize import normalize_tweet
from core.query import QueryDialect, build_query

log = logging.getLogger(__name__)

TWEET_FIELDS = "public_metrics,created_at,author_id"
USER_FIELDS = "public_metrics,username,name"


def tweets_from_response(data: Mapping[str, Any]) -> list[Mention]:
    """Normalise a search response, attaching each tweet's expanded author.

    Tweets whose author is missing from ``includes.users`` are still kept,
    with an unknown author.
    """
    includes = data.get("includes")
    users: dict[str, Mapping[str, Any]] = {}
    expanded = includes.get("users") if isinstance(includes, Mapping) else None
    if isinstance(expanded, list):
        for user in expanded:
            if isinstance(user, Mapping) and user.get("id") is not None:
                users[str(user["id"])] = user

    tweets = data.get("data")
    if not isinstance(tweets, list):
        return []
    return [
        normalize_tweet(tweet, users.get(str(tweet.get("author_id")), {}))
        for tweet in tweets
        if isinstance(tweet, Mapping)
    ]


class TwitterCollector(BaseCollector):
    source_name = "twitter"
    display_name = "Twitter"
    table_kind = SOCIAL
    credential_field = "twitter_bearer_token"
    api_label = "Twitter API"

    def __init__(self) -> None:
        self._url = f"{settings.TWITTER_API_URL.rstrip('/')}/tweets/search/recent"
        self._max_results = settings.TWITTER_MAX_RESULTS

    async def collect(
        self, config: CollectionConfig, client: httpx.AsyncClient
    ) -> list[Mention]:
        query = build_query(config.search_terms, config.client_name, QueryDialect.SOCIAL)
        data = await self.get_json(
            client,
            self._url,
            params={
                "query": query,
                "max_results": str(self._max_results),
                "tweet.fields": TWEET_FIELDS,
                "user.fields": USER_FIELDS,
                "expansions": "author_id",
            },
            headers={"Authorization": f"Bearer {config.twitter_bearer_token.strip()}"},
        )
        mentions = tweets_from_response(data)
        log.info("Twitter query '%s': %d tweets", query, len(mentions))
        return mentions
