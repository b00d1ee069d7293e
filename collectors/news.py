from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from collectors.base import BaseCollector
from config.settings import settings
from core.models import NEWS, CollectionConfig, Mention
from core.normalize import normalize_article
from core.query import QueryDialect, build_query

log = logging.getLogger(__name__)


def articles_from_response(data: Mapping[str, Any]) -> list[Mention]:
    """Keep only articles that carry both a title and a URL."""
    articles = data.get("articles")
    if not isinstance(articles, list):
        return []
    kept: list[Mention] = []
    for article in articles:
        if not isinstance(article, Mapping):
            continue
        if not article.get("title") or not article.get("url"):
            continue
        kept.append(normalize_article(article))
    return kept


class NewsCollector(BaseCollector):
    source_name = "news"
    display_name = "News"
    table_kind = NEWS
    credential_field = "google_api_key"
    api_label = "News API"

    def __init__(self) -> None:
        self._url = f"{settings.NEWS_API_URL.rstrip('/')}/everything"
        self._page_size = settings.NEWS_PAGE_SIZE

    async def collect(
        self, config: CollectionConfig, client: httpx.AsyncClient
    ) -> list[Mention]:
        query = build_query(config.search_terms, config.client_name, QueryDialect.PLAIN)
        data = await self.get_json(
            client,
            self._url,
            params={
                "q": query,
                "apiKey": config.google_api_key.strip(),
                "pageSize": str(self._page_size),
                "sortBy": "publishedAt",
                "language": "en",
            },
        )
        mentions = articles_from_response(data)
        log.info("News query '%s': %d articles", query, len(mentions))
        return mentions
