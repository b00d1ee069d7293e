from __future__ import annotations

from config.settings import Settings, settings
from core.models import CollectionConfig


def default_config(source: Settings = settings) -> CollectionConfig:
    """Collection config built from the server's own environment."""
    return CollectionConfig(
        client_name=source.COLLECT_CLIENT_NAME,
        search_terms=source.COLLECT_SEARCH_TERMS,
        twitter_bearer_token=source.TWITTER_BEARER_TOKEN,
        google_api_key=source.GOOGLE_API_KEY,
        meltwater_api_key=source.MELTWATER_API_KEY,
        google_sheets_id=source.GOOGLE_SHEETS_ID,
    )
