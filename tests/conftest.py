from __future__ import annotations

import pytest

from core.models import CollectionConfig
from fakes import (
    MELTWATER_HOST,
    MELTWATER_RESPONSE,
    NEWS_HOST,
    NEWS_RESPONSE,
    SHEETS_HOST,
    TWITTER_HOST,
    TWITTER_RESPONSE,
    FakeUpstream,
    ok,
)


@pytest.fixture
def upstream() -> FakeUpstream:
    fake = FakeUpstream()
    fake.route(TWITTER_HOST, ok(TWITTER_RESPONSE))
    fake.route(NEWS_HOST, ok(NEWS_RESPONSE))
    fake.route(MELTWATER_HOST, ok(MELTWATER_RESPONSE))
    fake.route(SHEETS_HOST, ok({"updatedRows": 1}))
    return fake


@pytest.fixture
def full_config() -> CollectionConfig:
    return CollectionConfig(
        client_name="Acme",
        search_terms="rocket, launch",
        twitter_bearer_token="twitter-token",
        google_api_key="google-key",
        meltwater_api_key="meltwater-key",
    )
