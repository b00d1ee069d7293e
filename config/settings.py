from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    DASHBOARD_PORT: int = 8001
    LOG_LEVEL: str = "INFO"

    # Outbound HTTP; every upstream call gets this timeout, there are no retries
    HTTP_TIMEOUT_SECONDS: float = 30.0
    USER_AGENT: str = "MediaMentionTracker/1.0"

    # Upstream endpoints
    TWITTER_API_URL: str = "https://api.twitter.com/2"
    TWITTER_MAX_RESULTS: int = 50
    NEWS_API_URL: str = "https://newsapi.org/v2"
    NEWS_PAGE_SIZE: int = 20
    MELTWATER_API_URL: str = "https://api.meltwater.com/v2"
    MELTWATER_LIMIT: int = 50
    SHEETS_API_URL: str = "https://sheets.googleapis.com/v4/spreadsheets"

    # Meltwater webhook. No secret means pushes are trusted unverified.
    MELTWATER_WEBHOOK_SECRET: str = ""
    MELTWATER_WEBHOOK_REQUIRE_SIGNATURE: bool = False

    # Server-side default collection, used by the scheduler and the CLI
    COLLECT_CLIENT_NAME: str = ""
    COLLECT_SEARCH_TERMS: str = ""
    TWITTER_BEARER_TOKEN: str = ""
    GOOGLE_API_KEY: str = ""
    MELTWATER_API_KEY: str = ""
    GOOGLE_SHEETS_ID: str = ""
    COLLECT_INTERVAL_MINUTES: int = 0  # 0 disables scheduled runs

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
