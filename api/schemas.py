"""Request bodies. The dashboard sends camelCase keys."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from core.models import CollectionConfig


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ConfigPayload(_CamelModel):
    client_name: str | None = None
    search_terms: str | None = None
    twitter_bearer_token: str | None = None
    google_api_key: str | None = None
    meltwater_api_key: str | None = None
    google_sheets_id: str | None = None

    def to_config(self) -> CollectionConfig:
        return CollectionConfig(
            client_name=self.client_name or "",
            search_terms=self.search_terms or "",
            twitter_bearer_token=self.twitter_bearer_token or "",
            google_api_key=self.google_api_key or "",
            meltwater_api_key=self.meltwater_api_key or "",
            google_sheets_id=self.google_sheets_id or "",
        )


class CollectRequest(_CamelModel):
    config: ConfigPayload | None = None
    # Optional subset of report keys; credentials still decide what runs.
    sources: list[str] | None = None

    def to_config(self) -> CollectionConfig:
        return self.config.to_config() if self.config else CollectionConfig()


class CsvRequest(_CamelModel):
    csv_data: str | None = None
    config: ConfigPayload | None = None

    def to_config(self) -> CollectionConfig:
        return self.config.to_config() if self.config else CollectionConfig()
