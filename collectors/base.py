from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

import httpx

from core.errors import CollectionError
from core.models import CollectionConfig, Mention


class BaseCollector(ABC):
    source_name: str  # key in the Report ("twitter", "news", "meltwater")
    display_name: str  # prefix for error strings ("Twitter", ...)
    table_kind: str  # Mention.source of what it produces
    credential_field: str  # CollectionConfig attribute that enables it
    api_label: str  # how upstream failures are described

    def enabled(self, config: CollectionConfig) -> bool:
        """A source without its credential is simply not run."""
        return bool(getattr(config, self.credential_field, "").strip())

    @abstractmethod
    async def collect(
        self, config: CollectionConfig, client: httpx.AsyncClient
    ) -> list[Mention]:
        """Fetch and normalise one batch; raise CollectionError on failure."""
        ...

    def fail(self, message: str) -> CollectionError:
        return CollectionError(self.display_name, message)

    async def get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        params: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> Mapping[str, Any]:
        """GET ``url`` once and return its JSON object body."""
        try:
            resp = await client.get(url, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            raise self.fail(f"{self.api_label} timed out") from exc
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, TypeError) as exc:
            # ValueError: a header value that is not ASCII, such as a pasted token
            raise self.fail(f"{self.api_label} request failed: {exc}") from exc

        if not resp.is_success:
            raise self.fail(
                f"{self.api_label} error: {resp.status_code} {resp.reason_phrase}"
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise self.fail(f"{self.api_label} returned invalid JSON") from exc
        if not isinstance(data, Mapping):
            raise self.fail(f"{self.api_label} returned an unexpected payload")
        return data
