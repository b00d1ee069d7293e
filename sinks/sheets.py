"""Google Sheets values API, used as a write-only sink for mention tables."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from config.settings import settings
from core.errors import SinkError
from core.tables import Table, column_letter

log = logging.getLogger(__name__)


class GoogleSheetsSink:
    def __init__(
        self,
        client: httpx.AsyncClient,
        spreadsheet_id: str,
        api_key: str,
        base_url: str | None = None,
    ) -> None:
        self._client = client
        self._spreadsheet_id = spreadsheet_id.strip()
        self._api_key = api_key.strip()
        self._base_url = (base_url or settings.SHEETS_API_URL).rstrip("/")

    def _values_url(self, range_: str, action: str = "") -> str:
        return f"{self._base_url}/{self._spreadsheet_id}/values/{quote(range_, safe='!:')}{action}"

    async def _send(self, method: str, url: str, values: Table) -> dict[str, Any]:
        try:
            resp = await self._client.request(
                method,
                url,
                params={"valueInputOption": "USER_ENTERED", "key": self._api_key},
                json={"values": values},
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise SinkError(f"Google Sheets request failed: {exc}") from exc
        if not resp.is_success:
            raise SinkError(
                f"Google Sheets API error: {resp.status_code} {resp.reason_phrase}"
            )
        try:
            return resp.json()
        except ValueError:
            return {}

    async def update(self, range_: str, values: Table) -> dict[str, Any]:
        """Overwrite ``range_`` with ``values``."""
        result = await self._send("PUT", self._values_url(range_), values)
        log.info("Wrote %d rows to %s", len(values), range_)
        return result

    async def append(self, range_: str, values: Table) -> dict[str, Any]:
        """Add ``values`` after the last row of the table found in ``range_``."""
        result = await self._send("POST", self._values_url(range_, ":append"), values)
        log.info("Appended %d rows to %s", len(values), range_)
        return result

    async def write(self, sheet_name: str, table: Table) -> dict[str, Any]:
        """Write a whole table starting at A1 of ``sheet_name``."""
        width = max((len(row) for row in table), default=1)
        range_ = f"{sheet_name}!A1:{column_letter(width)}{max(len(table), 1)}"
        return await self.update(range_, table)
