import json

import httpx
import pytest

from core.errors import SinkError
from fakes import SHEETS_HOST, status
from sinks.sheets import GoogleSheetsSink

ROWS = [["Publication", "Headline"], ["Reuters", "Acme wins"]]


@pytest.fixture
def sink(upstream):
    client = httpx.AsyncClient(transport=upstream.transport)
    yield GoogleSheetsSink(client, " sheet-1 ", "google-key")


@pytest.mark.asyncio
async def test_update_puts_values_into_range(upstream, sink):
    result = await sink.update("News!A1:B2", ROWS)

    put = upstream.requests_to(SHEETS_HOST)[0]
    assert put.method == "PUT"
    assert put.url.path == "/v4/spreadsheets/sheet-1/values/News!A1:B2"
    assert put.url.params["valueInputOption"] == "USER_ENTERED"
    assert json.loads(put.content) == {"values": ROWS}
    assert result == {"updatedRows": 1}


@pytest.mark.asyncio
async def test_append_posts_to_the_append_action(upstream, sink):
    await sink.append("News!A1", ROWS[1:])

    post = upstream.requests_to(SHEETS_HOST)[0]
    assert post.method == "POST"
    assert post.url.path == "/v4/spreadsheets/sheet-1/values/News!A1:append"
    assert post.url.params["key"] == "google-key"
    assert json.loads(post.content) == {"values": [["Reuters", "Acme wins"]]}


@pytest.mark.asyncio
async def test_write_sizes_the_range_to_the_table(upstream, sink):
    await sink.write("Meltwater", [["a", "b", "c"], [1, 2, 3], [4, 5, 6]])

    assert list(upstream.sheet_writes()) == ["Meltwater!A1:C3"]


@pytest.mark.asyncio
async def test_rejected_append_is_a_sink_error(upstream, sink):
    upstream.route(SHEETS_HOST, status(403))

    with pytest.raises(SinkError, match="Google Sheets API error: 403 Forbidden"):
        await sink.append("News!A1", ROWS)
