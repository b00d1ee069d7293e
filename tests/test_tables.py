import re
import time
from datetime import datetime, timezone

import pytest

from core.models import MONITORING, NEWS, SOCIAL
from core.normalize import normalize
from core.tables import (
    HEADERS,
    column_letter,
    format_timestamp,
    humanize_count,
    time_ago,
    to_table,
    truncate,
)

DISPLAY_TIME = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}, \d{1,2}:\d{2}:\d{2} (AM|PM)$")


def test_each_kind_has_its_own_header():
    assert to_table([], SOCIAL) == [["Link", "Views", "Handle", "Followers", "Content", "Timestamp"]]
    assert to_table([], NEWS)[0] == ["Publication", "Headline", "Link", "Reporter", "Timestamp", "Notes"]
    assert len(to_table([], MONITORING)[0]) == 8


def test_social_rows_truncate_long_content_only():
    short = normalize("social", {"id": "1", "text": "x" * 100, "created_at": "2024-01-01T00:00:00Z"})
    long = normalize("social", {"id": "2", "text": "y" * 150, "created_at": "2024-01-01T00:00:00Z"})

    table = to_table([short, long], SOCIAL)

    assert table[1][4] == "x" * 100
    assert table[2][4] == "y" * 100 + "..."
    # the mention itself keeps the full text
    assert long.content == "y" * 150


def test_news_rows_reproduce_identifying_fields():
    mentions = [
        normalize(
            "news",
            {
                "title": f"Headline {i}",
                "url": f"https://example.com/{i}",
                "author": f"Reporter {i}",
                "source": {"name": f"Outlet {i}"},
                "publishedAt": "2024-01-15T09:00:00Z",
            },
        )
        for i in range(3)
    ]

    rows = to_table(mentions, NEWS)[1:]

    for mention, row in zip(mentions, rows):
        record = dict(zip(HEADERS[NEWS], row))
        assert record["Publication"] == mention.publication
        assert record["Headline"] == mention.headline
        assert record["Link"] == mention.link
        assert record["Reporter"] == mention.author
        assert record["Notes"] == ""


def test_monitoring_rows_keep_input_order_and_metrics():
    first = normalize("monitoring", {"id": "b", "title": "Second alphabetically", "reach": 10, "sentiment": "negative"})
    second = normalize("monitoring", {"id": "a", "title": "First alphabetically", "reach": -3})

    rows = to_table([first, second], MONITORING)[1:]

    assert [r[1] for r in rows] == ["Second alphabetically", "First alphabetically"]
    assert rows[0][5:7] == [10, "negative"]
    assert rows[1][5:7] == [0, "neutral"]


def test_timestamps_are_rendered_for_display():
    assert DISPLAY_TIME.match(format_timestamp("2024-01-15T10:30:00+00:00"))
    assert format_timestamp("whenever") == "whenever"


@pytest.fixture
def west_of_utc(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("needs time.tzset")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_earliest_representable_date_is_kept_verbatim(west_of_utc):
    mention = normalize(
        "news",
        {"title": "Old news", "url": "https://e.example", "publishedAt": "0001-01-01T00:00:00Z"},
    )

    row = to_table([mention], NEWS)[1]

    assert row[4] == mention.timestamp


def test_unknown_kind_has_no_layout():
    with pytest.raises(ValueError):
        to_table([], "fax")


@pytest.mark.parametrize("width, letter", [(1, "A"), (6, "F"), (8, "H"), (26, "Z"), (27, "AA")])
def test_column_letter(width, letter):
    assert column_letter(width) == letter


def test_truncate_boundary():
    assert truncate("abc", 3) == "abc"
    assert truncate("abcd", 3) == "abc..."


@pytest.mark.parametrize("num, text", [(999, "999"), (1500, "1.5K"), (2_500_000, "2.5M")])
def test_humanize_count(num, text):
    assert humanize_count(num) == text


def test_time_ago_buckets():
    now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    assert time_ago("2024-01-15T11:59:30+00:00", now) == "Just now"
    assert time_ago("2024-01-15T11:15:00+00:00", now) == "45m ago"
    assert time_ago("2024-01-15T09:00:00+00:00", now) == "3h ago"
    assert time_ago("2024-01-12T12:00:00+00:00", now) == "3d ago"
