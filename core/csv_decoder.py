"""Minimal CSV decoding for monitoring-vendor exports.

Quotes only toggle "inside a field" mode; they are never kept in the output
and doubled quotes are not treated as escapes. Rows whose field count differs
from the header are dropped rather than repaired.
"""

from __future__ import annotations

import logging

log = logging.getLogger(__name__)


def split_line(line: str) -> list[str]:
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def decode(text: str | None) -> list[dict[str, str]]:
    lines = (text or "").split("\n")
    if len(lines) < 2:
        return []

    # split_line already trims cells and consumes their quotes
    headers = split_line(lines[0].strip())
    rows: list[dict[str, str]] = []
    dropped = 0
    for raw_line in lines[1:]:
        line = raw_line.strip()
        if not line:
            continue
        values = split_line(line)
        if len(values) != len(headers):
            dropped += 1
            continue
        rows.append(dict(zip(headers, values)))

    if dropped:
        log.warning("Dropped %d CSV rows with a field count other than %d", dropped, len(headers))
    return rows
