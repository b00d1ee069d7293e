"""Search-query construction for each upstream dialect."""

from __future__ import annotations

from enum import Enum

from core.errors import ConfigurationError


class QueryDialect(str, Enum):
    SOCIAL = "social"  # quoted OR, no reposts, English only
    QUOTED = "quoted"  # quoted OR (monitoring vendor)
    PLAIN = "plain"  # bare OR terms, quoted client name (news search)


SOCIAL_SUFFIX = " -is:retweet lang:en"


def parse_terms(search_terms: str | None) -> list[str]:
    """Split comma-separated terms, trimming and dropping blanks and repeats."""
    terms: list[str] = []
    for raw in (search_terms or "").split(","):
        term = raw.strip()
        if term and term not in terms:
            terms.append(term)
    return terms


def build_query(
    search_terms: str | None,
    client_name: str | None = None,
    dialect: QueryDialect = QueryDialect.QUOTED,
) -> str:
    """Build one disjunctive query from ``search_terms`` and ``client_name``.

    A client name that already appears among the terms is not repeated.
    Raises ConfigurationError when there is nothing at all to search for.
    """
    terms = parse_terms(search_terms)
    client = (client_name or "").strip()
    if client in terms:
        client = ""
    if not terms and not client:
        raise ConfigurationError("No search terms or client name to query for")

    if dialect is QueryDialect.PLAIN:
        parts = list(terms)
    else:
        parts = [f'"{term}"' for term in terms]
    if client:
        parts.append(f'"{client}"')

    query = " OR ".join(parts)
    if dialect is QueryDialect.SOCIAL:
        query += SOCIAL_SUFFIX
    return query
