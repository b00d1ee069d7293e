"""Meltwater media monitoring: search API, webhook pushes and CSV exports."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from typing import Any, Iterable, Mapping

import httpx

from collectors.base import BaseCollector
from config.settings import settings
from core.csv_decoder import decode
from core.errors import CollectionError, SignatureError
from core.models import MONITORING, CollectionConfig, Mention
from core.normalize import normalize_csv_row, normalize_document
from core.query import QueryDialect, build_query, parse_terms

log = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Meltwater-Signature"
SIGNATURE_PREFIX = "sha256="


def documents_from_payload(payload: Any) -> list[Mention]:
    if not isinstance(payload, Mapping):
        return []
    documents = payload.get("documents")
    if not isinstance(documents, list):
        return []
    return [normalize_document(doc) for doc in documents]


class MeltwaterCollector(BaseCollector):
    source_name = "meltwater"
    display_name = "Meltwater"
    table_kind = MONITORING
    credential_field = "meltwater_api_key"
    api_label = "Meltwater API"

    def __init__(self) -> None:
        self._url = f"{settings.MELTWATER_API_URL.rstrip('/')}/searches"
        self._limit = settings.MELTWATER_LIMIT

    async def collect(
        self, config: CollectionConfig, client: httpx.AsyncClient
    ) -> list[Mention]:
        query = build_query(config.search_terms, config.client_name, QueryDialect.QUOTED)
        data = await self.get_json(
            client,
            self._url,
            params={
                "q": query,
                "limit": str(self._limit),
                "sort": "date",
                "format": "json",
            },
            headers={"Authorization": f"Bearer {config.meltwater_api_key.strip()}"},
        )
        mentions = documents_from_payload(data)
        log.info("Meltwater query '%s': %d documents", query, len(mentions))
        return mentions


# ── webhook ──────────────────────────────────────────────────────────


def sign(body: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(body: bytes, signature: str, secret: str) -> bool:
    """HMAC-SHA256 of the raw body; accepts ``sha256=<hex>`` or bare hex."""
    provided = signature.strip().lower()
    if provided.startswith(SIGNATURE_PREFIX):
        provided = provided[len(SIGNATURE_PREFIX):]
    expected = sign(body, secret)[len(SIGNATURE_PREFIX):]
    return hmac.compare_digest(expected.encode("ascii"), provided.encode("utf-8"))


class MeltwaterWebhook:
    """Receives pushed documents.

    Without a secret nothing is verified. With a secret, a signature that is
    present but wrong is rejected; a missing signature is rejected only when
    ``require_signature`` is set.
    """

    def __init__(self, secret: str = "", require_signature: bool = False) -> None:
        self._secret = secret
        self._require_signature = require_signature

    def check_signature(self, body: bytes, signature: str | None) -> None:
        if not self._secret:
            return
        if not signature:
            if self._require_signature:
                raise SignatureError("Missing webhook signature")
            return
        if not verify_signature(body, signature, self._secret):
            raise SignatureError("Invalid webhook signature")

    def receive(self, body: bytes, signature: str | None = None) -> list[Mention]:
        self.check_signature(body, signature)
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise CollectionError("Meltwater", "Webhook body is not valid JSON") from exc
        mentions = documents_from_payload(payload)
        log.info("Meltwater webhook: %d documents", len(mentions))
        return mentions


# ── CSV exports ──────────────────────────────────────────────────────


def filter_by_terms(mentions: Iterable[Mention], search_terms: str | None) -> list[Mention]:
    """Keep mentions whose headline or content contains any term, ignoring case."""
    terms = [term.casefold() for term in parse_terms(search_terms)]
    if not terms:
        return list(mentions)
    kept = []
    for mention in mentions:
        text = f"{mention.headline} {mention.content}".casefold()
        if any(term in text for term in terms):
            kept.append(mention)
    return kept


def collect_csv(text: str, config: CollectionConfig) -> list[Mention]:
    rows = decode(text)
    mentions = filter_by_terms(
        (normalize_csv_row(row) for row in rows), config.search_terms
    )
    log.info("Meltwater CSV: %d rows decoded, %d kept", len(rows), len(mentions))
    return mentions
