import json

import httpx
import pytest

from collectors.meltwater import (
    MeltwaterCollector,
    MeltwaterWebhook,
    collect_csv,
    filter_by_terms,
    sign,
    verify_signature,
)
from collectors.news import NewsCollector
from collectors.twitter import TwitterCollector, tweets_from_response
from core.errors import CollectionError, SignatureError
from core.models import CollectionConfig
from core.normalize import normalize
from fakes import MELTWATER_HOST, NEWS_HOST, TWITTER_HOST, status


@pytest.fixture
def client_for(upstream):
    def _make() -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=upstream.transport)

    return _make


@pytest.mark.asyncio
async def test_twitter_collector_requests_expanded_authors(upstream, client_for, full_config):
    async with client_for() as client:
        mentions = await TwitterCollector().collect(full_config, client)

    request = upstream.requests_to(TWITTER_HOST)[0]
    assert request.url.path == "/2/tweets/search/recent"
    assert request.headers["Authorization"] == "Bearer twitter-token"
    assert request.url.params["expansions"] == "author_id"
    assert request.url.params["max_results"] == "50"
    assert request.url.params["query"] == '"rocket" OR "launch" OR "Acme" -is:retweet lang:en'
    assert [m.author for m in mentions] == ["@acmefan", "@skeptic"]
    assert mentions[0].followers == 500


def test_tweets_without_data_yield_nothing():
    assert tweets_from_response({"meta": {"result_count": 0}}) == []


def test_author_expansion_of_the_wrong_shape_is_ignored():
    mentions = tweets_from_response({"data": [{"id": "9", "author_id": "1"}], "includes": {"users": 5}})

    assert [m.author for m in mentions] == ["Unknown"]


@pytest.mark.asyncio
async def test_twitter_error_status_becomes_collection_error(upstream, client_for, full_config):
    upstream.route(TWITTER_HOST, status(401))

    async with client_for() as client:
        with pytest.raises(CollectionError) as excinfo:
            await TwitterCollector().collect(full_config, client)

    assert excinfo.value.source == "Twitter"
    assert str(excinfo.value) == "Twitter API error: 401 Unauthorized"


@pytest.mark.asyncio
async def test_news_collector_discards_incomplete_articles(upstream, client_for, full_config):
    async with client_for() as client:
        mentions = await NewsCollector().collect(full_config, client)

    params = upstream.requests_to(NEWS_HOST)[0].url.params
    assert params["q"] == 'rocket OR launch OR "Acme"'
    assert params["sortBy"] == "publishedAt"
    assert params["language"] == "en"
    assert params["pageSize"] == "20"
    assert params["apiKey"] == "google-key"
    assert [m.headline for m in mentions] == ["Acme wins industry award"]


@pytest.mark.asyncio
async def test_meltwater_collector_reads_documents(upstream, client_for, full_config):
    async with client_for() as client:
        mentions = await MeltwaterCollector().collect(full_config, client)

    request = upstream.requests_to(MELTWATER_HOST)[0]
    assert request.headers["Authorization"] == "Bearer meltwater-key"
    assert request.url.params["sort"] == "date"
    assert [(m.id, m.reach, m.sentiment) for m in mentions] == [("mw-1", 25000, "positive")]


@pytest.mark.asyncio
async def test_timeouts_and_bad_payloads_are_collection_errors(upstream, client_for, full_config):
    def slow(request):
        raise httpx.ReadTimeout("too slow", request=request)

    upstream.route(MELTWATER_HOST, slow)
    upstream.route(NEWS_HOST, lambda request: httpx.Response(200, content=b"<html>"))

    async with client_for() as client:
        with pytest.raises(CollectionError, match="Meltwater API timed out"):
            await MeltwaterCollector().collect(full_config, client)
        with pytest.raises(CollectionError, match="invalid JSON"):
            await NewsCollector().collect(full_config, client)


def test_collectors_are_enabled_by_their_credential():
    config = CollectionConfig(client_name="Acme", search_terms="x", google_api_key="k", twitter_bearer_token="  ")

    assert NewsCollector().enabled(config)
    assert not TwitterCollector().enabled(config)
    assert not MeltwaterCollector().enabled(config)


# ── webhook ──────────────────────────────────────────────────────────

BODY = json.dumps({"documents": [{"id": "push-1", "title": "Pushed"}, {"title": "Second"}]}).encode()


def test_signature_round_trip():
    signature = sign(BODY, "s3cret")

    assert signature.startswith("sha256=")
    assert verify_signature(BODY, signature, "s3cret")
    assert verify_signature(BODY, signature.split("=", 1)[1], "s3cret")
    assert not verify_signature(BODY, signature, "other")
    assert not verify_signature(BODY + b" ", signature, "s3cret")


def test_webhook_without_secret_trusts_any_payload():
    mentions = MeltwaterWebhook().receive(BODY, "sha256=bogus")

    assert [m.headline for m in mentions] == ["Pushed", "Second"]
    assert mentions[0].id == "push-1"


def test_webhook_with_secret_rejects_bad_signature():
    with pytest.raises(SignatureError, match="Invalid"):
        MeltwaterWebhook(secret="s3cret").receive(BODY, "sha256=bogus")


def test_webhook_with_secret_accepts_good_signature():
    mentions = MeltwaterWebhook(secret="s3cret").receive(BODY, sign(BODY, "s3cret"))

    assert len(mentions) == 2


def test_missing_signature_only_rejected_when_required():
    assert len(MeltwaterWebhook(secret="s3cret").receive(BODY, None)) == 2
    with pytest.raises(SignatureError, match="Missing"):
        MeltwaterWebhook(secret="s3cret", require_signature=True).receive(BODY, None)


def test_webhook_rejects_non_json_and_ignores_other_shapes():
    with pytest.raises(CollectionError):
        MeltwaterWebhook().receive(b"{not json")
    assert MeltwaterWebhook().receive(b'{"documents": "nope"}') == []
    assert MeltwaterWebhook().receive(b"[1, 2]") == []


# ── CSV ──────────────────────────────────────────────────────────────

CSV_EXPORT = (
    "Title,Content,URL,Source,Author,Date,Reach,Sentiment\n"
    '"Acme opens lab","Research, development",https://a.example,Gazette,Ann,2024-01-01,100,positive\n'
    "Weather today,Sunny,https://b.example,Daily,Bob,2024-01-02,50,neutral\n"
    "Broken row,only three,fields\n"
    "Rocket news,An ACME ROCKET flew,https://c.example,Planet,Cy,2024-01-03,75,negative\n"
)


def test_csv_keeps_rows_matching_any_term_case_insensitively():
    config = CollectionConfig(search_terms="acme, rocket")

    mentions = collect_csv(CSV_EXPORT, config)

    assert [m.link for m in mentions] == ["https://a.example", "https://c.example"]
    assert mentions[0].content == "Research, development"


def test_csv_without_terms_keeps_every_valid_row():
    assert len(collect_csv(CSV_EXPORT, CollectionConfig())) == 3


def test_blank_terms_do_not_match_everything():
    mentions = [normalize("monitoring", {"title": "Acme"}), normalize("monitoring", {"title": "Other"})]

    assert [m.headline for m in filter_by_terms(mentions, "acme,,")] == ["Acme"]
