import pytest
from fastapi.testclient import TestClient

from conftest import is_analysis_prompt, reply
from pricecompass.dependencies import SessionStore, get_price_compass
from pricecompass.main import app
from pricecompass.services.model_invoker import InvocationFailed


@pytest.fixture
def client_for(make_service):
    def _make(responder):
        service, invoker = make_service(responder)
        app.dependency_overrides[get_price_compass] = lambda: service
        return TestClient(app), invoker
    yield _make
    app.dependency_overrides.clear()


def _responder(prompt):
    if is_analysis_prompt(prompt):
        return reply('{"name": "Zelda", "category": "Game"}', ("Nintendo", "https://www.nintendo.com/zelda"))
    if prompt.startswith("Task: Autocomplete"):
        return reply('["Zelda BOTW", "Zelda TOTK"]')
    return reply('{"prices": [{"platform": "eBay", "price": "USD 40", "status": "Avg Listed"}], "overview": "ok"}')


def test_health():
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_search_returns_analysis_prices_and_links(client_for):
    client, invoker = client_for(_responder)

    response = client.get("/api/search", params={"q": "Zelda", "currency": "USD"})

    assert response.status_code == 200
    body = response.json()
    assert body["currency"] == "USD"
    assert body["analysis"]["name"] == "Zelda"
    assert body["analysis"]["sources"] == [{"title": "Nintendo", "uri": "https://www.nintendo.com/zelda"}]
    assert body["priceInsight"]["prices"][0]["price"] == "USD 40"
    ebay = next(p for p in body["platforms"] if p["id"] == "ebay")
    assert ebay["available"] is True
    assert ebay["url"].endswith("_nkw=Zelda")
    assert body["error"] is None
    assert len(invoker.calls) == 2


def test_search_defaults_to_configured_currency(client_for):
    client, invoker = client_for(_responder)

    body = client.get("/api/search", params={"q": "Zelda"}).json()

    assert body["currency"] == "MYR"
    assert any("in MYR" in call["prompt"] for call in invoker.calls)


def test_search_rejects_empty_query_and_unknown_currency(client_for):
    client, invoker = client_for(_responder)

    assert client.get("/api/search", params={"q": "   "}).status_code == 400
    assert client.get("/api/search", params={"q": "Zelda", "currency": "XYZ"}).status_code == 422
    assert invoker.calls == []


def test_search_reports_total_failure(client_for):
    client, _ = client_for(lambda prompt: InvocationFailed("Connection error."))

    body = client.get("/api/search", params={"q": "Zelda"}).json()

    assert body["analysis"] is None
    assert body["priceInsight"]["prices"] == []
    assert body["priceInsight"]["fallbackReason"] == "invocation_failed"
    assert body["error"]


def test_autocomplete(client_for):
    client, _ = client_for(_responder)

    response = client.get("/api/autocomplete", params={"q": "zel"})

    assert response.status_code == 200
    assert response.json()["suggestions"] == ["Zelda BOTW", "Zelda TOTK"]


def test_autocomplete_short_query(client_for):
    client, invoker = client_for(_responder)

    assert client.get("/api/autocomplete", params={"q": "z"}).json()["suggestions"] == []
    assert invoker.calls == []


def test_sessions_platforms_currencies_and_open_all(client_for):
    client, _ = client_for(_responder)

    sid = client.post("/api/sessions").json()["sid"]
    assert len(sid) == 32

    currencies = client.get("/api/currencies").json()
    assert "MYR" in currencies["currencies"]
    assert currencies["default"] == "MYR"

    platforms = client.get("/api/platforms", params={"q": "Mario Kart"}).json()
    assert {p["id"] for p in platforms} >= {"pricecharting", "ebay", "shopee", "cex"}

    command = client.get("/api/open-all", params={"q": "Mario Kart"}).json()
    assert command["command"] == "open_urls"
    assert len(command["urls"]) == len(platforms)
    assert client.get("/api/open-all").status_code == 400


def test_issued_session_is_reused(client_for):
    client, _ = client_for(_responder)
    sid = client.post("/api/sessions").json()["sid"]

    response = client.get("/api/autocomplete", params={"q": "zel", "sid": sid})

    assert response.status_code == 200
    assert app.state.sessions.get(sid).suggestions == ["Zelda BOTW", "Zelda TOTK"]


def test_unknown_session_is_rejected(client_for):
    client, invoker = client_for(_responder)
    held = len(app.state.sessions) if hasattr(app.state, "sessions") else 0

    for i in range(20):
        response = client.get("/api/autocomplete", params={"q": "zel", "sid": f"junk{i}"})
        assert response.status_code == 404

    assert (len(app.state.sessions) if hasattr(app.state, "sessions") else 0) == held
    assert invoker.calls == []


def test_session_store_evicts_least_recently_used():
    store = SessionStore(max_sessions=2)
    first = store.issue(object())
    second = store.issue(object())

    assert store.get(first) is not None
    third = store.issue(object())

    assert first in store
    assert second not in store
    assert third in store
    assert len(store) == 2
