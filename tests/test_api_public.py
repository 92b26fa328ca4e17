from unittest import mock

import pytest


# ---------------- health -----------------
def test_health(anon_client):
    resp = anon_client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "0.1.0", "storage_backend": "memory"}
    assert "X-Request-ID" in resp.headers


def test_request_id_is_echoed(anon_client):
    resp = anon_client.get("/api/health", headers={"x-request-id": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_unknown_route_is_json_404(anon_client):
    resp = anon_client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


# ---------------- currency -----------------
def test_rates_are_static(anon_client):
    body = anon_client.get("/api/currency/rates").json()
    assert body["base"] == "USD"
    assert body["rates"] == {"USD": 1.0, "KHR": 4100.0}
    assert "static" in body["source"]


def test_convert(anon_client):
    resp = anon_client.post(
        "/api/currency/convert",
        json={"amount": 10, "from_currency": "usd", "to_currency": "KHR"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["converted"] == {"amount": 41000.0, "currency": "KHR"}
    assert body["rate"] == 4100.0


def test_convert_unsupported_currency(anon_client):
    resp = anon_client.post(
        "/api/currency/convert",
        json={"amount": 10, "from_currency": "USD", "to_currency": "EUR"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "unsupported_currency"


def test_supported(anon_client):
    body = anon_client.get("/api/currency/supported").json()
    assert {c["code"]: c["symbol"] for c in body} == {"USD": "$", "KHR": "៛"}


@pytest.mark.parametrize(
    "payload,expected",
    [
        ({"amount": 1234.5, "currency": "USD"}, "$1,234.50"),
        ({"amount": 4100, "currency": "KHR"}, "4,100៛"),
        ({"amount": 1234.5, "currency": "USD", "locale": "de-DE"}, "$1.234,50"),
    ],
)
def test_format(anon_client, payload, expected):
    assert anon_client.post("/api/currency/format", json=payload).json()["formatted"] == expected


def test_format_large_amount(anon_client):
    resp = anon_client.post("/api/currency/format", json={"amount": 1e30, "currency": "KHR"})
    assert resp.status_code == 200
    assert resp.json()["formatted"] == "1" + ",000" * 10 + "៛"


def test_convert_overflow_is_rejected(anon_client):
    resp = anon_client.post(
        "/api/currency/convert",
        json={"amount": 1e306, "from_currency": "USD", "to_currency": "KHR"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


def test_convert_large_finite_amount(anon_client):
    resp = anon_client.post(
        "/api/currency/convert",
        json={"amount": 1e30, "from_currency": "KHR", "to_currency": "USD"},
    )
    assert resp.status_code == 200
    assert resp.json()["converted"]["amount"] == pytest.approx(1e30 / 4100, rel=1e-9)


# ---------------- auth -----------------
TOKENS = {"access_token": "at", "refresh_token": "rt", "expires_in": 3599, "id_token": "x"}
USERINFO = {"id": "1", "email": "bob@example.com", "name": "Bob"}


def test_google_url(anon_client):
    url = anon_client.get("/api/auth/google/url").json()["auth_url"]
    assert url.startswith("https://accounts.google.com/")
    assert "access_type=offline" in url


def test_post_callback_returns_tokens_and_user(anon_client):
    with mock.patch(
        "budgetsheet.services.google_oauth.post_form", return_value=TOKENS
    ), mock.patch("budgetsheet.services.google_oauth.get_json", return_value=USERINFO):
        resp = anon_client.post("/api/auth/google/callback", json={"code": "c"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["email"] == "bob@example.com"
    assert body["tokens"] == {"access_token": "at", "refresh_token": "rt", "expires_in": 3599}


def test_get_callback_redirects_to_frontend(anon_client):
    with mock.patch(
        "budgetsheet.services.google_oauth.post_form", return_value=TOKENS
    ), mock.patch("budgetsheet.services.google_oauth.get_json", return_value=USERINFO):
        resp = anon_client.get(
            "/api/auth/google/callback", params={"code": "c"}, follow_redirects=False
        )
    assert resp.status_code == 302
    assert resp.headers["location"].startswith("http://localhost:5173/?auth=success")


def test_get_callback_without_code_redirects_with_error(anon_client):
    resp = anon_client.get(
        "/api/auth/google/callback", params={"error": "access_denied"}, follow_redirects=False
    )
    assert resp.status_code == 302
    assert resp.headers["location"].endswith("?auth=error")


def test_refresh(anon_client):
    with mock.patch(
        "budgetsheet.services.google_oauth.post_form",
        return_value={"access_token": "new", "expires_in": 3599},
    ):
        resp = anon_client.post("/api/auth/refresh", json={"refresh_token": "rt"})
    assert resp.json() == {"tokens": {"access_token": "new", "expires_in": 3599}}
    assert anon_client.post("/api/auth/refresh", json={}).status_code == 400
