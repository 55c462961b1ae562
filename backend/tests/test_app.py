import pytest
from fastapi.testclient import TestClient

from helpers import PASSWORD, auth, register
from recipeshare.core.errors import TokenInvalid
from recipeshare.core.security import decode_access_token


def _login(client):
    return client.post("/auth/login", json={"email": "test@example.com", "password": PASSWORD})


# ------------------------------
# create_app(settings=...) 주입
# ------------------------------

def test_injected_settings_drive_cookie_tokens_and_limits(make_client, client):
    c = make_client(
        COOKIE_SECURE=True,
        JWT_SECRET="injected-secret-for-this-app-only-0123456789",
        JWT_EXPIRATION_MINUTES=5,
        RATE_LIMIT_LOGIN="1/minute",
    )
    acct = register(c)

    r = _login(c)
    assert r.status_code == 200
    assert "; secure" in r.headers["set-cookie"].lower()
    assert r.json()["expiresIn"] == 5

    token = r.json()["token"]
    assert decode_access_token(token, c.app.state.settings) == acct["id"]
    with pytest.raises(TokenInvalid):
        decode_access_token(token)

    # 주입된 비밀키로 서명된 토큰은 그 앱에서만 통한다
    assert c.get("/user/profile", headers=auth(token)).status_code == 200
    assert client.get("/user/profile", headers=auth(token)).status_code == 401

    assert _login(c).status_code == 429


def test_default_cookie_is_not_secure_outside_production(client):
    register(client)
    r = _login(client)
    assert "; secure" not in r.headers["set-cookie"].lower()


def test_each_app_counts_its_own_requests(make_client):
    first = make_client(RATE_LIMIT_LOGIN="1/minute")
    second = make_client(RATE_LIMIT_LOGIN="1/minute")
    register(first)

    assert _login(first).status_code == 200
    assert _login(second).status_code == 200
    assert _login(first).status_code == 429
    assert _login(second).status_code == 429


# ------------------------------
# 보안 헤더
# ------------------------------

def test_security_headers_on_normal_responses(anon):
    r = anon.get("/health")
    assert r.headers["x-frame-options"] == "DENY"
    assert r.headers["x-content-type-options"] == "nosniff"
    assert "cache-control" not in r.headers


def test_unhandled_errors_keep_security_headers(app):
    @app.get("/user/crash")
    async def crash():
        raise RuntimeError("boom")

    c = TestClient(app, raise_server_exceptions=False)
    r = c.get("/user/crash")
    assert r.status_code == 500
    assert r.json() == {"detail": "Server error"}
    assert r.headers["x-frame-options"] == "DENY"
    assert r.headers["x-content-type-options"] == "nosniff"
    assert r.headers["cache-control"].startswith("no-store")
