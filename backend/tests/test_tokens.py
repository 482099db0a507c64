from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from dreamcatcher.security.tokens import ADMIN_DOMAIN, CLIENT_DOMAIN, TokenService
from dreamcatcher.utils.config import Settings


def test_issued_token_round_trips_claims(client_tokens):
    token = client_tokens.issue({"sub": "4821"})

    assert client_tokens.verify(token) == {"sub": "4821"}


def test_client_token_is_rejected_by_admin_domain(client_tokens, admin_tokens):
    token = client_tokens.issue({"sub": "4821"})

    assert admin_tokens.verify(token) is None


def test_admin_token_is_rejected_by_client_domain(client_tokens, admin_tokens):
    token = admin_tokens.issue({"sub": "1", "email": "admin@dreamcatcher.com"})

    assert client_tokens.verify(token) is None
    assert admin_tokens.verify(token) == {"sub": "1", "email": "admin@dreamcatcher.com"}


def test_same_secret_different_domain_is_still_rejected():
    client = TokenService(CLIENT_DOMAIN, "shared")
    admin = TokenService(ADMIN_DOMAIN, "shared")

    assert admin.verify(client.issue({"sub": "4821"})) is None


def test_expired_token_fails_like_a_malformed_one(client_tokens):
    issued_long_ago = TokenService(
        CLIENT_DOMAIN,
        "test-client-secret",
        clock=lambda: datetime.now(timezone.utc) - timedelta(hours=25),
    )
    expired = issued_long_ago.issue({"sub": "4821"})

    assert client_tokens.verify(expired) is None
    assert client_tokens.verify(expired) == client_tokens.verify("not.a.token")


def test_tampered_token_is_rejected(client_tokens):
    token = client_tokens.issue({"sub": "4821"})
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    assert client_tokens.verify(tampered) is None


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
def test_missing_or_garbage_tokens_are_rejected(client_tokens, token):
    assert client_tokens.verify(token) is None


def test_token_expires_after_configured_ttl():
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    service = TokenService(CLIENT_DOMAIN, "secret", clock=lambda: now)
    token = service.issue({"sub": "4821"})

    claims = jwt.get_unverified_claims(token)
    assert claims["exp"] - claims["iat"] == 24 * 60 * 60
    assert claims["aud"] == CLIENT_DOMAIN


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenService(CLIENT_DOMAIN, "")


def test_settings_refuse_shared_secret():
    with pytest.raises(ValueError):
        Settings(JWT_SECRET="same", ADMIN_JWT_SECRET="same")
