from __future__ import annotations

from google.auth import exceptions as google_exceptions
import pytest

from animeshelf.domain.exceptions import GoogleTokenValidationError, UpstreamError
from animeshelf.infrastructure.clients.google_oidc_client import GoogleOidcClient


VERIFY_PATH = "animeshelf.infrastructure.clients.google_oidc_client.id_token_verify"


def _claims(**overrides) -> dict:
    claims = {
        "sub": "1234567890",
        "email": "alice@example.com",
        "email_verified": True,
        "name": "Alice",
        "picture": "https://lh3.example.com/a.png",
    }
    claims.update(overrides)
    return claims


def test_verify_id_token_maps_claims(monkeypatch: pytest.MonkeyPatch):
    seen: dict = {}

    def fake_verify(*, token, audience, request):
        seen.update(token=token, audience=audience)
        return _claims(email_verified="true")

    monkeypatch.setattr(VERIFY_PATH, fake_verify)
    client = GoogleOidcClient(client_id="client-123.apps.googleusercontent.com")

    identity = client.verify_id_token(id_token="jwt-token")

    assert seen == {"token": "jwt-token", "audience": "client-123.apps.googleusercontent.com"}
    assert identity.subject == "1234567890"
    assert identity.email == "alice@example.com"
    assert identity.email_verified is True
    assert identity.name == "Alice"


@pytest.mark.parametrize(
    "claims",
    [
        _claims(email_verified=False),
        _claims(email_verified="false"),
        _claims(email=None),
        _claims(sub=""),
    ],
)
def test_verify_id_token_rejects_incomplete_claims(monkeypatch: pytest.MonkeyPatch, claims: dict):
    monkeypatch.setattr(VERIFY_PATH, lambda *, token, audience, request: claims)
    client = GoogleOidcClient(client_id="client-123")

    with pytest.raises(GoogleTokenValidationError):
        client.verify_id_token(id_token="jwt-token")


def test_verify_id_token_maps_library_errors(monkeypatch: pytest.MonkeyPatch):
    client = GoogleOidcClient(client_id="client-123")

    def wrong_audience(*, token, audience, request):
        raise ValueError("Token has wrong audience")

    monkeypatch.setattr(VERIFY_PATH, wrong_audience)
    with pytest.raises(GoogleTokenValidationError):
        client.verify_id_token(id_token="jwt-token")

    def unreachable(*, token, audience, request):
        raise google_exceptions.TransportError("connection reset")

    monkeypatch.setattr(VERIFY_PATH, unreachable)
    with pytest.raises(UpstreamError):
        client.verify_id_token(id_token="jwt-token")
