from __future__ import annotations

import logging

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests
from google.oauth2 import id_token

from animeshelf.application.dto.auth import GoogleIdentityInfo
from animeshelf.application.ports.google_oauth_port import GoogleOauthPort
from animeshelf.domain.exceptions import GoogleTokenValidationError, UpstreamError


logger = logging.getLogger(__name__)


class _TimeoutRequest(requests.Request):
    """google-auth transport with a bounded default timeout for cert fetches."""

    def __init__(self, *, timeout_seconds: float):
        super().__init__()
        self._timeout_seconds = timeout_seconds

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        return super().__call__(
            url,
            method=method,
            body=body,
            headers=headers,
            timeout=timeout or self._timeout_seconds,
            **kwargs,
        )


class GoogleOidcClient(GoogleOauthPort):
    def __init__(self, *, client_id: str, timeout_seconds: float = 10.0):
        self._client_id = client_id
        self._request = _TimeoutRequest(timeout_seconds=timeout_seconds)

    def verify_id_token(self, *, id_token: str) -> GoogleIdentityInfo:
        try:
            payload = id_token_verify(token=id_token, audience=self._client_id, request=self._request)
        except google_exceptions.TransportError as exc:
            logger.warning("google_oidc_client: transport_error error=%s", exc)
            raise UpstreamError("Could not reach Google to verify the credential.") from exc
        except (ValueError, google_exceptions.GoogleAuthError) as exc:
            logger.info("google_oidc_client: rejected_token error=%s", exc)
            raise GoogleTokenValidationError("Invalid Google credential.") from exc

        email = payload.get("email")
        subject = payload.get("sub")
        if not email or not subject:
            raise GoogleTokenValidationError("Google credential is missing required claims.")

        email_verified_raw = payload.get("email_verified", False)
        email_verified = bool(email_verified_raw)
        if isinstance(email_verified_raw, str):
            email_verified = email_verified_raw.lower() == "true"
        if not email_verified:
            raise GoogleTokenValidationError("Google account email is not verified.")

        name = payload.get("name") if isinstance(payload.get("name"), str) else None
        picture = payload.get("picture") if isinstance(payload.get("picture"), str) else None
        return GoogleIdentityInfo(
            subject=str(subject),
            email=str(email),
            email_verified=email_verified,
            name=name,
            picture=picture,
        )


def id_token_verify(*, token: str, audience: str, request: requests.Request) -> dict:
    return id_token.verify_oauth2_token(token, request, audience)
