from __future__ import annotations

from dataclasses import replace
import logging
from uuid import uuid4

from animeshelf.application.dto.auth import AuthSessionOutput, GoogleIdentityInfo, LoginGoogleInput
from animeshelf.application.ports.google_oauth_port import GoogleOauthPort
from animeshelf.application.ports.session_port import SessionPort
from animeshelf.application.ports.store_port import StorePort
from animeshelf.domain.entities.user import User
from animeshelf.domain.exceptions import GoogleTokenValidationError
from animeshelf.domain.services.identity import normalize_email, normalize_name, safe_http_url

from .auth_common import issue_session, utcnow


logger = logging.getLogger(__name__)


class LoginGoogleUseCase:
    def __init__(
        self,
        *,
        store: StorePort,
        google_oauth_port: GoogleOauthPort,
        session_port: SessionPort,
    ):
        self._store = store
        self._google_oauth_port = google_oauth_port
        self._session_port = session_port

    def execute(self, command: LoginGoogleInput) -> AuthSessionOutput:
        credential = (command.credential or "").strip()
        if not credential:
            raise GoogleTokenValidationError("Missing Google credential.")

        google_identity = self._google_oauth_port.verify_id_token(id_token=credential)
        user = self._store.execute_in_transaction(lambda store: self._upsert(store, google_identity))
        logger.info("login_google: authenticated user_id=%s", user.id)
        return issue_session(user=user, store=self._store, session_port=self._session_port)

    def _upsert(self, store: StorePort, google_identity: GoogleIdentityInfo) -> User:
        email = normalize_email(google_identity.email)
        now = utcnow()
        picture = safe_http_url(google_identity.picture)

        user = store.get_user_by_google_sub(google_sub=google_identity.subject)
        if user is None:
            user = store.get_user_by_email(email=email)

        if user is None:
            user = User(
                id=str(uuid4()),
                email=email,
                name=normalize_name(google_identity.name, email=email),
                picture=picture,
                auth_providers=("google",),
                local_auth=None,
                google_sub=google_identity.subject,
                created_at=now,
                last_login_at=now,
                updated_at=now,
            )
        else:
            name = normalize_name(google_identity.name, email=user.email) if google_identity.name else user.name
            user = replace(
                user,
                name=name,
                picture=picture or user.picture,
                auth_providers=user.with_provider("google"),
                google_sub=google_identity.subject,
                last_login_at=now,
                updated_at=now,
            )

        store.save_user(user)
        store.ensure_profile(user_id=user.id)
        return user
