from __future__ import annotations

from animeshelf.application.dto.auth import SessionStatusOutput
from animeshelf.application.ports.session_port import SessionPort
from animeshelf.application.ports.store_port import StorePort
from animeshelf.domain.entities.user import User
from animeshelf.domain.exceptions import SessionInvalidError
from animeshelf.domain.services.profile_lists import profile_stats

from .auth_common import build_auth_user_output


class GetSessionUseCase:
    def __init__(self, *, store: StorePort, session_port: SessionPort):
        self._store = store
        self._session_port = session_port

    def resolve_user(self, *, session_token: str | None) -> User:
        """Return the session owner or raise SessionInvalidError."""
        if not session_token:
            raise SessionInvalidError("Authentication required.")
        session = self._session_port.validate_session(session_token)
        if session is None:
            raise SessionInvalidError("Session is invalid or expired.")
        user = self._store.get_user_by_id(user_id=session.user_id)
        if user is None:
            self._session_port.revoke_session(session_token)
            raise SessionInvalidError("Session user no longer exists.")
        return user

    def execute(self, *, session_token: str | None) -> SessionStatusOutput:
        try:
            user = self.resolve_user(session_token=session_token)
        except SessionInvalidError:
            return SessionStatusOutput(authenticated=False)

        profile = self._store.get_profile(user_id=user.id)
        if profile is None:
            profile = self._store.execute_in_transaction(lambda tx: tx.ensure_profile(user_id=user.id))
        return SessionStatusOutput(
            authenticated=True,
            user=build_auth_user_output(user),
            stats=profile_stats(profile),
        )
