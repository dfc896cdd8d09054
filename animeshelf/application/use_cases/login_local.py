from __future__ import annotations

from dataclasses import replace
import logging

from animeshelf.application.dto.auth import AuthSessionOutput, LoginLocalInput
from animeshelf.application.ports.password_hasher_port import PasswordHasherPort
from animeshelf.application.ports.session_port import SessionPort
from animeshelf.application.ports.store_port import StorePort
from animeshelf.domain.entities.user import User
from animeshelf.domain.exceptions import InvalidCredentialsError
from animeshelf.domain.services.identity import normalize_email

from .auth_common import issue_session, utcnow


logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."


class LoginLocalUseCase:
    def __init__(
        self,
        *,
        store: StorePort,
        password_hasher: PasswordHasherPort,
        session_port: SessionPort,
    ):
        self._store = store
        self._password_hasher = password_hasher
        self._session_port = session_port

    def execute(self, command: LoginLocalInput) -> AuthSessionOutput:
        email = normalize_email(command.email or "")
        user = self._store.get_user_by_email(email=email) if email else None
        if user is None:
            logger.info("login_local: rejected reason=unknown_email")
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)
        if user.local_auth is None:
            logger.info("login_local: rejected reason=no_local_credential user_id=%s", user.id)
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        if not self._password_hasher.verify_password(
            command.password or "",
            user.local_auth.salt,
            user.local_auth.hash,
        ):
            logger.info("login_local: rejected reason=wrong_password user_id=%s", user.id)
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        def _tx(store: StorePort) -> User:
            now = utcnow()
            current = store.get_user_by_id(user_id=user.id) or user
            return store.save_user(
                replace(
                    current,
                    auth_providers=current.with_provider("local"),
                    last_login_at=now,
                    updated_at=now,
                )
            )

        updated = self._store.execute_in_transaction(_tx)
        return issue_session(user=updated, store=self._store, session_port=self._session_port)
