from __future__ import annotations

from dataclasses import replace
import logging
from uuid import uuid4

from animeshelf.application.dto.auth import AuthSessionOutput, RegisterUserInput
from animeshelf.application.ports.password_hasher_port import PasswordHasherPort
from animeshelf.application.ports.session_port import SessionPort
from animeshelf.application.ports.store_port import StorePort
from animeshelf.domain.entities.user import LocalAuth, User
from animeshelf.domain.exceptions import EmailAlreadyExistsError
from animeshelf.domain.services.identity import normalize_name, validate_email, validate_password

from .auth_common import issue_session, utcnow


logger = logging.getLogger(__name__)


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        store: StorePort,
        password_hasher: PasswordHasherPort,
        session_port: SessionPort,
        password_min_length: int,
    ):
        self._store = store
        self._password_hasher = password_hasher
        self._session_port = session_port
        self._password_min_length = password_min_length

    def execute(self, command: RegisterUserInput) -> AuthSessionOutput:
        email = validate_email(command.email)
        password = validate_password(command.password, min_length=self._password_min_length)

        # Hashing is CPU-bound; keep it outside the store lock.
        password_hash = self._password_hasher.hash_password(password)
        local_auth = LocalAuth(salt=password_hash.salt, hash=password_hash.hash)

        def _tx(store: StorePort) -> User:
            now = utcnow()
            existing = store.get_user_by_email(email=email)
            if existing is not None and existing.local_auth is not None:
                raise EmailAlreadyExistsError("An account with this email already exists.")

            if existing is None:
                user = User(
                    id=str(uuid4()),
                    email=email,
                    name=normalize_name(command.name, email=email),
                    picture=None,
                    auth_providers=("local",),
                    local_auth=local_auth,
                    google_sub=None,
                    created_at=now,
                    last_login_at=now,
                    updated_at=now,
                )
            else:
                name = normalize_name(command.name, email=email) if command.name else existing.name
                user = replace(
                    existing,
                    name=name,
                    auth_providers=existing.with_provider("local"),
                    local_auth=local_auth,
                    last_login_at=now,
                    updated_at=now,
                )

            store.save_user(user)
            store.ensure_profile(user_id=user.id)
            return user

        user = self._store.execute_in_transaction(_tx)
        logger.info("register_user: registered user_id=%s providers=%s", user.id, ",".join(user.auth_providers))
        return issue_session(user=user, store=self._store, session_port=self._session_port)
