from __future__ import annotations

from datetime import datetime, timezone

from animeshelf.application.dto.auth import AuthSessionOutput, AuthUserOutput
from animeshelf.application.ports.session_port import SessionPort
from animeshelf.application.ports.store_port import StorePort
from animeshelf.domain.entities.user import User
from animeshelf.domain.services.profile_lists import profile_stats


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_auth_user_output(user: User) -> AuthUserOutput:
    return AuthUserOutput(
        id=user.id,
        email=user.email,
        name=user.name,
        picture=user.picture,
        auth_providers=user.auth_providers,
        created_at=user.created_at,
        last_login_at=user.last_login_at,
    )


def issue_session(
    *,
    user: User,
    store: StorePort,
    session_port: SessionPort,
) -> AuthSessionOutput:
    profile = store.get_profile(user_id=user.id)
    if profile is None:
        profile = store.execute_in_transaction(lambda tx: tx.ensure_profile(user_id=user.id))
    token = session_port.create_session(user.id)
    return AuthSessionOutput(
        user=build_auth_user_output(user),
        stats=profile_stats(profile),
        session_token=token,
    )
