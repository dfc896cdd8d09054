from __future__ import annotations

from fastapi import Cookie, Depends, HTTPException, Request

from animeshelf.api.container import Container
from animeshelf.application.use_cases.get_profile import GetProfileUseCase
from animeshelf.application.use_cases.get_recommendations import GetRecommendationsUseCase
from animeshelf.application.use_cases.get_session import GetSessionUseCase
from animeshelf.application.use_cases.login_google import LoginGoogleUseCase
from animeshelf.application.use_cases.login_local import LoginLocalUseCase
from animeshelf.application.use_cases.logout_session import LogoutSessionUseCase
from animeshelf.application.use_cases.manage_history import (
    ClearHistoryUseCase,
    RemoveHistoryUseCase,
    UpsertHistoryUseCase,
)
from animeshelf.application.use_cases.register_user import RegisterUserUseCase
from animeshelf.application.use_cases.toggle_list import ToggleListUseCase
from animeshelf.domain.entities.user import User
from animeshelf.domain.exceptions import SessionInvalidError


SESSION_COOKIE_NAME = "animeshelf_session"


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_session_token(
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> str | None:
    return session_token


def get_register_user_use_case(container: Container = Depends(get_container)) -> RegisterUserUseCase:
    return RegisterUserUseCase(
        store=container.store,
        password_hasher=container.password_hasher,
        session_port=container.session_manager,
        password_min_length=container.settings.password_min_length,
    )


def get_login_local_use_case(container: Container = Depends(get_container)) -> LoginLocalUseCase:
    return LoginLocalUseCase(
        store=container.store,
        password_hasher=container.password_hasher,
        session_port=container.session_manager,
    )


def get_login_google_use_case(container: Container = Depends(get_container)) -> LoginGoogleUseCase:
    if container.google_oauth is None:
        raise HTTPException(status_code=503, detail="Google login is not configured.")
    return LoginGoogleUseCase(
        store=container.store,
        google_oauth_port=container.google_oauth,
        session_port=container.session_manager,
    )


def get_logout_session_use_case(container: Container = Depends(get_container)) -> LogoutSessionUseCase:
    return LogoutSessionUseCase(session_port=container.session_manager)


def get_session_use_case(container: Container = Depends(get_container)) -> GetSessionUseCase:
    return GetSessionUseCase(store=container.store, session_port=container.session_manager)


def get_profile_use_case(container: Container = Depends(get_container)) -> GetProfileUseCase:
    return GetProfileUseCase(store=container.store)


def get_toggle_list_use_case(container: Container = Depends(get_container)) -> ToggleListUseCase:
    return ToggleListUseCase(store=container.store)


def get_upsert_history_use_case(container: Container = Depends(get_container)) -> UpsertHistoryUseCase:
    return UpsertHistoryUseCase(store=container.store)


def get_remove_history_use_case(container: Container = Depends(get_container)) -> RemoveHistoryUseCase:
    return RemoveHistoryUseCase(store=container.store)


def get_clear_history_use_case(container: Container = Depends(get_container)) -> ClearHistoryUseCase:
    return ClearHistoryUseCase(store=container.store)


def get_recommendations_use_case(container: Container = Depends(get_container)) -> GetRecommendationsUseCase:
    return GetRecommendationsUseCase(store=container.store, catalog_pool_port=container.catalog_pool)


def get_current_user(
    session_token: str | None = Depends(get_session_token),
    use_case: GetSessionUseCase = Depends(get_session_use_case),
) -> User:
    try:
        return use_case.resolve_user(session_token=session_token)
    except SessionInvalidError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
