from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from animeshelf.api.container import Container
from animeshelf.api.deps import (
    SESSION_COOKIE_NAME,
    get_container,
    get_login_google_use_case,
    get_login_local_use_case,
    get_logout_session_use_case,
    get_session_token,
    get_session_use_case,
    get_register_user_use_case,
)
from animeshelf.api.schemas.auth import (
    GoogleLoginRequest,
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    SessionResponse,
    map_auth_user_response,
    map_stats_response,
)
from animeshelf.application.dto.auth import (
    AuthSessionOutput,
    LoginGoogleInput,
    LoginLocalInput,
    RegisterUserInput,
)
from animeshelf.application.use_cases.get_session import GetSessionUseCase
from animeshelf.application.use_cases.login_google import LoginGoogleUseCase
from animeshelf.application.use_cases.login_local import LoginLocalUseCase
from animeshelf.application.use_cases.logout_session import LogoutSessionUseCase
from animeshelf.application.use_cases.register_user import RegisterUserUseCase
from animeshelf.domain.exceptions import (
    AuthError,
    EmailAlreadyExistsError,
    UpstreamError,
    ValidationError,
)


router = APIRouter()


def _set_session_cookie(response: Response, container: Container, session_token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_token,
        httponly=True,
        samesite="lax",
        secure=container.settings.is_production,
        max_age=int(container.session_manager.ttl.total_seconds()),
        path="/",
    )


def _clear_session_cookie(response: Response, container: Container) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=container.settings.is_production,
    )


def _authenticated_response(
    response: Response,
    container: Container,
    output: AuthSessionOutput,
) -> SessionResponse:
    _set_session_cookie(response, container, output.session_token)
    return SessionResponse(
        authenticated=True,
        user=map_auth_user_response(output.user),
        stats=map_stats_response(output.stats),
    )


@router.get("/api/auth/session", response_model=SessionResponse, response_model_exclude_none=True)
def get_session(
    response: Response,
    session_token: str | None = Depends(get_session_token),
    container: Container = Depends(get_container),
    use_case: GetSessionUseCase = Depends(get_session_use_case),
):
    output = use_case.execute(session_token=session_token)
    if not output.authenticated:
        if session_token:
            _clear_session_cookie(response, container)
        return SessionResponse(authenticated=False)
    # Validation slid the server-side expiry; keep the cookie's Max-Age in step.
    _set_session_cookie(response, container, session_token)
    return SessionResponse(
        authenticated=True,
        user=map_auth_user_response(output.user),
        stats=map_stats_response(output.stats),
    )


@router.post("/api/auth/register", response_model=SessionResponse)
def register_user(
    req: RegisterRequest,
    response: Response,
    container: Container = Depends(get_container),
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
):
    try:
        output = use_case.execute(RegisterUserInput(email=req.email, password=req.password, name=req.name))
    except EmailAlreadyExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return _authenticated_response(response, container, output)


@router.post("/api/auth/login", response_model=SessionResponse)
def login_local(
    req: LoginRequest,
    response: Response,
    container: Container = Depends(get_container),
    use_case: LoginLocalUseCase = Depends(get_login_local_use_case),
):
    try:
        output = use_case.execute(LoginLocalInput(email=req.email, password=req.password))
    except AuthError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return _authenticated_response(response, container, output)


@router.post("/api/auth/google", response_model=SessionResponse)
def login_google(
    req: GoogleLoginRequest,
    response: Response,
    container: Container = Depends(get_container),
    use_case: LoginGoogleUseCase = Depends(get_login_google_use_case),
):
    try:
        output = use_case.execute(LoginGoogleInput(credential=req.credential))
    except (AuthError, UpstreamError) as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return _authenticated_response(response, container, output)


@router.post("/api/auth/logout", response_model=LogoutResponse)
def logout(
    response: Response,
    session_token: str | None = Depends(get_session_token),
    container: Container = Depends(get_container),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
):
    use_case.execute(session_token=session_token)
    _clear_session_cookie(response, container)
    return LogoutResponse(ok=True)
