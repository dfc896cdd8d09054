from __future__ import annotations

from datetime import datetime

from pydantic import Field

from animeshelf.api.schemas.common import CamelModel, StatsResponse
from animeshelf.application.dto.auth import AuthUserOutput
from animeshelf.domain.entities.profile import ProfileStats


class RegisterRequest(CamelModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=256)
    name: str | None = Field(default=None, max_length=500)


class LoginRequest(CamelModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=256)


class GoogleLoginRequest(CamelModel):
    credential: str = Field(..., min_length=1, max_length=8192)


class AuthUserResponse(CamelModel):
    id: str
    email: str
    name: str
    picture: str | None
    auth_providers: list[str]
    created_at: datetime
    last_login_at: datetime


class SessionResponse(CamelModel):
    authenticated: bool
    user: AuthUserResponse | None = None
    stats: StatsResponse | None = None


class LogoutResponse(CamelModel):
    ok: bool


def map_auth_user_response(user: AuthUserOutput) -> AuthUserResponse:
    return AuthUserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        picture=user.picture,
        auth_providers=list(user.auth_providers),
        created_at=user.created_at,
        last_login_at=user.last_login_at,
    )


def map_stats_response(stats: ProfileStats) -> StatsResponse:
    return StatsResponse(history=stats.history, favorites=stats.favorites, pending=stats.pending)
