from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from animeshelf.domain.entities.profile import ProfileStats


@dataclass(frozen=True)
class PasswordHash:
    salt: str
    hash: str


@dataclass(frozen=True)
class AuthUserOutput:
    id: str
    email: str
    name: str
    picture: str | None
    auth_providers: tuple[str, ...]
    created_at: datetime
    last_login_at: datetime


@dataclass(frozen=True)
class RegisterUserInput:
    email: str
    password: str
    name: str | None


@dataclass(frozen=True)
class LoginLocalInput:
    email: str
    password: str


@dataclass(frozen=True)
class LoginGoogleInput:
    credential: str


@dataclass(frozen=True)
class AuthSessionOutput:
    user: AuthUserOutput
    stats: ProfileStats
    session_token: str


@dataclass(frozen=True)
class SessionStatusOutput:
    authenticated: bool
    user: AuthUserOutput | None = None
    stats: ProfileStats | None = None


@dataclass(frozen=True)
class GoogleIdentityInfo:
    subject: str
    email: str
    email_verified: bool
    name: str | None
    picture: str | None
