from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


AuthProvider = Literal["local", "google"]


@dataclass(frozen=True)
class LocalAuth:
    salt: str
    hash: str


@dataclass(frozen=True)
class User:
    id: str
    email: str
    name: str
    picture: str | None
    auth_providers: tuple[str, ...]
    local_auth: LocalAuth | None
    google_sub: str | None
    created_at: datetime
    last_login_at: datetime
    updated_at: datetime

    def with_provider(self, provider: AuthProvider) -> tuple[str, ...]:
        return tuple(sorted(set(self.auth_providers) | {provider}))
