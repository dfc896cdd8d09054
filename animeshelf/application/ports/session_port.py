from __future__ import annotations

from typing import Protocol

from animeshelf.domain.entities.session import Session


class SessionPort(Protocol):
    def create_session(self, user_id: str) -> str:
        ...

    def validate_session(self, token: str) -> Session | None:
        ...

    def revoke_session(self, token: str) -> None:
        ...
