from __future__ import annotations

from typing import Protocol

from animeshelf.application.dto.auth import PasswordHash


class PasswordHasherPort(Protocol):
    def hash_password(self, password: str, salt: str | None = None) -> PasswordHash:
        ...

    def verify_password(self, password: str, salt: str, expected_hash: str) -> bool:
        ...
