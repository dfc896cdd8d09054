from __future__ import annotations

import secrets

from passlib.hash import scrypt
from passlib.utils import consteq

from animeshelf.application.dto.auth import PasswordHash
from animeshelf.application.ports.password_hasher_port import PasswordHasherPort


SALT_BYTES = 16


class PasswordHasher(PasswordHasherPort):
    """scrypt via passlib, with the salt stored next to the hash.

    ``rounds`` is log2(N); the default matches N=16384, r=8, p=1.
    """

    def __init__(self, *, rounds: int = 14):
        self._rounds = rounds

    def hash_password(self, password: str, salt: str | None = None) -> PasswordHash:
        salt_hex = salt if salt is not None else secrets.token_hex(SALT_BYTES)
        handler = scrypt.using(salt=bytes.fromhex(salt_hex), rounds=self._rounds)
        return PasswordHash(salt=salt_hex, hash=handler.hash(password))

    def verify_password(self, password: str, salt: str, expected_hash: str) -> bool:
        try:
            computed = self.hash_password(password, salt).hash
        except (TypeError, ValueError):
            return False
        return consteq(computed, expected_hash)
