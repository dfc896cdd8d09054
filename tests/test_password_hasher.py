from __future__ import annotations

import pytest

from animeshelf.infrastructure.security.password_hasher import PasswordHasher


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


def test_hash_password_generates_salt_when_missing(hasher: PasswordHasher):
    first = hasher.hash_password("secret123")
    second = hasher.hash_password("secret123")

    assert len(first.salt) == 32
    assert first.salt != second.salt
    assert first.hash != second.hash


def test_hash_password_is_deterministic_for_same_salt(hasher: PasswordHasher):
    salt = "00112233445566778899aabbccddeeff"

    assert hasher.hash_password("secret123", salt).hash == hasher.hash_password("secret123", salt).hash


@pytest.mark.parametrize("password", ["secret123", "ñandú-pässwörd", " spaced out ", "x" * 200])
def test_verify_password_accepts_matching_password(hasher: PasswordHasher, password: str):
    derived = hasher.hash_password(password)

    assert hasher.verify_password(password, derived.salt, derived.hash) is True


@pytest.mark.parametrize("other", ["secret124", "Secret123", "secret12", "secret1234", ""])
def test_verify_password_rejects_other_passwords(hasher: PasswordHasher, other: str):
    derived = hasher.hash_password("secret123")

    assert hasher.verify_password(other, derived.salt, derived.hash) is False


def test_verify_password_returns_false_for_malformed_salt(hasher: PasswordHasher):
    derived = hasher.hash_password("secret123")

    assert hasher.verify_password("secret123", "not-hex", derived.hash) is False
