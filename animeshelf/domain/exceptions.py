from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class ValidationError(DomainError):
    """Malformed client input."""


class EmailAlreadyExistsError(ValidationError):
    """Email already holds a local credential."""


class AuthError(DomainError):
    """Authentication failed or is missing."""


class InvalidCredentialsError(AuthError):
    """Email/password pair rejected."""


class SessionInvalidError(AuthError):
    """Session token missing, forged, expired or revoked."""


class GoogleTokenValidationError(AuthError):
    """Google id_token rejected."""


class UpstreamError(DomainError):
    """External catalog or identity provider call failed."""


class StorageError(DomainError):
    """Persisting the document to disk failed."""
