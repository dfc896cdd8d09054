from __future__ import annotations

import re
from urllib.parse import urlparse

from animeshelf.domain.exceptions import ValidationError


EMAIL_MAX_LENGTH = 254
NAME_MAX_LENGTH = 80
PICTURE_MAX_LENGTH = 1000

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(value: object) -> str:
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_email(email: str) -> str:
    normalized = normalize_email(email or "")
    if not normalized or len(normalized) > EMAIL_MAX_LENGTH or not _EMAIL_RE.match(normalized):
        raise ValidationError("A valid email is required.")
    return normalized


def validate_password(password: str, *, min_length: int) -> str:
    if not isinstance(password, str) or len(password) < min_length:
        raise ValidationError(f"Password must have at least {min_length} characters.")
    return password


def normalize_name(name: object, *, email: str) -> str:
    cleaned = collapse_whitespace(name)[:NAME_MAX_LENGTH].strip()
    if cleaned:
        return cleaned
    local_part = email.split("@", 1)[0]
    fallback = collapse_whitespace(local_part)[:NAME_MAX_LENGTH].strip()
    return fallback or "User"


def safe_http_url(value: object, *, max_length: int = PICTURE_MAX_LENGTH) -> str | None:
    text = str(value or "").strip()
    if not text or len(text) > max_length:
        return None
    try:
        parsed = urlparse(text)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return text
