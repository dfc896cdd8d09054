from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import hmac
import logging
import secrets
from threading import Lock
from typing import Callable

from animeshelf.application.ports.session_port import SessionPort
from animeshelf.domain.entities.session import Session


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager(SessionPort):
    """In-memory session table keyed by the raw session id.

    Clients hold ``<session_id>.<hmac>``; the table never leaves the process,
    so sessions are lost on restart.
    """

    def __init__(
        self,
        *,
        secret: str,
        ttl: timedelta = timedelta(days=30),
        clock: Callable[[], datetime] = utcnow,
    ):
        if not secret:
            raise ValueError("Session secret is required.")
        self._secret = secret.encode("utf-8")
        self._ttl = ttl
        self._clock = clock
        self._lock = Lock()
        self._sessions: dict[str, Session] = {}

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def create_session(self, user_id: str) -> str:
        session_id = secrets.token_urlsafe(32)
        now = self._clock()
        session = Session(
            session_id=session_id,
            user_id=user_id,
            created_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._sessions[session_id] = session
        return f"{session_id}.{self._sign(session_id)}"

    def validate_session(self, token: str) -> Session | None:
        session_id = self._verified_id(token)
        if session_id is None:
            return None

        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.expires_at <= now:
                del self._sessions[session_id]
                return None
            refreshed = Session(
                session_id=session.session_id,
                user_id=session.user_id,
                created_at=session.created_at,
                expires_at=now + self._ttl,
            )
            self._sessions[session_id] = refreshed
            return refreshed

    def revoke_session(self, token: str) -> None:
        session_id = self._verified_id(token)
        if session_id is None:
            return
        with self._lock:
            self._sessions.pop(session_id, None)

    def prune_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, session in self._sessions.items() if session.expires_at <= now]
            for key in expired:
                del self._sessions[key]
        if expired:
            logger.info("session_manager: pruned_expired count=%s", len(expired))
        return len(expired)

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _sign(self, session_id: str) -> str:
        return hmac.new(self._secret, session_id.encode("utf-8"), hashlib.sha256).hexdigest()

    def _verified_id(self, token: str) -> str | None:
        if not token or not isinstance(token, str):
            return None
        session_id, sep, signature = token.rpartition(".")
        if not sep or not session_id or not signature:
            return None
        if not hmac.compare_digest(signature.encode("utf-8"), self._sign(session_id).encode("ascii")):
            return None
        return session_id
