from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
import tempfile
from threading import RLock
from typing import Any, Callable, TypeVar

from animeshelf.application.ports.store_port import StorePort
from animeshelf.domain.entities.profile import Profile, empty_profile
from animeshelf.domain.entities.user import User
from animeshelf.domain.exceptions import StorageError
from animeshelf.infrastructure.persistence.document_mapper import (
    map_doc_to_profile,
    map_doc_to_user,
    map_profile_to_doc,
    map_user_to_doc,
)


logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1

TResult = TypeVar("TResult")


class CorruptDocumentError(ValueError):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JsonDocumentStore(StorePort):
    """Single JSON document holding users, provider indices and profiles.

    The whole document lives in memory; every committed transaction rewrites
    it to disk through a temp file and ``os.replace``. A process-wide RLock
    serializes load-mutate-save cycles coming from the request thread pool.
    """

    def __init__(self, path: str | Path, *, clock: Callable[[], datetime] = utcnow):
        self._path = Path(path)
        self._clock = clock
        self._lock = RLock()
        self._users: dict[str, User] = {}
        self._email_index: dict[str, str] = {}
        self._google_index: dict[str, str] = {}
        self._profiles: dict[str, Profile] = {}
        self._dirty = False

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> None:
        with self._lock:
            self._reset()
            if not self._path.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._write(self._to_document())
                logger.info("json_store: created_empty path=%s", self._path)
                return

            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
                self._from_document(raw)
            except (OSError, KeyError, TypeError, ValueError) as exc:
                backup = self._backup_corrupt_file()
                self._reset()
                logger.error(
                    "json_store: corrupt_document path=%s backup=%s error=%s",
                    self._path,
                    backup,
                    exc,
                )
                self._write(self._to_document())
                return

            logger.info(
                "json_store: loaded path=%s users=%s profiles=%s",
                self._path,
                len(self._users),
                len(self._profiles),
            )

    def save(self) -> None:
        with self._lock:
            self._write(self._to_document())
            self._dirty = False

    def execute_in_transaction(self, fn: Callable[[StorePort], TResult]) -> TResult:
        with self._lock:
            snapshot = self._snapshot()
            try:
                result = fn(self)
                if self._dirty:
                    self.save()
            except BaseException:
                self._restore(snapshot)
                raise
            return result

    def get_user_by_id(self, *, user_id: str) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_email(self, *, email: str) -> User | None:
        with self._lock:
            user_id = self._email_index.get(email.strip().lower())
            return self._users.get(user_id) if user_id else None

    def get_user_by_google_sub(self, *, google_sub: str) -> User | None:
        with self._lock:
            user_id = self._google_index.get(google_sub)
            return self._users.get(user_id) if user_id else None

    def save_user(self, user: User) -> User:
        with self._lock:
            previous = self._users.get(user.id)
            if previous is not None:
                if previous.email != user.email and self._email_index.get(previous.email) == user.id:
                    del self._email_index[previous.email]
                if (
                    previous.google_sub
                    and previous.google_sub != user.google_sub
                    and self._google_index.get(previous.google_sub) == user.id
                ):
                    del self._google_index[previous.google_sub]

            owner = self._email_index.get(user.email)
            if owner is not None and owner != user.id:
                raise ValueError(f"Email index conflict for user {user.id}.")
            if user.google_sub:
                google_owner = self._google_index.get(user.google_sub)
                if google_owner is not None and google_owner != user.id:
                    raise ValueError(f"Google subject index conflict for user {user.id}.")
                self._google_index[user.google_sub] = user.id

            self._users[user.id] = user
            self._email_index[user.email] = user.id
            self._dirty = True
            return user

    def get_profile(self, *, user_id: str) -> Profile | None:
        with self._lock:
            return self._profiles.get(user_id)

    def ensure_profile(self, *, user_id: str) -> Profile:
        with self._lock:
            profile = self._profiles.get(user_id)
            if profile is None:
                profile = empty_profile(user_id=user_id, now=self._clock())
                self._profiles[user_id] = profile
                self._dirty = True
            return profile

    def save_profile(self, profile: Profile) -> Profile:
        with self._lock:
            self._profiles[profile.user_id] = profile
            self._dirty = True
            return profile

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {"users": len(self._users), "profiles": len(self._profiles)}

    def _reset(self) -> None:
        self._users = {}
        self._email_index = {}
        self._google_index = {}
        self._profiles = {}
        self._dirty = False

    def _snapshot(self) -> tuple:
        # Entities are frozen, so shallow copies of the maps are enough.
        return (
            dict(self._users),
            dict(self._email_index),
            dict(self._google_index),
            dict(self._profiles),
            self._dirty,
        )

    def _restore(self, snapshot: tuple) -> None:
        (
            self._users,
            self._email_index,
            self._google_index,
            self._profiles,
            self._dirty,
        ) = snapshot

    def _to_document(self) -> dict[str, Any]:
        return {
            "version": DOCUMENT_VERSION,
            "users": {user_id: map_user_to_doc(user) for user_id, user in self._users.items()},
            "emailIndex": dict(self._email_index),
            "googleIndex": dict(self._google_index),
            "profiles": {
                user_id: map_profile_to_doc(profile) for user_id, profile in self._profiles.items()
            },
        }

    def _from_document(self, raw: Any) -> None:
        if not isinstance(raw, dict):
            raise CorruptDocumentError("Document root must be an object.")
        sections = {}
        for key in ("users", "emailIndex", "googleIndex", "profiles"):
            value = raw.get(key, {})
            if not isinstance(value, dict):
                raise CorruptDocumentError(f"Document section '{key}' must be an object.")
            sections[key] = value

        self._users = {str(user_id): map_doc_to_user(doc) for user_id, doc in sections["users"].items()}
        self._email_index = {
            str(email): str(user_id)
            for email, user_id in sections["emailIndex"].items()
            if str(user_id) in self._users
        }
        self._google_index = {
            str(sub): str(user_id)
            for sub, user_id in sections["googleIndex"].items()
            if str(user_id) in self._users
        }
        # Indices are derived data; rebuild any entry missing from disk.
        for user in self._users.values():
            self._email_index.setdefault(user.email, user.id)
            if user.google_sub:
                self._google_index.setdefault(user.google_sub, user.id)
        self._profiles = {
            str(user_id): map_doc_to_profile(str(user_id), doc)
            for user_id, doc in sections["profiles"].items()
        }

    def _write(self, document: dict[str, Any]) -> None:
        payload = json.dumps(document, ensure_ascii=False, indent=2)
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=str(self._path.parent),
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as exc:
            logger.error("json_store: save_failed path=%s error=%s", self._path, exc)
            raise StorageError("Failed to persist data.") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    def _backup_corrupt_file(self) -> Path | None:
        stamp = self._clock().strftime("%Y%m%dT%H%M%SZ")
        backup = self._path.with_name(f"{self._path.name}.corrupt-{stamp}")
        try:
            os.replace(self._path, backup)
        except OSError as exc:
            logger.error("json_store: corrupt_backup_failed path=%s error=%s", self._path, exc)
            return None
        return backup
