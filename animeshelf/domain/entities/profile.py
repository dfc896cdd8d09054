from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from animeshelf.domain.entities.anime import HistoryEntry, ListEntry


ListName = Literal["favorites", "pending"]

LIST_NAMES: tuple[str, ...] = ("favorites", "pending")
MAX_FAVORITES = 200
MAX_PENDING = 200
MAX_HISTORY = 300

LIST_CAPS = {
    "favorites": MAX_FAVORITES,
    "pending": MAX_PENDING,
}


@dataclass(frozen=True)
class Profile:
    user_id: str
    favorites: tuple[ListEntry, ...]
    pending: tuple[ListEntry, ...]
    history: tuple[HistoryEntry, ...]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ProfileStats:
    history: int
    favorites: int
    pending: int


def empty_profile(*, user_id: str, now: datetime) -> Profile:
    return Profile(
        user_id=user_id,
        favorites=(),
        pending=(),
        history=(),
        created_at=now,
        updated_at=now,
    )
