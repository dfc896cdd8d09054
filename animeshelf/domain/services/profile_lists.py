from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import cast

from animeshelf.domain.entities.anime import AnimeRef, HistoryEntry, ListEntry
from animeshelf.domain.entities.profile import (
    LIST_CAPS,
    LIST_NAMES,
    ListName,
    MAX_HISTORY,
    Profile,
    ProfileStats,
)
from animeshelf.domain.exceptions import ValidationError


def validate_list_name(list_name: str) -> ListName:
    name = (list_name or "").strip().lower()
    if name not in LIST_NAMES:
        raise ValidationError("list must be 'favorites' or 'pending'.")
    return cast(ListName, name)


def toggle_list_membership(
    profile: Profile,
    *,
    list_name: str,
    anime: AnimeRef,
    now: datetime,
) -> tuple[Profile, bool]:
    name = validate_list_name(list_name)
    current: tuple[ListEntry, ...] = getattr(profile, name)

    remaining = tuple(entry for entry in current if entry.anime.anime_id != anime.anime_id)
    if len(remaining) != len(current):
        return replace(profile, **{name: remaining, "updated_at": now}), False

    updated = ((ListEntry(anime=anime, saved_at=now),) + current)[: LIST_CAPS[name]]
    return replace(profile, **{name: updated, "updated_at": now}), True


def upsert_history(profile: Profile, *, entry: HistoryEntry, now: datetime) -> Profile:
    # Always moves to the front: history is ordered by recency, not episode.
    others = tuple(item for item in profile.history if item.anime.anime_id != entry.anime.anime_id)
    history = ((entry,) + others)[:MAX_HISTORY]
    return replace(profile, history=history, updated_at=now)


def remove_history_entry(profile: Profile, *, anime_id: int, now: datetime) -> tuple[Profile, bool]:
    remaining = tuple(item for item in profile.history if item.anime.anime_id != anime_id)
    if len(remaining) == len(profile.history):
        return profile, False
    return replace(profile, history=remaining, updated_at=now), True


def clear_history(profile: Profile, *, now: datetime) -> Profile:
    return replace(profile, history=(), updated_at=now)


def profile_stats(profile: Profile) -> ProfileStats:
    return ProfileStats(
        history=len(profile.history),
        favorites=len(profile.favorites),
        pending=len(profile.pending),
    )
