from __future__ import annotations

from dataclasses import dataclass, field

from animeshelf.domain.entities.anime import AnimeRef, CatalogItem, HistoryEntry
from animeshelf.domain.entities.profile import ListName, Profile, ProfileStats


@dataclass(frozen=True)
class ProfileOutput:
    profile: Profile
    stats: ProfileStats


@dataclass(frozen=True)
class ToggleListInput:
    user_id: str
    list_name: str
    anime: AnimeRef


@dataclass(frozen=True)
class ToggleListOutput:
    list_name: ListName
    added: bool
    stats: ProfileStats


@dataclass(frozen=True)
class UpsertHistoryInput:
    user_id: str
    anime: AnimeRef
    episode_number: int | None = None
    episode_title: str | None = None
    total_episodes: int | None = None


@dataclass(frozen=True)
class UpsertHistoryOutput:
    entry: HistoryEntry
    stats: ProfileStats


@dataclass(frozen=True)
class RemoveHistoryOutput:
    removed: bool
    stats: ProfileStats


@dataclass(frozen=True)
class ClearHistoryOutput:
    stats: ProfileStats


@dataclass(frozen=True)
class RecommendationsOutput:
    items: list[CatalogItem] = field(default_factory=list)
    warning: str | None = None
