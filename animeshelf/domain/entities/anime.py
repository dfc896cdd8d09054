from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AnimeRef:
    anime_id: int
    id_mal: int | None
    title: str
    cover: str
    banner: str
    status: str
    episodes: int | None
    score: int
    season_year: int | None
    genres: tuple[str, ...]


@dataclass(frozen=True)
class CatalogItem:
    """Catalog entry as returned by the upstream pool; same shape as AnimeRef."""

    anime_id: int
    id_mal: int | None
    title: str
    cover: str
    banner: str
    status: str
    episodes: int | None
    score: int
    season_year: int | None
    genres: tuple[str, ...]


@dataclass(frozen=True)
class ListEntry:
    anime: AnimeRef
    saved_at: datetime


@dataclass(frozen=True)
class HistoryEntry:
    anime: AnimeRef
    episode_number: int
    episode_title: str
    total_episodes: int | None
    updated_at: datetime
