from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, TypeAdapter, ValidationError as PydanticValidationError, field_validator

from animeshelf.api.schemas.auth import AuthUserResponse
from animeshelf.api.schemas.common import CamelModel, StatsResponse
from animeshelf.domain.entities.anime import AnimeRef, CatalogItem, HistoryEntry, ListEntry


_INT_ADAPTER = TypeAdapter(int)
_FLOAT_ADAPTER = TypeAdapter(float)


def _lenient(adapter: TypeAdapter, value: Any) -> Any:
    """Coerce with ``adapter``; anything it rejects becomes None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return adapter.validate_python(value)
    except PydanticValidationError:
        return None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


class AnimeRefRequest(CamelModel):
    anime_id: int = Field(..., gt=0)
    id_mal: int | None = None
    title: str
    cover: str | None = None
    banner: str | None = None
    status: str | None = None
    episodes: int | None = None
    score: float | None = None
    season_year: int | None = None
    genres: list[str] = Field(default_factory=list)

    @field_validator("anime_id", mode="before")
    @classmethod
    def reject_bool_id(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("animeId must be a positive integer")
        return value

    @field_validator("id_mal", "episodes", "season_year", mode="before")
    @classmethod
    def optional_int(cls, value: Any) -> int | None:
        return _lenient(_INT_ADAPTER, value)

    @field_validator("score", mode="before")
    @classmethod
    def optional_score(cls, value: Any) -> float | None:
        return _lenient(_FLOAT_ADAPTER, value)

    @field_validator("cover", "banner", "status", mode="before")
    @classmethod
    def optional_text(cls, value: Any) -> str | None:
        return _optional_str(value)

    @field_validator("genres", mode="before")
    @classmethod
    def genre_names(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [genre for genre in value if isinstance(genre, str)]


class ToggleListRequest(CamelModel):
    list_name: str = Field(..., alias="list")
    anime: AnimeRefRequest


class UpsertHistoryRequest(CamelModel):
    anime: AnimeRefRequest
    episode_number: int | None = None
    episode_title: str | None = None
    total_episodes: int | None = None

    @field_validator("episode_number", "total_episodes", mode="before")
    @classmethod
    def optional_int(cls, value: Any) -> int | None:
        return _lenient(_INT_ADAPTER, value)

    @field_validator("episode_title", mode="before")
    @classmethod
    def optional_title(cls, value: Any) -> str | None:
        return _optional_str(value)


class RemoveHistoryRequest(CamelModel):
    anime_id: int


class AnimeRefResponse(CamelModel):
    anime_id: int
    id_mal: int | None
    title: str
    cover: str
    banner: str
    status: str
    episodes: int | None
    score: int
    season_year: int | None
    genres: list[str]


class ListEntryResponse(AnimeRefResponse):
    saved_at: datetime


class HistoryEntryResponse(AnimeRefResponse):
    episode_number: int
    episode_title: str
    total_episodes: int | None
    updated_at: datetime


class ProfileBodyResponse(CamelModel):
    favorites: list[ListEntryResponse]
    pending: list[ListEntryResponse]
    history: list[HistoryEntryResponse]
    stats: StatsResponse
    created_at: datetime
    updated_at: datetime


class ProfileResponse(CamelModel):
    user: AuthUserResponse
    profile: ProfileBodyResponse


class ToggleListResponse(CamelModel):
    ok: bool
    list_name: str = Field(..., alias="list")
    added: bool
    stats: StatsResponse


class UpsertHistoryResponse(CamelModel):
    ok: bool
    entry: HistoryEntryResponse
    stats: StatsResponse


class RemoveHistoryResponse(CamelModel):
    ok: bool
    removed: bool
    stats: StatsResponse


class ClearHistoryResponse(CamelModel):
    ok: bool
    stats: StatsResponse


class RecommendationsResponse(CamelModel):
    items: list[AnimeRefResponse]
    warning: str | None = None


def _anime_fields(anime: AnimeRef | CatalogItem) -> dict[str, Any]:
    return {
        "anime_id": anime.anime_id,
        "id_mal": anime.id_mal,
        "title": anime.title,
        "cover": anime.cover,
        "banner": anime.banner,
        "status": anime.status,
        "episodes": anime.episodes,
        "score": anime.score,
        "season_year": anime.season_year,
        "genres": list(anime.genres),
    }


def map_catalog_item_response(item: CatalogItem) -> AnimeRefResponse:
    return AnimeRefResponse(**_anime_fields(item))


def map_list_entry_response(entry: ListEntry) -> ListEntryResponse:
    return ListEntryResponse(**_anime_fields(entry.anime), saved_at=entry.saved_at)


def map_history_entry_response(entry: HistoryEntry) -> HistoryEntryResponse:
    return HistoryEntryResponse(
        **_anime_fields(entry.anime),
        episode_number=entry.episode_number,
        episode_title=entry.episode_title,
        total_episodes=entry.total_episodes,
        updated_at=entry.updated_at,
    )
