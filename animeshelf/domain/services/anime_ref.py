from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from animeshelf.domain.entities.anime import AnimeRef, HistoryEntry
from animeshelf.domain.exceptions import ValidationError
from animeshelf.domain.services.identity import collapse_whitespace, safe_http_url


TITLE_MAX_LENGTH = 200
STATUS_MAX_LENGTH = 40
GENRE_MAX_LENGTH = 40
MAX_GENRES = 12
URL_MAX_LENGTH = 1000
MIN_SEASON_YEAR = 1900
MAX_SEASON_YEAR = 2100


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text.isascii():
            return None
        try:
            return int(text)
        except ValueError:
            return None
    return None


def _positive_int(value: Any) -> int | None:
    number = _to_int(value)
    if number is None or number <= 0:
        return None
    return number


def _non_negative_int(value: Any) -> int | None:
    number = _to_int(value)
    if number is None or number < 0:
        return None
    return number


def _score(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:
        return 0
    return int(round(min(100.0, max(0.0, number))))


def _season_year(value: Any) -> int | None:
    year = _to_int(value)
    if year is None or year < MIN_SEASON_YEAR or year > MAX_SEASON_YEAR:
        return None
    return year


def _genres(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    out: list[str] = []
    seen: set[str] = set()
    for raw in value:
        genre = collapse_whitespace(raw)[:GENRE_MAX_LENGTH].strip()
        if not genre or genre in seen:
            continue
        seen.add(genre)
        out.append(genre)
        if len(out) >= MAX_GENRES:
            break
    return tuple(out)


def sanitize_anime_ref(raw: Any) -> AnimeRef:
    """Validate a client-supplied anime payload.

    ``animeId`` and ``title`` are required; anything failing them rejects the
    whole payload. Optional fields are coerced, clamped or dropped.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("anime must be an object.")

    anime_id = _positive_int(raw.get("animeId"))
    if anime_id is None:
        raise ValidationError("anime.animeId must be a positive integer.")

    title = collapse_whitespace(raw.get("title"))[:TITLE_MAX_LENGTH].strip()
    if not title:
        raise ValidationError("anime.title is required.")

    return AnimeRef(
        anime_id=anime_id,
        id_mal=_positive_int(raw.get("idMal")),
        title=title,
        cover=safe_http_url(raw.get("cover"), max_length=URL_MAX_LENGTH) or "",
        banner=safe_http_url(raw.get("banner"), max_length=URL_MAX_LENGTH) or "",
        status=collapse_whitespace(raw.get("status"))[:STATUS_MAX_LENGTH].strip(),
        episodes=_non_negative_int(raw.get("episodes")),
        score=_score(raw.get("score")),
        season_year=_season_year(raw.get("seasonYear")),
        genres=_genres(raw.get("genres")),
    )


def build_history_entry(
    *,
    anime: AnimeRef,
    episode_number: Any,
    episode_title: Any,
    total_episodes: Any,
    now: datetime,
) -> HistoryEntry:
    episode = _positive_int(episode_number) or 1
    total = _non_negative_int(total_episodes)
    if total is None:
        total = anime.episodes
    return HistoryEntry(
        anime=anime,
        episode_number=episode,
        episode_title=collapse_whitespace(episode_title)[:TITLE_MAX_LENGTH].strip(),
        total_episodes=total,
        updated_at=now,
    )
