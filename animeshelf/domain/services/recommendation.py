from __future__ import annotations

from typing import Iterable, Sequence

from animeshelf.domain.entities.anime import AnimeRef, CatalogItem
from animeshelf.domain.entities.profile import Profile


HISTORY_BASE_WEIGHT = 6
FAVORITES_BASE_WEIGHT = 5
PENDING_BASE_WEIGHT = 3
DECAY_STEP = 3
GENRE_MULTIPLIER = 12
AIRING_BONUS = 4
AIRING_STATUS = "RELEASING"
DEFAULT_LIMIT = 24


def _accumulate(weights: dict[str, int], refs: Iterable[AnimeRef], base: int) -> None:
    for index, anime in enumerate(refs):
        weight = max(1, base - index // DECAY_STEP)
        for genre in anime.genres:
            weights[genre] = weights.get(genre, 0) + weight


def build_genre_weights(profile: Profile) -> dict[str, int]:
    weights: dict[str, int] = {}
    _accumulate(weights, (entry.anime for entry in profile.history), HISTORY_BASE_WEIGHT)
    _accumulate(weights, (entry.anime for entry in profile.favorites), FAVORITES_BASE_WEIGHT)
    _accumulate(weights, (entry.anime for entry in profile.pending), PENDING_BASE_WEIGHT)
    return weights


def blocked_anime_ids(profile: Profile) -> set[int]:
    blocked = {entry.anime.anime_id for entry in profile.history}
    blocked.update(entry.anime.anime_id for entry in profile.favorites)
    blocked.update(entry.anime.anime_id for entry in profile.pending)
    return blocked


def score_item(item: CatalogItem, weights: dict[str, int]) -> int:
    affinity = sum(weights.get(genre, 0) for genre in item.genres)
    bonus = AIRING_BONUS if item.status == AIRING_STATUS else 0
    return affinity * GENRE_MULTIPLIER + item.score + bonus


def rank_recommendations(
    profile: Profile,
    pool: Sequence[CatalogItem],
    *,
    limit: int = DEFAULT_LIMIT,
    weights: dict[str, int] | None = None,
) -> list[CatalogItem]:
    if weights is None:
        weights = build_genre_weights(profile)
    if not weights or limit <= 0:
        return []

    blocked = blocked_anime_ids(profile)
    candidates = [item for item in pool if item.anime_id not in blocked]
    # sorted() is stable, so equal scores keep pool order.
    ranked = sorted(candidates, key=lambda item: score_item(item, weights), reverse=True)
    return ranked[:limit]
