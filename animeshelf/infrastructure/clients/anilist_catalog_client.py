from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any

import httpx

from animeshelf.application.ports.catalog_pool_port import CatalogPoolPort
from animeshelf.domain.entities.anime import CatalogItem
from animeshelf.domain.exceptions import UpstreamError


logger = logging.getLogger(__name__)


POOL_SLICES: tuple[str, ...] = ("trending", "popular", "top")

POOL_QUERY = """
query RecommendationPool($perPage: Int!) {
  trending: Page(page: 1, perPage: $perPage) {
    media(type: ANIME, sort: TRENDING_DESC, isAdult: false) { ...PoolMedia }
  }
  popular: Page(page: 1, perPage: $perPage) {
    media(type: ANIME, sort: POPULARITY_DESC, isAdult: false) { ...PoolMedia }
  }
  top: Page(page: 1, perPage: $perPage) {
    media(type: ANIME, sort: SCORE_DESC, isAdult: false) { ...PoolMedia }
  }
}

fragment PoolMedia on Media {
  id
  idMal
  title { romaji english native }
  coverImage { extraLarge large medium }
  bannerImage
  status
  episodes
  averageScore
  seasonYear
  genres
}
"""


@dataclass(frozen=True)
class AniListClientSettings:
    api_url: str
    timeout_seconds: float
    max_retries: int
    per_page: int


class AniListCatalogClient(CatalogPoolPort):
    def __init__(self, settings: AniListClientSettings):
        self._settings = settings

    def fetch_pool(self) -> list[CatalogItem]:
        payload = self._post_graphql(query=POOL_QUERY, variables={"perPage": self._settings.per_page})
        data = payload.get("data")
        if not isinstance(data, dict):
            raise UpstreamError("Catalog response is missing data.")

        items: list[CatalogItem] = []
        seen: set[int] = set()
        for slice_name in POOL_SLICES:
            page = data.get(slice_name)
            media = page.get("media") if isinstance(page, dict) else None
            if not isinstance(media, list):
                raise UpstreamError(f"Catalog slice '{slice_name}' is malformed.")
            for row in media:
                item = map_media_to_catalog_item(row)
                if item is None or item.anime_id in seen:
                    continue
                seen.add(item.anime_id)
                items.append(item)

        logger.info("anilist_catalog_client: fetched_pool items=%s", len(items))
        return items

    def _post_graphql(self, *, query: str, variables: dict) -> dict:
        attempts = max(1, self._settings.max_retries)
        delay = 0.25
        last_exc: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                with httpx.Client(timeout=self._settings.timeout_seconds) as client:
                    response = client.post(
                        self._settings.api_url,
                        json={"query": query, "variables": variables},
                        headers={"Accept": "application/json"},
                    )
                    response.raise_for_status()
                    payload = response.json()

                if not isinstance(payload, dict):
                    raise ValueError("GraphQL payload is not an object.")
                errors = payload.get("errors") or []
                if errors:
                    message = " | ".join(
                        str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors
                    )
                    raise RuntimeError(message)

                return payload
            except (httpx.HTTPError, RuntimeError, ValueError) as exc:
                last_exc = exc
                if attempt == attempts:
                    break
                logger.warning(
                    "anilist_catalog_client: graphql_retry attempt=%s/%s error=%s",
                    attempt,
                    attempts,
                    exc,
                )
                time.sleep(delay)
                delay *= 2

        logger.error("anilist_catalog_client: graphql_failed error=%s", last_exc)
        raise UpstreamError(f"Catalog request failed: {last_exc}") from last_exc


def _pick_title(title: Any) -> str:
    if not isinstance(title, dict):
        return ""
    for key in ("english", "romaji", "native"):
        value = title.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _pick_cover(cover: Any) -> str:
    if not isinstance(cover, dict):
        return ""
    for key in ("extraLarge", "large", "medium"):
        value = cover.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def map_media_to_catalog_item(row: Any) -> CatalogItem | None:
    if not isinstance(row, dict):
        return None
    anime_id = row.get("id")
    if not isinstance(anime_id, int) or isinstance(anime_id, bool) or anime_id <= 0:
        return None

    id_mal = row.get("idMal")
    episodes = row.get("episodes")
    season_year = row.get("seasonYear")
    score = row.get("averageScore")
    genres = row.get("genres") if isinstance(row.get("genres"), list) else []
    return CatalogItem(
        anime_id=anime_id,
        id_mal=id_mal if isinstance(id_mal, int) and id_mal > 0 else None,
        title=_pick_title(row.get("title")),
        cover=_pick_cover(row.get("coverImage")),
        banner=row.get("bannerImage") or "",
        status=str(row.get("status") or ""),
        episodes=episodes if isinstance(episodes, int) else None,
        score=int(score) if isinstance(score, (int, float)) else 0,
        season_year=season_year if isinstance(season_year, int) else None,
        genres=tuple(str(genre) for genre in genres if genre),
    )
