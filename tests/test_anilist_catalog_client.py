from __future__ import annotations

import httpx
import pytest

from animeshelf.domain.exceptions import UpstreamError
from animeshelf.infrastructure.clients.anilist_catalog_client import (
    AniListCatalogClient,
    AniListClientSettings,
    map_media_to_catalog_item,
)


def _make_client(*, max_retries: int = 1) -> AniListCatalogClient:
    return AniListCatalogClient(
        AniListClientSettings(
            api_url="https://graphql.anilist.test",
            timeout_seconds=5,
            max_retries=max_retries,
            per_page=50,
        )
    )


def _media(anime_id: int, **overrides) -> dict:
    row = {
        "id": anime_id,
        "idMal": anime_id + 1000,
        "title": {"romaji": f"Romaji {anime_id}", "english": f"English {anime_id}", "native": None},
        "coverImage": {"extraLarge": None, "large": f"https://img.test/{anime_id}.jpg", "medium": None},
        "bannerImage": None,
        "status": "FINISHED",
        "episodes": 12,
        "averageScore": 81,
        "seasonYear": 2019,
        "genres": ["Action", "Drama"],
    }
    row.update(overrides)
    return row


def _install_transport(monkeypatch: pytest.MonkeyPatch, handler) -> None:
    real_client = httpx.Client
    transport = httpx.MockTransport(handler)
    monkeypatch.setattr(
        "animeshelf.infrastructure.clients.anilist_catalog_client.httpx.Client",
        lambda **kwargs: real_client(transport=transport, **kwargs),
    )
    monkeypatch.setattr(
        "animeshelf.infrastructure.clients.anilist_catalog_client.time.sleep",
        lambda _seconds: None,
    )


def test_map_media_prefers_english_title_and_largest_cover():
    item = map_media_to_catalog_item(_media(5, coverImage={"extraLarge": "https://img.test/xl.jpg"}))

    assert item.anime_id == 5
    assert item.id_mal == 1005
    assert item.title == "English 5"
    assert item.cover == "https://img.test/xl.jpg"
    assert item.score == 81
    assert item.genres == ("Action", "Drama")


def test_map_media_skips_rows_without_id():
    assert map_media_to_catalog_item({"title": {"romaji": "x"}}) is None
    assert map_media_to_catalog_item("bad") is None


def test_fetch_pool_merges_slices_without_duplicates(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()
    payload = {
        "data": {
            "trending": {"media": [_media(1), _media(2)]},
            "popular": {"media": [_media(2), _media(3)]},
            "top": {"media": [_media(1), _media(4, averageScore=None)]},
        }
    }
    monkeypatch.setattr(client, "_post_graphql", lambda *, query, variables: payload)

    pool = client.fetch_pool()

    assert [item.anime_id for item in pool] == [1, 2, 3, 4]
    assert pool[-1].score == 0


def test_fetch_pool_rejects_malformed_slice(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()
    payload = {"data": {"trending": {"media": []}, "popular": None, "top": {"media": []}}}
    monkeypatch.setattr(client, "_post_graphql", lambda *, query, variables: payload)

    with pytest.raises(UpstreamError):
        client.fetch_pool()


def test_post_graphql_retries_then_succeeds(monkeypatch: pytest.MonkeyPatch):
    calls: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.read().decode("utf-8"))
        if len(calls) == 1:
            return httpx.Response(503, json={"errors": [{"message": "busy"}]})
        return httpx.Response(
            200,
            json={"data": {"trending": {"media": [_media(9)]}, "popular": {"media": []}, "top": {"media": []}}},
        )

    _install_transport(monkeypatch, handler)
    client = _make_client(max_retries=3)

    pool = client.fetch_pool()

    assert len(calls) == 2
    assert '"perPage": 50' in calls[0] or '"perPage":50' in calls[0]
    assert [item.anime_id for item in pool] == [9]


def test_post_graphql_raises_upstream_error_after_exhausting_retries(monkeypatch: pytest.MonkeyPatch):
    attempts = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["count"] += 1
        return httpx.Response(200, json={"errors": [{"message": "Too Many Requests"}, "plain"]})

    _install_transport(monkeypatch, handler)
    client = _make_client(max_retries=2)

    with pytest.raises(UpstreamError) as exc_info:
        client.fetch_pool()

    assert attempts["count"] == 2
    assert "Too Many Requests | plain" in str(exc_info.value)
