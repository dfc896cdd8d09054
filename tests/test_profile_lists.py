from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from animeshelf.domain.entities.anime import AnimeRef, HistoryEntry
from animeshelf.domain.entities.profile import MAX_FAVORITES, MAX_HISTORY, empty_profile
from animeshelf.domain.exceptions import ValidationError
from animeshelf.domain.services.profile_lists import (
    clear_history,
    profile_stats,
    remove_history_entry,
    toggle_list_membership,
    upsert_history,
    validate_list_name,
)


T0 = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _anime(anime_id: int, *, genres: tuple[str, ...] = ("Action",)) -> AnimeRef:
    return AnimeRef(
        anime_id=anime_id,
        id_mal=None,
        title=f"Anime {anime_id}",
        cover="",
        banner="",
        status="FINISHED",
        episodes=12,
        score=75,
        season_year=2021,
        genres=genres,
    )


def _history(anime_id: int, episode: int, at: datetime) -> HistoryEntry:
    return HistoryEntry(
        anime=_anime(anime_id),
        episode_number=episode,
        episode_title="",
        total_episodes=12,
        updated_at=at,
    )


def test_toggle_twice_adds_then_removes():
    original = empty_profile(user_id="user-1", now=T0)

    added_profile, added = toggle_list_membership(original, list_name="favorites", anime=_anime(101), now=T0)
    removed_profile, added_again = toggle_list_membership(
        added_profile, list_name="favorites", anime=_anime(101), now=T0 + timedelta(seconds=1)
    )

    assert added is True
    assert added_again is False
    assert added_profile.favorites[0].anime.anime_id == 101
    assert removed_profile.favorites == original.favorites
    assert removed_profile.updated_at == T0 + timedelta(seconds=1)


def test_toggle_inserts_most_recent_first_and_keeps_lists_independent():
    profile = empty_profile(user_id="user-1", now=T0)
    profile, _ = toggle_list_membership(profile, list_name="pending", anime=_anime(1), now=T0)
    profile, _ = toggle_list_membership(profile, list_name="pending", anime=_anime(2), now=T0)
    profile, _ = toggle_list_membership(profile, list_name="favorites", anime=_anime(1), now=T0)

    assert [entry.anime.anime_id for entry in profile.pending] == [2, 1]
    assert [entry.anime.anime_id for entry in profile.favorites] == [1]


def test_toggle_rejects_unknown_list():
    profile = empty_profile(user_id="user-1", now=T0)

    with pytest.raises(ValidationError):
        toggle_list_membership(profile, list_name="history", anime=_anime(1), now=T0)


def test_favorites_cap_evicts_oldest_entries():
    profile = empty_profile(user_id="user-1", now=T0)
    for anime_id in range(1, MAX_FAVORITES + 6):
        profile, added = toggle_list_membership(profile, list_name="favorites", anime=_anime(anime_id), now=T0)
        assert added is True

    ids = [entry.anime.anime_id for entry in profile.favorites]
    assert len(ids) == MAX_FAVORITES
    assert ids[0] == MAX_FAVORITES + 5
    assert all(evicted not in ids for evicted in range(1, 6))


def test_upsert_history_dedupes_and_moves_to_front():
    profile = empty_profile(user_id="user-1", now=T0)
    profile = upsert_history(profile, entry=_history(55, 3, T0), now=T0)
    profile = upsert_history(profile, entry=_history(77, 1, T0), now=T0)
    profile = upsert_history(profile, entry=_history(55, 4, T0 + timedelta(minutes=5)), now=T0)

    assert [entry.anime.anime_id for entry in profile.history] == [55, 77]
    assert profile.history[0].episode_number == 4


def test_upsert_history_moves_to_front_even_for_lower_episode():
    profile = empty_profile(user_id="user-1", now=T0)
    profile = upsert_history(profile, entry=_history(1, 9, T0), now=T0)
    profile = upsert_history(profile, entry=_history(2, 1, T0), now=T0)
    profile = upsert_history(profile, entry=_history(1, 2, T0), now=T0)

    assert profile.history[0].anime.anime_id == 1
    assert profile.history[0].episode_number == 2


def test_history_cap():
    profile = empty_profile(user_id="user-1", now=T0)
    for anime_id in range(1, MAX_HISTORY + 3):
        profile = upsert_history(profile, entry=_history(anime_id, 1, T0), now=T0)

    assert len(profile.history) == MAX_HISTORY
    assert profile.history[-1].anime.anime_id == 3


def test_remove_history_entry_reports_whether_removed():
    profile = upsert_history(empty_profile(user_id="user-1", now=T0), entry=_history(5, 1, T0), now=T0)

    unchanged, removed_missing = remove_history_entry(profile, anime_id=6, now=T0)
    updated, removed = remove_history_entry(profile, anime_id=5, now=T0)

    assert removed_missing is False
    assert unchanged is profile
    assert removed is True
    assert updated.history == ()


def test_clear_history_empties_list_and_stats_follow():
    profile = empty_profile(user_id="user-1", now=T0)
    profile = upsert_history(profile, entry=_history(5, 1, T0), now=T0)
    profile, _ = toggle_list_membership(profile, list_name="pending", anime=_anime(9), now=T0)

    cleared = clear_history(profile, now=T0 + timedelta(hours=1))
    stats = profile_stats(cleared)

    assert cleared.history == ()
    assert cleared.updated_at == T0 + timedelta(hours=1)
    assert (stats.history, stats.favorites, stats.pending) == (0, 0, 1)


@pytest.mark.parametrize("raw,expected", [("favorites", "favorites"), (" Pending ", "pending")])
def test_validate_list_name_normalizes_known_lists(raw: str, expected: str):
    assert validate_list_name(raw) == expected
