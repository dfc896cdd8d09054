from __future__ import annotations

from animeshelf.application.dto.profile import (
    ClearHistoryOutput,
    RemoveHistoryOutput,
    UpsertHistoryInput,
    UpsertHistoryOutput,
)
from animeshelf.application.ports.store_port import StorePort
from animeshelf.domain.exceptions import ValidationError
from animeshelf.domain.services.anime_ref import build_history_entry
from animeshelf.domain.services.profile_lists import (
    clear_history,
    profile_stats,
    remove_history_entry,
    upsert_history,
)

from .auth_common import utcnow


class UpsertHistoryUseCase:
    def __init__(self, *, store: StorePort):
        self._store = store

    def execute(self, command: UpsertHistoryInput) -> UpsertHistoryOutput:
        def _tx(store: StorePort) -> UpsertHistoryOutput:
            now = utcnow()
            entry = build_history_entry(
                anime=command.anime,
                episode_number=command.episode_number,
                episode_title=command.episode_title,
                total_episodes=command.total_episodes,
                now=now,
            )
            profile = upsert_history(store.ensure_profile(user_id=command.user_id), entry=entry, now=now)
            store.save_profile(profile)
            return UpsertHistoryOutput(entry=entry, stats=profile_stats(profile))

        return self._store.execute_in_transaction(_tx)


class RemoveHistoryUseCase:
    def __init__(self, *, store: StorePort):
        self._store = store

    def execute(self, *, user_id: str, anime_id: int) -> RemoveHistoryOutput:
        if isinstance(anime_id, bool) or not isinstance(anime_id, int) or anime_id <= 0:
            raise ValidationError("animeId must be a positive integer.")

        def _tx(store: StorePort) -> RemoveHistoryOutput:
            profile = store.ensure_profile(user_id=user_id)
            updated, removed = remove_history_entry(profile, anime_id=anime_id, now=utcnow())
            if removed:
                store.save_profile(updated)
            return RemoveHistoryOutput(removed=removed, stats=profile_stats(updated))

        return self._store.execute_in_transaction(_tx)


class ClearHistoryUseCase:
    def __init__(self, *, store: StorePort):
        self._store = store

    def execute(self, *, user_id: str) -> ClearHistoryOutput:
        def _tx(store: StorePort) -> ClearHistoryOutput:
            profile = clear_history(store.ensure_profile(user_id=user_id), now=utcnow())
            store.save_profile(profile)
            return ClearHistoryOutput(stats=profile_stats(profile))

        return self._store.execute_in_transaction(_tx)
