from __future__ import annotations

from animeshelf.application.dto.profile import ProfileOutput
from animeshelf.application.ports.store_port import StorePort
from animeshelf.domain.services.profile_lists import profile_stats


class GetProfileUseCase:
    def __init__(self, *, store: StorePort):
        self._store = store

    def execute(self, *, user_id: str) -> ProfileOutput:
        profile = self._store.get_profile(user_id=user_id)
        if profile is None:
            profile = self._store.execute_in_transaction(lambda store: store.ensure_profile(user_id=user_id))
        return ProfileOutput(profile=profile, stats=profile_stats(profile))
