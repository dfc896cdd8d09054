from __future__ import annotations

from animeshelf.application.dto.profile import ToggleListInput, ToggleListOutput
from animeshelf.application.ports.store_port import StorePort
from animeshelf.domain.services.profile_lists import (
    profile_stats,
    toggle_list_membership,
    validate_list_name,
)

from .auth_common import utcnow


class ToggleListUseCase:
    def __init__(self, *, store: StorePort):
        self._store = store

    def execute(self, command: ToggleListInput) -> ToggleListOutput:
        list_name = validate_list_name(command.list_name)

        def _tx(store: StorePort) -> ToggleListOutput:
            profile = store.ensure_profile(user_id=command.user_id)
            updated, added = toggle_list_membership(
                profile,
                list_name=list_name,
                anime=command.anime,
                now=utcnow(),
            )
            store.save_profile(updated)
            return ToggleListOutput(list_name=list_name, added=added, stats=profile_stats(updated))

        return self._store.execute_in_transaction(_tx)
