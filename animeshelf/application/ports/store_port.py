from __future__ import annotations

from typing import Callable, Protocol, TypeVar

from animeshelf.domain.entities.profile import Profile
from animeshelf.domain.entities.user import User


TStoreResult = TypeVar("TStoreResult")


class StorePort(Protocol):
    def execute_in_transaction(self, fn: Callable[[StorePort], TStoreResult]) -> TStoreResult:
        ...

    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_email(self, *, email: str) -> User | None:
        ...

    def get_user_by_google_sub(self, *, google_sub: str) -> User | None:
        ...

    def save_user(self, user: User) -> User:
        ...

    def get_profile(self, *, user_id: str) -> Profile | None:
        ...

    def ensure_profile(self, *, user_id: str) -> Profile:
        ...

    def save_profile(self, profile: Profile) -> Profile:
        ...
