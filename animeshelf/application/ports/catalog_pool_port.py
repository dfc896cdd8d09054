from __future__ import annotations

from typing import Protocol

from animeshelf.domain.entities.anime import CatalogItem


class CatalogPoolPort(Protocol):
    def fetch_pool(self) -> list[CatalogItem]:
        ...
