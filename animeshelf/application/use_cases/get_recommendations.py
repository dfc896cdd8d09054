from __future__ import annotations

import logging

from animeshelf.application.dto.profile import RecommendationsOutput
from animeshelf.application.ports.catalog_pool_port import CatalogPoolPort
from animeshelf.application.ports.store_port import StorePort
from animeshelf.domain.entities.profile import empty_profile
from animeshelf.domain.exceptions import UpstreamError
from animeshelf.domain.services.recommendation import (
    DEFAULT_LIMIT,
    build_genre_weights,
    rank_recommendations,
)

from .auth_common import utcnow


logger = logging.getLogger(__name__)

UNAVAILABLE_WARNING = "Recommendations are temporarily unavailable."


class GetRecommendationsUseCase:
    def __init__(self, *, store: StorePort, catalog_pool_port: CatalogPoolPort):
        self._store = store
        self._catalog_pool_port = catalog_pool_port

    def execute(self, *, user_id: str, limit: int = DEFAULT_LIMIT) -> RecommendationsOutput:
        profile = self._store.get_profile(user_id=user_id) or empty_profile(user_id=user_id, now=utcnow())
        weights = build_genre_weights(profile)
        if not weights:
            return RecommendationsOutput(items=[])

        try:
            pool = self._catalog_pool_port.fetch_pool()
        except UpstreamError as exc:
            logger.warning("get_recommendations: catalog_unavailable user_id=%s error=%s", user_id, exc)
            return RecommendationsOutput(items=[], warning=UNAVAILABLE_WARNING)

        items = rank_recommendations(profile, pool, limit=limit, weights=weights)
        return RecommendationsOutput(items=items)
