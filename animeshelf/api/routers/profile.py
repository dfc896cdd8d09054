from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from animeshelf.api.deps import (
    get_clear_history_use_case,
    get_current_user,
    get_profile_use_case,
    get_recommendations_use_case,
    get_remove_history_use_case,
    get_toggle_list_use_case,
    get_upsert_history_use_case,
)
from animeshelf.api.schemas.auth import map_auth_user_response, map_stats_response
from animeshelf.api.schemas.profile import (
    AnimeRefRequest,
    ClearHistoryResponse,
    ProfileBodyResponse,
    ProfileResponse,
    RecommendationsResponse,
    RemoveHistoryRequest,
    RemoveHistoryResponse,
    ToggleListRequest,
    ToggleListResponse,
    UpsertHistoryRequest,
    UpsertHistoryResponse,
    map_catalog_item_response,
    map_history_entry_response,
    map_list_entry_response,
)
from animeshelf.application.dto.profile import ToggleListInput, UpsertHistoryInput
from animeshelf.application.use_cases.auth_common import build_auth_user_output
from animeshelf.application.use_cases.get_profile import GetProfileUseCase
from animeshelf.application.use_cases.get_recommendations import GetRecommendationsUseCase
from animeshelf.application.use_cases.manage_history import (
    ClearHistoryUseCase,
    RemoveHistoryUseCase,
    UpsertHistoryUseCase,
)
from animeshelf.application.use_cases.toggle_list import ToggleListUseCase
from animeshelf.domain.entities.anime import AnimeRef
from animeshelf.domain.entities.user import User
from animeshelf.domain.exceptions import ValidationError
from animeshelf.domain.services.anime_ref import sanitize_anime_ref
from animeshelf.domain.services.recommendation import DEFAULT_LIMIT


router = APIRouter()


def _sanitized_anime(anime: AnimeRefRequest) -> AnimeRef:
    try:
        return sanitize_anime_ref(anime.model_dump(by_alias=True))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/api/profile/me", response_model=ProfileResponse)
def get_profile(
    current_user: User = Depends(get_current_user),
    use_case: GetProfileUseCase = Depends(get_profile_use_case),
):
    output = use_case.execute(user_id=current_user.id)
    profile = output.profile
    return ProfileResponse(
        user=map_auth_user_response(build_auth_user_output(current_user)),
        profile=ProfileBodyResponse(
            favorites=[map_list_entry_response(entry) for entry in profile.favorites],
            pending=[map_list_entry_response(entry) for entry in profile.pending],
            history=[map_history_entry_response(entry) for entry in profile.history],
            stats=map_stats_response(output.stats),
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        ),
    )


@router.post("/api/profile/list/toggle", response_model=ToggleListResponse)
def toggle_list(
    req: ToggleListRequest,
    current_user: User = Depends(get_current_user),
    use_case: ToggleListUseCase = Depends(get_toggle_list_use_case),
):
    anime = _sanitized_anime(req.anime)
    try:
        output = use_case.execute(
            ToggleListInput(user_id=current_user.id, list_name=req.list_name, anime=anime)
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return ToggleListResponse(
        ok=True,
        list_name=output.list_name,
        added=output.added,
        stats=map_stats_response(output.stats),
    )


@router.post("/api/profile/history/upsert", response_model=UpsertHistoryResponse)
def upsert_history(
    req: UpsertHistoryRequest,
    current_user: User = Depends(get_current_user),
    use_case: UpsertHistoryUseCase = Depends(get_upsert_history_use_case),
):
    anime = _sanitized_anime(req.anime)
    output = use_case.execute(
        UpsertHistoryInput(
            user_id=current_user.id,
            anime=anime,
            episode_number=req.episode_number,
            episode_title=req.episode_title,
            total_episodes=req.total_episodes,
        )
    )
    return UpsertHistoryResponse(
        ok=True,
        entry=map_history_entry_response(output.entry),
        stats=map_stats_response(output.stats),
    )


@router.post("/api/profile/history/remove", response_model=RemoveHistoryResponse)
def remove_history(
    req: RemoveHistoryRequest,
    current_user: User = Depends(get_current_user),
    use_case: RemoveHistoryUseCase = Depends(get_remove_history_use_case),
):
    try:
        output = use_case.execute(user_id=current_user.id, anime_id=req.anime_id)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return RemoveHistoryResponse(ok=True, removed=output.removed, stats=map_stats_response(output.stats))


@router.post("/api/profile/history/clear", response_model=ClearHistoryResponse)
def clear_history(
    current_user: User = Depends(get_current_user),
    use_case: ClearHistoryUseCase = Depends(get_clear_history_use_case),
):
    output = use_case.execute(user_id=current_user.id)
    return ClearHistoryResponse(ok=True, stats=map_stats_response(output.stats))


@router.get(
    "/api/profile/recommendations",
    response_model=RecommendationsResponse,
    response_model_exclude_none=True,
)
def get_recommendations(
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=60),
    current_user: User = Depends(get_current_user),
    use_case: GetRecommendationsUseCase = Depends(get_recommendations_use_case),
):
    output = use_case.execute(user_id=current_user.id, limit=limit)
    return RecommendationsResponse(
        items=[map_catalog_item_response(item) for item in output.items],
        warning=output.warning,
    )
