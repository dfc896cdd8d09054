from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from animeshelf.api.container import Container
from animeshelf.api.deps import get_container
from animeshelf.api.schemas.system import ConfigResponse, HealthResponse


router = APIRouter()


@router.get("/api/config", response_model=ConfigResponse)
def get_config(container: Container = Depends(get_container)):
    settings = container.settings
    return ConfigResponse(
        google_auth_enabled=container.google_oauth is not None,
        google_client_id=settings.google_client_id if container.google_oauth is not None else "",
        local_auth_enabled=True,
        password_min_len=settings.password_min_length,
    )


@router.get("/api/health", response_model=HealthResponse)
def get_health(container: Container = Depends(get_container)):
    return HealthResponse(
        ok=True,
        cache_items=len(container.cache),
        sessions=container.session_manager.count(),
        now=datetime.now(timezone.utc),
    )
