from __future__ import annotations

from datetime import datetime

from animeshelf.api.schemas.common import CamelModel


class ConfigResponse(CamelModel):
    google_auth_enabled: bool
    google_client_id: str
    local_auth_enabled: bool
    password_min_len: int


class HealthResponse(CamelModel):
    ok: bool
    cache_items: int
    sessions: int
    now: datetime
