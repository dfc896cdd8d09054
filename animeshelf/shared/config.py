from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _csv(name: str, default: str) -> tuple[str, ...]:
    value = _env(name, default) or ""
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_env: str
    data_file: str
    session_secret: str
    session_ttl_days: int
    session_prune_interval_seconds: float
    password_min_length: int
    password_scrypt_rounds: int
    google_client_id: str
    google_verify_timeout_seconds: float
    anilist_api_url: str
    anilist_timeout_seconds: float
    anilist_max_retries: int
    catalog_pool_ttl_seconds: float
    catalog_pool_per_page: int
    cache_max_items: int
    cors_allow_origins: tuple[str, ...]
    log_level: str

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def google_auth_enabled(self) -> bool:
        return bool(self.google_client_id)


def get_settings() -> Settings:
    return Settings(
        app_env=(_env("APP_ENV", "development") or "development").strip().lower(),
        data_file=_env("DATA_FILE", "data/db.json"),
        session_secret=_env("SESSION_SECRET", ""),
        session_ttl_days=int(_env("SESSION_TTL_DAYS", "30")),
        session_prune_interval_seconds=float(_env("SESSION_PRUNE_INTERVAL_SECONDS", "300")),
        password_min_length=int(_env("PASSWORD_MIN_LENGTH", "6")),
        password_scrypt_rounds=int(_env("PASSWORD_SCRYPT_ROUNDS", "14")),
        google_client_id=(_env("GOOGLE_CLIENT_ID", "") or "").strip(),
        google_verify_timeout_seconds=float(_env("GOOGLE_VERIFY_TIMEOUT_SECONDS", "10")),
        anilist_api_url=_env("ANILIST_API_URL", "https://graphql.anilist.co"),
        anilist_timeout_seconds=float(_env("ANILIST_TIMEOUT_SECONDS", "10")),
        anilist_max_retries=int(_env("ANILIST_MAX_RETRIES", "2")),
        catalog_pool_ttl_seconds=float(_env("CATALOG_POOL_TTL_SECONDS", "600")),
        catalog_pool_per_page=int(_env("CATALOG_POOL_PER_PAGE", "50")),
        cache_max_items=int(_env("CACHE_MAX_ITEMS", "500")),
        cors_allow_origins=_csv("CORS_ALLOW_ORIGINS", "*"),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
