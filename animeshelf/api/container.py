from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
import logging
import secrets

from animeshelf.application.ports.catalog_pool_port import CatalogPoolPort
from animeshelf.application.ports.google_oauth_port import GoogleOauthPort
from animeshelf.application.ports.password_hasher_port import PasswordHasherPort
from animeshelf.infrastructure.cache.cached_catalog_pool import CachedCatalogPool
from animeshelf.infrastructure.cache.expiring_cache import ExpiringCache
from animeshelf.infrastructure.clients.anilist_catalog_client import (
    AniListCatalogClient,
    AniListClientSettings,
)
from animeshelf.infrastructure.persistence.json_document_store import JsonDocumentStore
from animeshelf.infrastructure.security.password_hasher import PasswordHasher
from animeshelf.infrastructure.security.session_manager import SessionManager
from animeshelf.shared.config import Settings


logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Process-wide services, built once at startup and shared by handlers."""

    settings: Settings
    store: JsonDocumentStore
    session_manager: SessionManager
    password_hasher: PasswordHasherPort
    google_oauth: GoogleOauthPort | None
    catalog_pool: CatalogPoolPort
    cache: ExpiringCache


def _session_secret(settings: Settings) -> str:
    if settings.session_secret:
        return settings.session_secret
    if settings.is_production:
        raise RuntimeError("SESSION_SECRET is required in production.")
    logger.warning("container: session_secret_missing using a random per-process secret")
    return secrets.token_hex(32)


def _google_oauth(settings: Settings) -> GoogleOauthPort | None:
    if not settings.google_auth_enabled:
        return None
    from animeshelf.infrastructure.clients.google_oidc_client import GoogleOidcClient

    return GoogleOidcClient(
        client_id=settings.google_client_id,
        timeout_seconds=settings.google_verify_timeout_seconds,
    )


def build_container(
    settings: Settings,
    *,
    store: JsonDocumentStore | None = None,
    session_manager: SessionManager | None = None,
    password_hasher: PasswordHasherPort | None = None,
    google_oauth: GoogleOauthPort | None = None,
    catalog_pool: CatalogPoolPort | None = None,
    cache: ExpiringCache | None = None,
) -> Container:
    if store is None:
        store = JsonDocumentStore(settings.data_file)
        store.load()

    cache = cache or ExpiringCache(max_items=settings.cache_max_items)

    if catalog_pool is None:
        catalog_pool = CachedCatalogPool(
            upstream=AniListCatalogClient(
                AniListClientSettings(
                    api_url=settings.anilist_api_url,
                    timeout_seconds=settings.anilist_timeout_seconds,
                    max_retries=settings.anilist_max_retries,
                    per_page=settings.catalog_pool_per_page,
                )
            ),
            cache=cache,
            ttl_seconds=settings.catalog_pool_ttl_seconds,
        )

    return Container(
        settings=settings,
        store=store,
        session_manager=session_manager
        or SessionManager(
            secret=_session_secret(settings),
            ttl=timedelta(days=settings.session_ttl_days),
        ),
        password_hasher=password_hasher or PasswordHasher(rounds=settings.password_scrypt_rounds),
        google_oauth=google_oauth if google_oauth is not None else _google_oauth(settings),
        catalog_pool=catalog_pool,
        cache=cache,
    )
