from __future__ import annotations

from fastapi.testclient import TestClient
import pytest

from animeshelf.api.container import build_container
from animeshelf.api.deps import SESSION_COOKIE_NAME
from animeshelf.application.dto.auth import GoogleIdentityInfo
from animeshelf.domain.entities.anime import CatalogItem
from animeshelf.domain.exceptions import GoogleTokenValidationError
from animeshelf.infrastructure.persistence.json_document_store import JsonDocumentStore
from animeshelf.infrastructure.security.password_hasher import PasswordHasher
from animeshelf.main import create_app
from animeshelf.shared.config import Settings


class FakeGoogleOauth:
    def verify_id_token(self, *, id_token: str) -> GoogleIdentityInfo:
        if id_token != "good-credential":
            raise GoogleTokenValidationError("Invalid Google credential.")
        return GoogleIdentityInfo(
            subject="google-sub-1",
            email="alice@example.com",
            email_verified=True,
            name="Alice",
            picture="https://lh3.example.com/alice.png",
        )


class FakeCatalogPool:
    def fetch_pool(self) -> list[CatalogItem]:
        return [
            CatalogItem(
                anime_id=anime_id,
                id_mal=None,
                title=f"Anime {anime_id}",
                cover="",
                banner="",
                status=status,
                episodes=12,
                score=score,
                season_year=2022,
                genres=genres,
            )
            for anime_id, genres, score, status in [
                (101, ("Action",), 80, "FINISHED"),
                (200, ("Action", "Drama"), 70, "RELEASING"),
                (300, ("Comedy",), 95, "FINISHED"),
            ]
        ]


def _settings(tmp_path, *, google_client_id: str = "client-123") -> Settings:
    return Settings(
        app_env="test",
        data_file=str(tmp_path / "db.json"),
        session_secret="test-secret",
        session_ttl_days=30,
        session_prune_interval_seconds=300,
        password_min_length=6,
        password_scrypt_rounds=4,
        google_client_id=google_client_id,
        google_verify_timeout_seconds=5,
        anilist_api_url="https://graphql.anilist.test",
        anilist_timeout_seconds=5,
        anilist_max_retries=1,
        catalog_pool_ttl_seconds=600,
        catalog_pool_per_page=10,
        cache_max_items=50,
        cors_allow_origins=("http://localhost:5173",),
        log_level="WARNING",
    )


def _client(tmp_path, *, google_oauth=None, google_client_id: str = "client-123") -> TestClient:
    settings = _settings(tmp_path, google_client_id=google_client_id)
    store = JsonDocumentStore(settings.data_file)
    store.load()
    container = build_container(
        settings,
        store=store,
        password_hasher=PasswordHasher(rounds=4),
        google_oauth=google_oauth,
        catalog_pool=FakeCatalogPool(),
    )
    return TestClient(create_app(container=container))


@pytest.fixture
def client(tmp_path):
    with _client(tmp_path, google_oauth=FakeGoogleOauth()) as test_client:
        yield test_client


def _register(client: TestClient, email: str = "alice@example.com", password: str = "secret123"):
    return client.post("/api/auth/register", json={"email": email, "password": password, "name": "Alice"})


def _anime(anime_id: int, genres: list[str]) -> dict:
    return {"animeId": anime_id, "title": f"Anime {anime_id}", "genres": genres, "score": 75}


def test_register_sets_cookie_and_session_is_authenticated(client: TestClient):
    response = _register(client)

    assert response.status_code == 200
    body = response.json()
    assert body["authenticated"] is True
    assert body["user"]["email"] == "alice@example.com"
    assert body["user"]["authProviders"] == ["local"]
    assert body["stats"] == {"history": 0, "favorites": 0, "pending": 0}
    set_cookie = response.headers["set-cookie"]
    assert SESSION_COOKIE_NAME in set_cookie
    assert "HttpOnly" in set_cookie
    assert "samesite=lax" in set_cookie.lower()

    session = client.get("/api/auth/session").json()
    assert session["authenticated"] is True
    assert session["user"]["id"] == body["user"]["id"]


def test_session_check_reissues_cookie_with_full_max_age(client: TestClient):
    token = _register(client).cookies[SESSION_COOKIE_NAME]

    response = client.get("/api/auth/session")

    set_cookie = response.headers["set-cookie"]
    assert f"{SESSION_COOKIE_NAME}={token}" in set_cookie
    assert f"Max-Age={30 * 24 * 60 * 60}" in set_cookie
    assert "HttpOnly" in set_cookie


def test_anonymous_session_check_sets_no_cookie(client: TestClient):
    response = client.get("/api/auth/session")

    assert response.json() == {"authenticated": False}
    assert "set-cookie" not in response.headers


def test_duplicate_register_is_conflict(client: TestClient):
    _register(client)

    response = _register(client, email="ALICE@example.com")

    assert response.status_code == 409
    assert "error" in response.json()


def test_bad_register_payloads_return_400(client: TestClient):
    assert client.post("/api/auth/register", json={"email": "alice@example.com"}).status_code == 400
    short = _register(client, password="123")
    assert short.status_code == 400
    assert short.json() == {"error": "Password must have at least 6 characters."}


def test_login_logout_cycle(client: TestClient):
    user_id = _register(client).json()["user"]["id"]
    client.post("/api/auth/logout")

    assert client.get("/api/auth/session").json() == {"authenticated": False}

    wrong = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope-nope"})
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Invalid email or password."}

    login = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert login.status_code == 200
    assert login.json()["user"]["id"] == user_id


def test_google_login_links_existing_account(client: TestClient):
    user_id = _register(client).json()["user"]["id"]
    client.post("/api/auth/logout")

    response = client.post("/api/auth/google", json={"credential": "good-credential"})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == user_id
    assert response.json()["user"]["authProviders"] == ["google", "local"]
    assert client.post("/api/auth/google", json={"credential": "forged"}).status_code == 401


def test_google_login_unavailable_without_client_id(tmp_path):
    with _client(tmp_path, google_client_id="") as client:
        config = client.get("/api/config").json()
        response = client.post("/api/auth/google", json={"credential": "anything"})

    assert config == {
        "googleAuthEnabled": False,
        "googleClientId": "",
        "localAuthEnabled": True,
        "passwordMinLen": 6,
    }
    assert response.status_code == 503


def test_config_exposes_google_client_id(client: TestClient):
    assert client.get("/api/config").json()["googleClientId"] == "client-123"


def test_profile_routes_require_session(client: TestClient):
    for method, path in [
        ("get", "/api/profile/me"),
        ("post", "/api/profile/history/clear"),
        ("get", "/api/profile/recommendations"),
    ]:
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert set(response.json()) == {"error"}

    client.cookies.set(SESSION_COOKIE_NAME, "forged.token")
    assert client.get("/api/profile/me").status_code == 401


def test_toggle_favorites_twice(client: TestClient):
    _register(client)
    payload = {"list": "favorites", "anime": _anime(101, ["Action"])}

    first = client.post("/api/profile/list/toggle", json=payload)
    second = client.post("/api/profile/list/toggle", json=payload)

    assert first.json()["added"] is True
    assert first.json()["list"] == "favorites"
    assert first.json()["stats"]["favorites"] == 1
    assert second.json()["added"] is False
    assert second.json()["stats"]["favorites"] == 0


def test_toggle_rejects_bad_input(client: TestClient):
    _register(client)

    bad_list = client.post("/api/profile/list/toggle", json={"list": "watching", "anime": _anime(1, [])})
    bad_anime = client.post("/api/profile/list/toggle", json={"list": "pending", "anime": {"title": "x"}})

    assert bad_list.status_code == 400
    assert bad_anime.status_code == 400
    assert "error" in bad_anime.json()


@pytest.mark.parametrize("anime_id", ["--5", "³", 0, -3, 1.5, True])
def test_toggle_rejects_malformed_anime_id(client: TestClient, anime_id):
    _register(client)

    response = client.post(
        "/api/profile/list/toggle",
        json={"list": "favorites", "anime": {"animeId": anime_id, "title": "Foo"}},
    )

    assert response.status_code == 400
    assert set(response.json()) == {"error"}
    assert client.get("/api/profile/me").json()["profile"]["favorites"] == []


def test_history_upsert_drops_unparseable_optional_numbers(client: TestClient):
    _register(client)

    response = client.post(
        "/api/profile/history/upsert",
        json={
            "anime": {"animeId": "55", "title": "Foo", "episodes": 12, "idMal": "²", "seasonYear": "--1"},
            "episodeNumber": "²",
            "totalEpisodes": "--3",
            "episodeTitle": 7,
        },
    )

    assert response.status_code == 200
    entry = response.json()["entry"]
    assert entry["animeId"] == 55
    assert entry["idMal"] is None
    assert entry["seasonYear"] is None
    assert entry["episodeNumber"] == 1
    assert entry["totalEpisodes"] == 12
    assert entry["episodeTitle"] == ""


def test_history_upsert_remove_and_clear(client: TestClient):
    _register(client)
    client.post("/api/profile/history/upsert", json={"anime": _anime(55, ["Drama"]), "episodeNumber": 3})
    upsert = client.post(
        "/api/profile/history/upsert",
        json={"anime": _anime(55, ["Drama"]), "episodeNumber": 4, "episodeTitle": "Four"},
    )
    client.post("/api/profile/history/upsert", json={"anime": _anime(56, ["Drama"])})

    assert upsert.json()["entry"]["episodeNumber"] == 4
    history = client.get("/api/profile/me").json()["profile"]["history"]
    assert [entry["animeId"] for entry in history] == [56, 55]
    assert history[1]["episodeNumber"] == 4
    assert history[1]["episodeTitle"] == "Four"

    removed = client.post("/api/profile/history/remove", json={"animeId": 56}).json()
    missing = client.post("/api/profile/history/remove", json={"animeId": 999}).json()
    assert removed["removed"] is True
    assert missing["removed"] is False
    assert missing["stats"]["history"] == 1

    cleared = client.post("/api/profile/history/clear").json()
    assert cleared == {"ok": True, "stats": {"history": 0, "favorites": 0, "pending": 0}}


def test_recommendations_follow_profile_signal(client: TestClient):
    _register(client)
    assert client.get("/api/profile/recommendations").json() == {"items": []}

    client.post("/api/profile/list/toggle", json={"list": "favorites", "anime": _anime(101, ["Action"])})
    items = client.get("/api/profile/recommendations").json()["items"]

    assert [item["animeId"] for item in items] == [200, 300]
    assert client.get("/api/profile/recommendations", params={"limit": 0}).status_code == 400


def test_profile_persists_across_app_restart(tmp_path):
    with _client(tmp_path) as first:
        _register(first)
        first.post("/api/profile/list/toggle", json={"list": "pending", "anime": _anime(7, ["Action"])})

    with _client(tmp_path) as second:
        login = second.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
        profile = second.get("/api/profile/me").json()["profile"]

    assert login.status_code == 200
    assert [entry["animeId"] for entry in profile["pending"]] == [7]


def test_health_reports_sessions(client: TestClient):
    _register(client)

    body = client.get("/api/health").json()

    assert body["ok"] is True
    assert body["sessions"] == 1
    assert "now" in body
