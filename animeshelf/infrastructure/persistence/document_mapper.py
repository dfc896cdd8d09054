from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from animeshelf.domain.entities.anime import AnimeRef, HistoryEntry, ListEntry
from animeshelf.domain.entities.profile import Profile
from animeshelf.domain.entities.user import LocalAuth, User


def _dt_to_str(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


def _str_to_dt(value: Any) -> datetime:
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _opt_int(value: Any) -> int | None:
    return int(value) if value is not None else None


def map_user_to_doc(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "picture": user.picture,
        "authProviders": list(user.auth_providers),
        "localAuth": (
            {"salt": user.local_auth.salt, "hash": user.local_auth.hash}
            if user.local_auth is not None
            else None
        ),
        "googleSub": user.google_sub,
        "createdAt": _dt_to_str(user.created_at),
        "lastLoginAt": _dt_to_str(user.last_login_at),
        "updatedAt": _dt_to_str(user.updated_at),
    }


def map_doc_to_user(doc: Mapping[str, Any]) -> User:
    local_auth_doc = doc.get("localAuth")
    created_at = _str_to_dt(doc["createdAt"])
    last_login_at = _str_to_dt(doc.get("lastLoginAt") or doc["createdAt"])
    return User(
        id=str(doc["id"]),
        email=str(doc["email"]),
        name=str(doc.get("name") or ""),
        picture=doc.get("picture"),
        auth_providers=tuple(sorted(set(doc.get("authProviders") or ()))),
        local_auth=(
            LocalAuth(salt=str(local_auth_doc["salt"]), hash=str(local_auth_doc["hash"]))
            if local_auth_doc
            else None
        ),
        google_sub=doc.get("googleSub"),
        created_at=created_at,
        last_login_at=last_login_at,
        updated_at=_str_to_dt(doc.get("updatedAt") or last_login_at.isoformat()),
    )


def map_anime_ref_to_doc(anime: AnimeRef) -> dict[str, Any]:
    return {
        "animeId": anime.anime_id,
        "idMal": anime.id_mal,
        "title": anime.title,
        "cover": anime.cover,
        "banner": anime.banner,
        "status": anime.status,
        "episodes": anime.episodes,
        "score": anime.score,
        "seasonYear": anime.season_year,
        "genres": list(anime.genres),
    }


def map_doc_to_anime_ref(doc: Mapping[str, Any]) -> AnimeRef:
    return AnimeRef(
        anime_id=int(doc["animeId"]),
        id_mal=_opt_int(doc.get("idMal")),
        title=str(doc["title"]),
        cover=str(doc.get("cover") or ""),
        banner=str(doc.get("banner") or ""),
        status=str(doc.get("status") or ""),
        episodes=_opt_int(doc.get("episodes")),
        score=int(doc.get("score") or 0),
        season_year=_opt_int(doc.get("seasonYear")),
        genres=tuple(str(genre) for genre in doc.get("genres") or ()),
    )


def map_list_entry_to_doc(entry: ListEntry) -> dict[str, Any]:
    doc = map_anime_ref_to_doc(entry.anime)
    doc["savedAt"] = _dt_to_str(entry.saved_at)
    return doc


def map_history_entry_to_doc(entry: HistoryEntry) -> dict[str, Any]:
    doc = map_anime_ref_to_doc(entry.anime)
    doc.update(
        {
            "episodeNumber": entry.episode_number,
            "episodeTitle": entry.episode_title,
            "totalEpisodes": entry.total_episodes,
            "updatedAt": _dt_to_str(entry.updated_at),
        }
    )
    return doc


def map_profile_to_doc(profile: Profile) -> dict[str, Any]:
    return {
        "userId": profile.user_id,
        "favorites": [map_list_entry_to_doc(entry) for entry in profile.favorites],
        "pending": [map_list_entry_to_doc(entry) for entry in profile.pending],
        "history": [map_history_entry_to_doc(entry) for entry in profile.history],
        "createdAt": _dt_to_str(profile.created_at),
        "updatedAt": _dt_to_str(profile.updated_at),
    }


def map_doc_to_profile(user_id: str, doc: Mapping[str, Any]) -> Profile:
    return Profile(
        user_id=user_id,
        favorites=tuple(
            ListEntry(anime=map_doc_to_anime_ref(item), saved_at=_str_to_dt(item["savedAt"]))
            for item in doc.get("favorites") or ()
        ),
        pending=tuple(
            ListEntry(anime=map_doc_to_anime_ref(item), saved_at=_str_to_dt(item["savedAt"]))
            for item in doc.get("pending") or ()
        ),
        history=tuple(
            HistoryEntry(
                anime=map_doc_to_anime_ref(item),
                episode_number=max(1, int(item.get("episodeNumber") or 1)),
                episode_title=str(item.get("episodeTitle") or ""),
                total_episodes=_opt_int(item.get("totalEpisodes")),
                updated_at=_str_to_dt(item["updatedAt"]),
            )
            for item in doc.get("history") or ()
        ),
        created_at=_str_to_dt(doc["createdAt"]),
        updated_at=_str_to_dt(doc["updatedAt"]),
    )
