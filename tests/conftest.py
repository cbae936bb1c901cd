"""
Fixtures pytest partagees pour les tests StreamVault.

Ce module contient les fixtures communes utilisees dans les tests:
- Settings de test avec repertoire de donnees temporaire
- Store de documents et repositories sur ce repertoire
- Services de sessions, d'audit et d'authentification
- Payloads valides de films, series et episodes
"""

from pathlib import Path
from typing import Any, Callable

import pytest
from argon2 import PasswordHasher as Argon2Hasher

from streamvault.config import Settings
from streamvault.infrastructure.persistence import DataPaths, JsonDocumentStore, LockSettings
from streamvault.infrastructure.persistence.repositories import (
    JsonCatalogRepository,
    JsonHistoryRepository,
    JsonUserRepository,
)
from streamvault.services.audit import AuditLog
from streamvault.services.auth import AuthGate, AuthService
from streamvault.services.passwords import PasswordHasher
from streamvault.services.session import SessionService

TEST_SECRET = "test-session-secret-0123456789"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Utilise tmp_path de pytest pour isoler les donnees de chaque test.
    """
    return Settings(
        _env_file=None,  # Ignorer le fichier .env pour les tests
        data_dir=tmp_path / "data",
        session_secret=TEST_SECRET,
        lock_retries=20,
        lock_min_wait_ms=2,
        lock_max_wait_ms=20,
        log_file=tmp_path / "test.log",
    )


@pytest.fixture
def paths(test_settings: Settings) -> DataPaths:
    return test_settings.paths


@pytest.fixture
def lock_settings() -> LockSettings:
    """Verrous rapides et tolerants a la concurrence : 21 tentatives, 2ms -> 20ms."""
    return LockSettings(retries=20, min_wait=0.002, max_wait=0.02, stale_after=5.0)


@pytest.fixture
def document_store(lock_settings: LockSettings) -> JsonDocumentStore:
    return JsonDocumentStore(lock_settings)


@pytest.fixture
def catalog_repository(document_store: JsonDocumentStore, paths: DataPaths) -> JsonCatalogRepository:
    return JsonCatalogRepository(document_store, paths)


@pytest.fixture
def history_repository(document_store: JsonDocumentStore, paths: DataPaths) -> JsonHistoryRepository:
    return JsonHistoryRepository(document_store, paths)


@pytest.fixture
def user_repository(document_store: JsonDocumentStore, paths: DataPaths) -> JsonUserRepository:
    return JsonUserRepository(document_store, paths)


@pytest.fixture
def session_service(document_store: JsonDocumentStore, paths: DataPaths) -> SessionService:
    return SessionService(document_store, paths, secret=TEST_SECRET)


@pytest.fixture
def audit_log(document_store: JsonDocumentStore, paths: DataPaths) -> AuditLog:
    return AuditLog(document_store, paths)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    """Hasher argon2 aux parametres minimaux pour des tests rapides."""
    return PasswordHasher(Argon2Hasher(time_cost=1, memory_cost=8, parallelism=1))


@pytest.fixture
def auth_service(
    user_repository: JsonUserRepository,
    session_service: SessionService,
    audit_log: AuditLog,
    password_hasher: PasswordHasher,
) -> AuthService:
    return AuthService(user_repository, session_service, audit_log, password_hasher)


@pytest.fixture
def auth_gate(session_service: SessionService) -> AuthGate:
    return AuthGate(session_service)


@pytest.fixture
def movie_payload() -> dict[str, Any]:
    """Payload MovieInput valide (cles camelCase comme sur le fil)."""
    return {
        "id": "iron-legacy",
        "title": "Iron Legacy",
        "description": "A retired engineer rebuilds the suit that ruined him.",
        "year": 2021,
        "genres": ["Action", "Drama"],
        "posterUrl": "https://img.example.com/iron-legacy/poster.jpg",
        "backdropUrl": "https://img.example.com/iron-legacy/backdrop.jpg",
        "streamUrl": "https://cdn.example.com/stream/iron-legacy.m3u8",
        "duration": 7260,
        "contentRating": "PG-13",
    }


@pytest.fixture
def series_meta() -> dict[str, Any]:
    """Payload SeriesInput valide, sans saisons."""
    return {
        "title": "Solstice Chronicles",
        "description": "A village where the sun stops setting for a year.",
        "year": 2024,
        "genres": ["Fantasy"],
        "posterUrl": "https://img.example.com/solstice/poster.jpg",
        "backdropUrl": "https://img.example.com/solstice/backdrop.jpg",
    }


@pytest.fixture
def make_episode() -> Callable[..., dict[str, Any]]:
    """Fabrique de payloads Episode valides numerotes."""

    def _make(number: int, **overrides: Any) -> dict[str, Any]:
        payload = {
            "episodeNumber": number,
            "title": f"Chapter {number}",
            "description": f"The longest night begins, part {number}.",
            "duration": 2700,
            "streamUrl": f"https://stream.mediacdn.local/solstice/e{number}.m3u8",
            "thumbnailUrl": f"https://img.example.com/solstice/e{number}.jpg",
            "releasedAt": "2024-06-21T20:00:00.000Z",
        }
        payload.update(overrides)
        return payload

    return _make
