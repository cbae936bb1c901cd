"""
Tests d'integration du Container DI.

Verifie le cablage des composants sur une configuration pointant vers
tmp_path, puis un parcours complet : creation d'un compte, connexion,
importation d'episodes, historique et journal d'audit.
"""

import pytest
from dependency_injector import providers

from streamvault.container import Container
from streamvault.core.entities import AuditAction, Role
from streamvault.infrastructure.persistence.repositories import JsonCatalogRepository


@pytest.fixture
def container(test_settings):
    container = Container()
    container.config.override(providers.Object(test_settings))
    return container


class TestWiring:
    """Tests du cablage des providers."""

    def test_singletons_share_store(self, container) -> None:
        assert container.document_store() is container.document_store()
        assert isinstance(container.catalog_repository(), JsonCatalogRepository)
        assert container.auth_gate() is container.auth_gate()

    def test_session_ttl_from_settings(self, container, test_settings) -> None:
        assert container.session_service().ttl.days == test_settings.session_ttl_days


class TestEndToEnd:
    """Parcours complet sur le systeme de fichiers."""

    @pytest.mark.asyncio
    async def test_admin_imports_and_user_watches(
        self, container, test_settings, series_meta, make_episode
    ) -> None:
        auth = container.auth_service()
        await auth.create_user(
            "bootstrap", {"username": "root", "password": "root passphrase 1", "role": "admin"}
        )
        await auth.create_user(
            "root", {"username": "alice", "password": "alice passphrase", "role": "user"}
        )

        login = await auth.login({"username": "root", "password": "root passphrase 1"})
        gate = container.auth_gate()
        session = await gate.resolve(container.session_service().cookie_value(login.session.id))
        gate.require_role(session, Role.ADMIN)

        catalog = container.catalog_repository()
        for number in (2, 1):
            await catalog.upsert_series_episode(
                "Solstice Chronicles", None, series_meta, 1, make_episode(number)
            )
        await container.audit_log().record(
            session.username, AuditAction.UPDATE_SERIES, "solstice-chronicles", {"episodes": 2}
        )

        history = container.history_repository()
        await history.upsert(
            "alice",
            {
                "contentId": "solstice-chronicles",
                "type": "series",
                "progress": 0.25,
                "lastWatched": "2026-10-19T21:00:00.000Z",
                "season": 1,
                "episode": 1,
            },
        )

        [series] = await catalog.list_series()
        assert [e.episode_number for e in series.seasons[0].episodes] == [1, 2]
        assert (await history.get("alice"))[0].episode == 1
        actions = [entry.action for entry in await container.audit_log().read_entries()]
        assert actions == [
            AuditAction.CREATE_USER,
            AuditAction.CREATE_USER,
            AuditAction.LOGIN,
            AuditAction.UPDATE_SERIES,
        ]
        assert (test_settings.data_dir / "users" / "admin.json").exists()
