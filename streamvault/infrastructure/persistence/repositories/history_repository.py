"""
Implémentation fichiers du repository d'historique.

Un document par utilisateur (users/history/<username>.json) contenant la
liste de ses entrées. L'ordre sur disque n'est pas garanti : le tri du plus
récent au plus ancien est appliqué à la lecture.
"""

from typing import Any

from loguru import logger

from streamvault.core.entities import HistoryEntry, parse_model
from streamvault.core.errors import DecodeError
from streamvault.core.ports.document_store import IDocumentStore
from streamvault.core.ports.repositories import IHistoryRepository
from streamvault.infrastructure.persistence.paths import DataPaths


class JsonHistoryRepository(IHistoryRepository):
    """Repository d'historique de visionnage sur IDocumentStore."""

    def __init__(self, store: IDocumentStore, paths: DataPaths) -> None:
        self._store = store
        self._paths = paths

    async def _load(self, username: str) -> list[HistoryEntry]:
        path = self._paths.history_file(username)
        payload = await self._store.read(path, [])
        if not isinstance(payload, list):
            raise DecodeError(path, "expected a list of entries")
        return [parse_model(HistoryEntry, item) for item in payload]

    async def get(self, username: str) -> list[HistoryEntry]:
        entries = await self._load(username)
        return sorted(entries, key=lambda entry: entry.last_watched, reverse=True)

    async def upsert(self, username: str, entry: HistoryEntry | dict[str, Any]) -> HistoryEntry:
        new_entry = parse_model(HistoryEntry, entry)
        path = self._paths.history_file(username)
        async with self._store.lock(path):
            entries = [item for item in await self._load(username) if item.key != new_entry.key]
            entries.append(new_entry)
            await self._store.write_unlocked(path, [item.to_document() for item in entries])
        logger.debug(f"Historique mis a jour: {username} -> {new_entry.content_id}")
        return new_entry

    async def clear(self, username: str) -> None:
        await self._store.write(self._paths.history_file(username), [])
