"""
Implémentation fichiers de IDocumentStore.

Chaque document est un fichier JSON indenté. L'écriture passe par un fichier
temporaire voisin (<path>.<uuid>.tmp) synchronisé sur disque puis renommé
sur la cible avec os.replace : un lecteur voit l'ancienne ou la nouvelle
version, jamais un fichier partiel, et un crash avant le rename laisse la
version précédente intacte.

Les I/O bloquantes sont exécutées via asyncio.to_thread pour ne pas bloquer
la boucle d'événements.
"""

import asyncio
import json
import os
import uuid
import weakref
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Optional

from loguru import logger

from streamvault.core.errors import DecodeError
from streamvault.core.ports.document_store import IDocumentStore
from streamvault.infrastructure.persistence.file_lock import FileLock, LockSettings


def _read_bytes(path: Path) -> Optional[bytes]:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def _atomic_write(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except Exception:
        # Nettoyer le fichier temporaire, la version precedente reste en place
        tmp_path.unlink(missing_ok=True)
        raise


def _append_line(path: Path, line: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(f"{line}\n")
        handle.flush()
        os.fsync(handle.fileno())


def _list_json(directory: Path) -> list[Path]:
    try:
        return sorted(
            entry for entry in directory.iterdir()
            if entry.suffix == ".json" and entry.is_file()
        )
    except FileNotFoundError:
        return []


class JsonDocumentStore(IDocumentStore):
    """
    Store de documents JSON sur le système de fichiers.

    write et append prennent le verrou du chemin ; les séquences
    lecture-modification-écriture prennent lock() puis write_unlocked().

    Utilisation:
        store = JsonDocumentStore(LockSettings())
        async with store.lock(path):
            data = await store.read(path, {"sessions": []})
            data["sessions"].append(...)
            await store.write_unlocked(path, data)
    """

    def __init__(self, lock_settings: Optional[LockSettings] = None) -> None:
        """
        Initialise le store.

        Args:
            lock_settings: Tentatives, backoff et âge de récupération des verrous
        """
        self._lock_settings = lock_settings or LockSettings()
        # Un asyncio.Lock par chemin absolu, oublié dès qu'aucune tâche ne le tient
        self._guards: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    @asynccontextmanager
    async def lock(self, path: Path) -> AsyncIterator[None]:
        """
        Verrou exclusif sur path, à utiliser avec async with.

        Les tâches du processus attendent leur tour sur un asyncio.Lock par
        chemin ; seul le détenteur de ce tour tente le fichier sentinelle,
        dont le budget de tentatives ne couvre que les autres processus.
        Non réentrant.
        """
        key = os.path.abspath(path)
        guard = self._guards.get(key)
        if guard is None:
            guard = asyncio.Lock()
            self._guards[key] = guard
        async with guard:
            async with FileLock(path, self._lock_settings):
                yield

    async def read(self, path: Path, fallback: Any = None) -> Any:
        """
        Lit et décode un document, ou retourne fallback s'il n'existe pas.

        Raises:
            DecodeError: Contenu qui n'est pas du JSON UTF-8 valide
        """
        raw = await asyncio.to_thread(_read_bytes, path)
        if raw is None:
            return fallback
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeError(path, str(exc)) from exc

    async def read_text(self, path: Path, fallback: str = "") -> str:
        raw = await asyncio.to_thread(_read_bytes, path)
        if raw is None:
            return fallback
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(path, str(exc)) from exc

    async def write(self, path: Path, value: Any) -> None:
        """Remplace atomiquement le document sous son verrou."""
        async with self.lock(path):
            await self.write_unlocked(path, value)

    async def write_unlocked(self, path: Path, value: Any) -> None:
        """Remplace atomiquement le document ; le verrou est détenu par l'appelant."""
        payload = f"{json.dumps(value, ensure_ascii=False, indent=2)}\n"
        await asyncio.to_thread(_atomic_write, path, payload)
        logger.debug(f"Document ecrit: {path}")

    async def append(self, path: Path, line: str) -> None:
        """Ajoute une ligne sous le verrou ; crée le fichier et ses parents."""
        async with self.lock(path):
            await asyncio.to_thread(_append_line, path, line)

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(path.exists)

    async def remove(self, path: Path) -> None:
        """Supprime un document ; idempotent."""
        async with self.lock(path):
            await asyncio.to_thread(path.unlink, missing_ok=True)
        logger.debug(f"Document supprime: {path}")

    async def list_documents(self, directory: Path) -> list[Path]:
        return await asyncio.to_thread(_list_json, directory)
