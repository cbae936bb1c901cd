"""
Verrou consultatif par fichier sentinelle, avec backoff exponentiel.

Le verrou d'un document <path> est le fichier <path>.lock, créé de manière
exclusive (O_CREAT | O_EXCL). Il n'est respecté que par le code qui le
vérifie : processus coopérants et tâches asyncio du même processus.

Acquisition :
- Tentatives relancées avec backoff exponentiel aléatoire (50ms à 200ms)
- Le sentinelle porte un jeton par acquisition : seul son détenteur le supprime
- Un verrou plus ancien que stale_after est considéré abandonné et récupéré
- LockTimeoutError après épuisement des tentatives

Usage:
    async with FileLock(path, settings):
        ...  # lecture-modification-écriture du document
"""

import asyncio
import os
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from streamvault.core.errors import LockTimeoutError


@dataclass(frozen=True)
class LockSettings:
    """
    Paramètres d'acquisition d'un verrou.

    Attributes:
        retries: Relances après la première tentative
        min_wait: Délai initial entre tentatives (secondes)
        max_wait: Délai maximal entre tentatives (secondes)
        stale_after: Âge (secondes) au-delà duquel un verrou est récupérable
    """

    retries: int = 5
    min_wait: float = 0.05
    max_wait: float = 0.2
    stale_after: float = 5.0

    @property
    def attempts(self) -> int:
        return self.retries + 1


class LockBusyError(Exception):
    """Le fichier sentinelle est détenu par un autre appelant."""

    def __init__(self, lock_path: Path) -> None:
        self.lock_path = lock_path
        super().__init__(f"Lock held: {lock_path}")


def with_lock_retry(settings: LockSettings):
    """
    Décorateur pour relancer sur LockBusyError avec backoff exponentiel.

    Le jitter de wait_random_exponential désynchronise les processus
    qui attendent le même verrou.

    Args:
        settings: Nombre de tentatives et bornes du délai

    Returns:
        Décorateur à appliquer sur une fonction async
    """
    return retry(
        retry=retry_if_exception_type(LockBusyError),
        wait=wait_random_exponential(
            multiplier=settings.min_wait, min=settings.min_wait, max=settings.max_wait
        ),
        stop=stop_after_attempt(settings.attempts),
        reraise=True,
    )


def lock_path_for(target: Path) -> Path:
    """Chemin du fichier sentinelle d'un document."""
    return target.with_name(f"{target.name}.lock")


class FileLock:
    """
    Verrou exclusif sur un document, utilisable comme contexte async.

    Non réentrant : acquérir deux fois le même chemin depuis la même tâche
    attend jusqu'au LockTimeoutError.
    """

    def __init__(self, target: Path, settings: Optional[LockSettings] = None) -> None:
        self._target = target
        self._settings = settings or LockSettings()
        self.lock_path = lock_path_for(target)
        self._held = False
        # Jeton de l'acquisition en cours, écrit dans le sentinelle
        self._token = uuid.uuid4().hex

    @property
    def held(self) -> bool:
        return self._held

    def _try_acquire(self) -> None:
        """Une tentative de création exclusive du fichier sentinelle."""
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            if not self._reclaim_if_stale():
                raise LockBusyError(self.lock_path)
            try:
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                raise LockBusyError(self.lock_path)
        with os.fdopen(fd, "w") as handle:
            handle.write(f"{os.getpid()} {self._token}\n")

    def _reclaim_if_stale(self) -> bool:
        """Supprime le sentinelle s'il a dépassé stale_after. Retourne True si libre."""
        try:
            age = time.time() - self.lock_path.stat().st_mtime
        except FileNotFoundError:
            return True
        if age < self._settings.stale_after:
            return False
        logger.warning(f"Verrou abandonne recupere: {self.lock_path} ({age:.1f}s)")
        self.lock_path.unlink(missing_ok=True)
        return True

    async def acquire(self) -> None:
        """
        Acquiert le verrou en relançant avec backoff.

        Raises:
            LockTimeoutError: Si le verrou reste détenu après toutes les tentatives
        """
        self._token = uuid.uuid4().hex

        @with_lock_retry(self._settings)
        async def _acquire() -> None:
            await asyncio.to_thread(self._try_acquire)

        try:
            await _acquire()
        except LockBusyError as exc:
            raise LockTimeoutError(self._target, self._settings.attempts) from exc
        self._held = True

    def _release_owned(self) -> None:
        """Supprime le sentinelle seulement s'il porte encore notre jeton."""
        try:
            content = self.lock_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning(f"Verrou deja supprime a la liberation: {self.lock_path}")
            return
        if self._token not in content.split():
            logger.warning(f"Verrou recupere par un autre detenteur, conserve: {self.lock_path}")
            return
        self.lock_path.unlink(missing_ok=True)

    async def release(self) -> None:
        """
        Libère le verrou.

        Un sentinelle récupéré entre-temps par un autre détenteur (verrou
        jugé abandonné) n'est pas supprimé : il protège désormais ce détenteur.
        """
        if not self._held:
            return
        self._held = False
        await asyncio.to_thread(self._release_owned)

    async def __aenter__(self) -> "FileLock":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()
