"""
Interface port pour le stockage de documents.

Un document est une valeur JSON stockée dans un fichier. Le store ignore
sa structure : la validation est faite par l'appelant avant l'écriture.
Chaque chemin est l'unité de durabilité et de concurrence.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, AsyncContextManager, Awaitable, Callable, TypeVar

T = TypeVar("T")


class IDocumentStore(ABC):
    """
    Interface de stockage de documents JSON.

    Toute mutation d'un chemin donné est sérialisée par un verrou
    consultatif propre à ce chemin.
    """

    @abstractmethod
    async def read(self, path: Path, fallback: Any = None) -> Any:
        """
        Lit un document.

        Retourne fallback si le fichier n'existe pas.
        Lève DecodeError si le contenu n'est pas du JSON valide.
        """
        ...

    @abstractmethod
    async def read_text(self, path: Path, fallback: str = "") -> str:
        """Lit un fichier texte brut (journal), ou retourne fallback s'il n'existe pas."""
        ...

    @abstractmethod
    async def write(self, path: Path, value: Any) -> None:
        """Remplace atomiquement le document sous le verrou du chemin."""
        ...

    @abstractmethod
    async def write_unlocked(self, path: Path, value: Any) -> None:
        """Remplace atomiquement le document ; l'appelant détient déjà le verrou."""
        ...

    @abstractmethod
    async def append(self, path: Path, line: str) -> None:
        """Ajoute une ligne à un fichier journal sous le verrou du chemin."""
        ...

    @abstractmethod
    async def exists(self, path: Path) -> bool:
        """Vérifie si un document existe."""
        ...

    @abstractmethod
    async def remove(self, path: Path) -> None:
        """Supprime un document. Supprimer un chemin absent n'est pas une erreur."""
        ...

    @abstractmethod
    async def list_documents(self, directory: Path) -> list[Path]:
        """Liste les fichiers .json d'un répertoire (vide si le répertoire manque)."""
        ...

    @abstractmethod
    def lock(self, path: Path) -> AsyncContextManager[None]:
        """Verrou exclusif sur un chemin, libéré à la sortie du bloc async with."""
        ...

    async def with_lock(self, path: Path, fn: Callable[[], Awaitable[T]]) -> T:
        """Exécute fn sous le verrou du chemin et retourne son résultat."""
        async with self.lock(path):
            return await fn()
