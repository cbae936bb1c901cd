"""
Interfaces ports pour les repositories.

Interfaces abstraites (ports) définissant les contrats pour la persistance des données.
Les implémentations (adaptateurs) reposent sur IDocumentStore : chaque
opération logique ne modifie qu'un seul document.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from streamvault.core.entities import (
    Category,
    CategoryInput,
    Episode,
    HistoryEntry,
    Movie,
    MovieInput,
    Role,
    Series,
    SeriesInput,
    UserRecord,
)


class ICatalogRepository(ABC):
    """
    Interface de stockage du catalogue.

    Définit les opérations pour persister films, séries et catégories.
    """

    @abstractmethod
    async def get_movie(self, movie_id: str) -> Optional[Movie]:
        """Récupère un film par son ID."""
        ...

    @abstractmethod
    async def list_movies(self) -> list[Movie]:
        """Liste les films valides ; les documents corrompus sont ignorés."""
        ...

    @abstractmethod
    async def upsert_movie(self, movie: MovieInput | dict[str, Any]) -> Movie:
        """Crée ou met à jour un film en conservant createdAt et views."""
        ...

    @abstractmethod
    async def delete_movie(self, movie_id: str) -> None:
        """Supprime un film. Idempotent."""
        ...

    @abstractmethod
    async def get_series(self, slug: str) -> Optional[Series]:
        """Récupère une série par son slug."""
        ...

    @abstractmethod
    async def list_series(self) -> list[Series]:
        """Liste les séries valides ; les documents corrompus sont ignorés."""
        ...

    @abstractmethod
    async def upsert_series_episode(
        self,
        series_title: str,
        slug: Optional[str],
        series_meta: SeriesInput | dict[str, Any],
        season_number: int,
        episode: Episode | dict[str, Any],
    ) -> Series:
        """
        Fusionne un épisode dans sa série.

        Args :
            series_title : Titre servant à dériver le slug
            slug : Slug explicite (prioritaire sur le titre)
            series_meta : Métadonnées de la série et saisons connues
            season_number : Saison cible
            episode : Épisode à insérer ou remplacer

        Retourne :
            La série complète, triée et persistée
        """
        ...

    @abstractmethod
    async def delete_series(self, slug: str) -> None:
        """Supprime une série. Idempotent."""
        ...

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """Liste les catégories triées par order."""
        ...

    @abstractmethod
    async def save_categories(self, categories: list[Category | dict[str, Any]]) -> list[Category]:
        """Remplace la liste des catégories, triée par order."""
        ...

    @abstractmethod
    async def replace_categories(self, inputs: list[CategoryInput | dict[str, Any]]) -> list[Category]:
        """Construit puis enregistre les catégories depuis des entrées appelant."""
        ...


class IHistoryRepository(ABC):
    """Interface de stockage de l'historique de visionnage."""

    @abstractmethod
    async def get(self, username: str) -> list[HistoryEntry]:
        """Historique de l'utilisateur, le plus récent d'abord."""
        ...

    @abstractmethod
    async def upsert(self, username: str, entry: HistoryEntry | dict[str, Any]) -> HistoryEntry:
        """Remplace l'entrée de même (contentId, type) ou l'ajoute."""
        ...

    @abstractmethod
    async def clear(self, username: str) -> None:
        """Vide l'historique de l'utilisateur."""
        ...


class IUserRepository(ABC):
    """Interface de stockage des comptes (admin.json et users.json)."""

    @abstractmethod
    async def list_all(self) -> list[UserRecord]:
        """Administrateurs puis utilisateurs."""
        ...

    @abstractmethod
    async def find(self, username: str) -> Optional[UserRecord]:
        """Recherche insensible à la casse sur les deux collections."""
        ...

    @abstractmethod
    async def upsert(self, record: UserRecord) -> UserRecord:
        """Enregistre un compte dans la collection de son rôle."""
        ...

    @abstractmethod
    async def delete(self, username: str) -> None:
        """Supprime un compte des deux collections. Idempotent."""
        ...

    @abstractmethod
    async def replace(self, role: Role, users: list[UserRecord]) -> None:
        """Remplace toute la collection d'un rôle."""
        ...
