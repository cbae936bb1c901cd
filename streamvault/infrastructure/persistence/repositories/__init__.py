"""
Implementations fichiers des repositories.

Ce module contient les implementations concretes des interfaces repository
definies dans streamvault/core/ports/repositories.py.

Chaque repository :
- Herite de l'interface ABC correspondante du domaine
- Recoit le store de documents et la disposition des chemins par injection
- Valide les documents lus et ecrits via les entites pydantic
"""

from streamvault.infrastructure.persistence.repositories.catalog_repository import (
    JsonCatalogRepository,
    slug_for_series,
)
from streamvault.infrastructure.persistence.repositories.history_repository import (
    JsonHistoryRepository,
)
from streamvault.infrastructure.persistence.repositories.user_repository import (
    JsonUserRepository,
)

__all__ = [
    "JsonCatalogRepository",
    "JsonHistoryRepository",
    "JsonUserRepository",
    "slug_for_series",
]
