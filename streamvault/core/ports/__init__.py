"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Les ports sont les frontières de l'architecture hexagonale. Ils définissent
ce dont le domaine a besoin du monde extérieur sans spécifier
comment ces besoins sont satisfaits.

Ports de persistance :
- IDocumentStore : Lecture, écriture atomique et ajout de documents JSON sous verrou
- ICatalogRepository : Films, séries et catégories
- IHistoryRepository : Historique de visionnage par utilisateur
- IUserRepository : Comptes administrateurs et utilisateurs
"""

from streamvault.core.ports.document_store import IDocumentStore
from streamvault.core.ports.repositories import (
    ICatalogRepository,
    IHistoryRepository,
    IUserRepository,
)

__all__ = [
    "ICatalogRepository",
    "IDocumentStore",
    "IHistoryRepository",
    "IUserRepository",
]
