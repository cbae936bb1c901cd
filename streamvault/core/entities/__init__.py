"""
Entités métier représentant les documents persistés.

Toutes les entités sont des modèles pydantic validés à la construction.

Exports:
- Movie, Series, Season, Episode, Category, Subtitle : Catalogue
- MovieInput, SeriesInput, CategoryInput : Entrées avant attribution des dates
- UserRecord, UserCreate, UserUpdate, LoginInput, SessionRecord, Role : Comptes
- HistoryEntry, ContentType : Historique de visionnage
- AuditEntry, AuditAction : Journal d'audit
- parse_model : Validation avec erreurs typées du domaine
"""

from streamvault.core.entities.account import (
    LoginInput,
    Role,
    SessionRecord,
    UserCreate,
    UserRecord,
    UserUpdate,
)
from streamvault.core.entities.audit import AuditAction, AuditEntry
from streamvault.core.entities.base import StoredModel, parse_model
from streamvault.core.entities.catalog import (
    Category,
    CategoryInput,
    Episode,
    Movie,
    MovieInput,
    Season,
    Series,
    SeriesInput,
    Subtitle,
    sort_episodes,
    sort_seasons,
)
from streamvault.core.entities.history import ContentType, HistoryEntry

__all__ = [
    "AuditAction",
    "AuditEntry",
    "Category",
    "CategoryInput",
    "ContentType",
    "Episode",
    "HistoryEntry",
    "LoginInput",
    "Movie",
    "MovieInput",
    "Role",
    "Season",
    "Series",
    "SeriesInput",
    "SessionRecord",
    "StoredModel",
    "Subtitle",
    "UserCreate",
    "UserRecord",
    "UserUpdate",
    "parse_model",
    "sort_episodes",
    "sort_seasons",
]
