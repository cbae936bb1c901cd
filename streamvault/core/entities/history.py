"""
Entrées d'historique de visionnage par utilisateur.
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from streamvault.core.entities.base import StoredModel, Timestamp


class ContentType(str, Enum):
    """Type de contenu regardé."""

    MOVIE = "movie"
    SERIES = "series"


class HistoryEntry(StoredModel):
    """
    Progression de visionnage d'un contenu.

    Au plus une entrée par (content_id, content_type) et par utilisateur.

    Attributes:
        progress: Fraction regardée, entre 0 et 1
        season: Saison en cours (séries uniquement)
        episode: Épisode en cours (séries uniquement)
    """

    content_id: str = Field(min_length=1)
    content_type: ContentType = Field(alias="type")
    progress: float = Field(ge=0, le=1)
    last_watched: Timestamp
    season: Optional[int] = Field(default=None, ge=1)
    episode: Optional[int] = Field(default=None, ge=1)

    @property
    def key(self) -> tuple[str, ContentType]:
        """Clé de déduplication."""
        return (self.content_id, self.content_type)
