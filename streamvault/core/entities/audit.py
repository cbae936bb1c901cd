"""
Entrées du journal d'audit des actions privilégiées.
"""

from enum import Enum
from typing import Any

from pydantic import Field

from streamvault.core.entities.base import StoredModel, Timestamp


class AuditAction(str, Enum):
    """Actions tracées dans audit.log."""

    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    RESET_PASSWORD = "RESET_PASSWORD"
    DISABLE_USER = "DISABLE_USER"
    CREATE_MOVIE = "CREATE_MOVIE"
    UPDATE_MOVIE = "UPDATE_MOVIE"
    DELETE_MOVIE = "DELETE_MOVIE"
    CREATE_SERIES = "CREATE_SERIES"
    UPDATE_SERIES = "UPDATE_SERIES"
    DELETE_SERIES = "DELETE_SERIES"
    PUBLISH_CONTENT = "PUBLISH_CONTENT"
    UNPUBLISH_CONTENT = "UNPUBLISH_CONTENT"
    FEATURE_CONTENT = "FEATURE_CONTENT"
    UNFEATURE_CONTENT = "UNFEATURE_CONTENT"
    CREATE_CATEGORY = "CREATE_CATEGORY"
    UPDATE_CATEGORY = "UPDATE_CATEGORY"
    DELETE_CATEGORY = "DELETE_CATEGORY"


class AuditEntry(StoredModel):
    """Ligne immuable du journal : jamais modifiée ni supprimée."""

    timestamp: Timestamp
    actor: str
    action: AuditAction
    target: str
    details: dict[str, Any] = Field(default_factory=dict)
