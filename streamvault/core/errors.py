"""
Taxonomie des erreurs remontees par le coeur StreamVault.

Les conditions attendues (validation, absence, conflit, authentification)
sont des exceptions typees que la couche de routage convertit en reponses.
Les echecs de verrou et de decodage ne sont jamais relances par le coeur :
l'appelant decide s'il reessaie.
"""

from pathlib import Path
from typing import Optional


class StreamVaultError(Exception):
    """Classe de base de toutes les erreurs du coeur."""


class NotFoundError(StreamVaultError):
    """
    Document absent.

    Attributes:
        kind: Type de document recherche (movie, series, user...)
        key: Identifiant recherche
    """

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class ValidationError(StreamVaultError):
    """
    Rejet par le schema, avec le detail par champ.

    Attributes:
        details: Messages d'erreur indexes par chemin de champ ("seasons.0.title")
    """

    def __init__(self, message: str, details: Optional[dict[str, list[str]]] = None) -> None:
        self.details = details or {}
        super().__init__(message)


class LockTimeoutError(StreamVaultError):
    """Acces exclusif non obtenu dans le budget de tentatives."""

    def __init__(self, path: Path, attempts: int) -> None:
        self.path = path
        self.attempts = attempts
        super().__init__(f"Could not lock {path} after {attempts} attempts")


class DecodeError(StreamVaultError):
    """Contenu stocke illisible (JSON invalide)."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid JSON in {path}: {reason}")


class ConflictError(StreamVaultError):
    """Creation d'un document dont la cle existe deja."""


class AuthError(StreamVaultError):
    """Session absente ou invalide, identifiants refuses."""


class ForbiddenError(AuthError):
    """Session valide mais role insuffisant."""


class CsrfError(StreamVaultError):
    """Jeton CSRF absent ou different du secret de la session."""
