"""
Entités de compte : utilisateurs et sessions d'authentification.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from streamvault.core.entities.base import StoredModel, Timestamp


class Role(str, Enum):
    """
    Rôle d'un compte.

    ADMIN satisfait toute exigence de rôle (admin ⊇ user).
    """

    ADMIN = "admin"
    USER = "user"


class UserRecord(StoredModel):
    """
    Compte utilisateur stocké dans users/admin.json ou users/users.json.

    Attributes:
        username: Unique sans tenir compte de la casse, sur les deux collections
        password_hash: Hash argon2 du mot de passe
        force_password_reset: Le mot de passe doit être changé à la prochaine connexion
    """

    username: str = Field(min_length=3)
    password_hash: str = Field(min_length=20)
    role: Role
    active: bool = True
    created_at: Timestamp
    updated_at: Timestamp
    force_password_reset: bool = False


class UserCreate(StoredModel):
    """Création d'un compte par un administrateur."""

    username: str = Field(min_length=3)
    password: str = Field(min_length=12)
    role: Role


class UserUpdate(StoredModel):
    """Modification partielle d'un compte ; les champs None sont conservés."""

    password: Optional[str] = Field(default=None, min_length=12)
    active: Optional[bool] = None
    force_password_reset: Optional[bool] = None
    role: Optional[Role] = None


class LoginInput(StoredModel):
    """Identifiants soumis à la connexion."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=8)


class SessionRecord(StoredModel):
    """
    Session d'authentification stockée dans sessions.json.

    Invariant : expires_at >= created_at. Une session expirée n'est jamais
    retournée comme valide.
    """

    id: str = Field(min_length=1)
    username: str = Field(min_length=1)
    role: Role
    created_at: Timestamp
    expires_at: Timestamp
    csrf_token: str = Field(min_length=32)

    @model_validator(mode="after")
    def _expiry_after_creation(self) -> "SessionRecord":
        if self.expires_at < self.created_at:
            raise ValueError("expiresAt must not precede createdAt")
        return self

    def is_active(self, now: datetime) -> bool:
        """Vérifie si la session est encore valide à l'instant donné."""
        return self.expires_at > now
