"""
Hachage des mots de passe via argon2-cffi.
"""

import asyncio

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError


class PasswordHasher:
    """
    Hachage et vérification argon2id.

    Les calculs sont volontairement coûteux : ils sont déportés dans un thread
    pour ne pas bloquer la boucle d'événements.
    """

    def __init__(self, hasher: Argon2Hasher | None = None) -> None:
        self._hasher = hasher or Argon2Hasher()

    async def hash(self, password: str) -> str:
        """Retourne le hash argon2 encodé du mot de passe."""
        return await asyncio.to_thread(self._hasher.hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        """Vérifie un mot de passe ; un hash illisible est un échec, pas une erreur."""
        try:
            return await asyncio.to_thread(self._hasher.verify, password_hash, password)
        except (VerificationError, InvalidHashError):
            return False
