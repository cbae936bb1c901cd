"""
Fonctions utilitaires partagees dans le projet StreamVault.

Ce module centralise les fonctions reutilisees a travers le codebase :
- normalize_accents : suppression des diacritiques avant generation de slug
- slugify : identifiant URL derive d'un titre
- utc_now / format_timestamp : horodatages ISO-8601 UTC a la milliseconde
"""

import re
import unicodedata
from datetime import datetime, timezone

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_accents(text: str) -> str:
    """Supprime les diacritiques (é -> e) en conservant les autres caracteres."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def slugify(text: str) -> str:
    """
    Derive un slug deterministe depuis un titre.

    Minuscules, accents retires, toute suite de caracteres non alphanumeriques
    remplacee par un tiret, tirets de bord supprimes.

    Exemple : "Solstice Chronicles: Part II" -> "solstice-chronicles-part-ii"
    """
    lowered = normalize_accents(text).lower()
    return _NON_ALNUM.sub("-", lowered).strip("-")


def utc_now() -> datetime:
    """Instant courant en UTC, tronque a la milliseconde (precision du stockage)."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def format_timestamp(value: datetime) -> str:
    """Formate un datetime en ISO-8601 UTC avec suffixe Z (2026-10-19T12:00:00.000Z)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
