"""
Limitation du débit des requêtes d'administration via limits.

Fenêtre fixe par clé (adresse cliente), stockage en mémoire du processus.
"""

import math
import time
from typing import Optional

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter


class RateLimiter:
    """
    Limiteur à fenêtre fixe par clé.

    Attributes:
        limit: Requêtes autorisées par fenêtre
        window_seconds: Durée de la fenêtre
    """

    def __init__(self, limit: int = 10, window_seconds: int = 60) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(limit, window_seconds, namespace="admin")
        self._limiter = FixedWindowRateLimiter(MemoryStorage())

    def hit(self, key: str) -> Optional[int]:
        """Compte une requête ; retourne le délai d'attente en secondes si la limite est dépassée."""
        if self._limiter.hit(self._item, key):
            return None
        reset_time, _ = self._limiter.get_window_stats(self._item, key)
        return max(1, math.ceil(reset_time - time.time()))
