"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe STREAMVAULT_,
et peut optionnellement être fournie via un fichier .env.

Aucun composant ne lit de chemin global : le Settings est construit une fois
puis ses sous-objets (DataPaths, LockSettings) sont injectés explicitement.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from streamvault.infrastructure.persistence.file_lock import LockSettings
from streamvault.infrastructure.persistence.paths import DataPaths
from streamvault.utils.constants import DEFAULT_ALLOWED_VIDEO_DOMAINS

# Trouver le fichier .env à la racine du projet (parent de streamvault/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

INSECURE_DEV_SECRET = "streamvault-insecure-development-secret"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe STREAMVAULT_.
    Exemple : STREAMVAULT_SESSION_SECRET=...

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="STREAMVAULT_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Racine des documents (users/, catalog/, sessions.json, audit.log)
    data_dir: Path = Field(default=Path("data"))

    # Sessions
    session_secret: str = Field(default=INSECURE_DEV_SECRET, min_length=16)
    session_ttl_days: int = Field(default=7, ge=1)
    secure_cookies: bool = Field(default=False)

    # Verrous consultatifs (backoff exponentiel 50ms -> 200ms, 5 relances)
    lock_retries: int = Field(default=5, ge=0)
    lock_min_wait_ms: int = Field(default=50, ge=1)
    lock_max_wait_ms: int = Field(default=200, ge=1)
    lock_stale_seconds: float = Field(default=5.0, gt=0)

    # Domaines autorisés pour les flux vidéo et sous-titres
    allowed_video_domains: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_VIDEO_DOMAINS)
    )

    # Limitation des requêtes d'administration
    admin_rate_limit: int = Field(default=10, ge=1)
    admin_rate_window_seconds: int = Field(default=60, ge=1)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/streamvault.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("data_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def paths(self) -> DataPaths:
        """Disposition des documents sous data_dir."""
        return DataPaths(root=self.data_dir)

    @property
    def lock_settings(self) -> LockSettings:
        """Paramètres d'acquisition des verrous, en secondes."""
        return LockSettings(
            retries=self.lock_retries,
            min_wait=self.lock_min_wait_ms / 1000,
            max_wait=self.lock_max_wait_ms / 1000,
            stale_after=self.lock_stale_seconds,
        )

    @property
    def uses_insecure_secret(self) -> bool:
        """Vérifie si le secret de développement par défaut est encore utilisé."""
        return self.session_secret == INSECURE_DEV_SECRET
