"""
Configuration du logging de StreamVault via loguru.

Deux handlers :
- stderr : coloré, niveau configurable, pour suivre le serveur en direct
- fichier : JSON sérialisé, tous niveaux, rotation par taille et rétention

Les composants loggent directement avec `from loguru import logger` ;
seul le point d'entrée appelle configure_logging / configure_from_settings.
"""

import sys
from pathlib import Path

from loguru import logger

from streamvault.config import Settings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(
    log_level: str = "INFO",
    log_file: Path = Path("logs/streamvault.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
    console: bool = True,
) -> None:
    """Remplace les handlers loguru par la console et le fichier JSON.

    Args :
        log_level : Niveau minimum sur stderr (DEBUG, INFO, WARNING, ERROR)
        log_file : Fichier JSON ; ses répertoires parents sont créés
        rotation_size : Taille déclenchant la rotation ("10 MB")
        retention_count : Nombre d'archives conservées
        console : Désactive le handler stderr (tests, exécution embarquée)
    """
    logger.remove()

    if console:
        logger.add(sys.stderr, level=log_level.upper(), format=_CONSOLE_FORMAT, colorize=True)

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,
    )
    logger.debug(f"Logging configure: {log_file} (rotation {rotation_size})")


def configure_from_settings(settings: Settings, console: bool = True) -> None:
    """Configure le logging depuis les Settings et signale un secret de session faible."""
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
        console=console,
    )
    if settings.uses_insecure_secret:
        logger.warning("Secret de session par defaut utilise, definir STREAMVAULT_SESSION_SECRET")
