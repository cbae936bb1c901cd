"""
Journal d'audit des actions privilégiées.

Chaque appel ajoute une ligne à audit.log avant de rendre la main :

    2026-10-19T12:00:00.000Z | alice | CREATE_MOVIE | iron-legacy | {"title": "Iron Legacy"}

Le journal est en ajout seul : aucune réécriture, aucune suppression,
aucun cache en mémoire.
"""

import json
from typing import Any, Optional

from streamvault.core.entities import AuditAction, AuditEntry, parse_model
from streamvault.core.ports.document_store import IDocumentStore
from streamvault.infrastructure.persistence.paths import DataPaths
from streamvault.utils.constants import AUDIT_SEPARATOR
from streamvault.utils.helpers import format_timestamp, utc_now


def _clean_field(value: str) -> str:
    """Empêche un champ d'injecter un séparateur ou une nouvelle ligne."""
    return value.replace("\r", " ").replace("\n", " ").replace("|", "/")


def format_entry(entry: AuditEntry) -> str:
    """Formate une entrée en ligne délimitée par des barres verticales."""
    return AUDIT_SEPARATOR.join(
        [
            format_timestamp(entry.timestamp),
            _clean_field(entry.actor),
            entry.action.value,
            _clean_field(entry.target),
            json.dumps(entry.details, ensure_ascii=False, default=str),
        ]
    )


def parse_line(line: str) -> AuditEntry:
    """Relit une ligne du journal ; les détails JSON peuvent contenir le séparateur."""
    timestamp, actor, action, target, details = line.rstrip("\n").split(AUDIT_SEPARATOR, 4)
    return parse_model(
        AuditEntry,
        {
            "timestamp": timestamp,
            "actor": actor,
            "action": action,
            "target": target,
            "details": json.loads(details),
        },
    )


class AuditLog:
    """Enregistrement durable des actions privilégiées."""

    def __init__(self, store: IDocumentStore, paths: DataPaths) -> None:
        self._store = store
        self._path = paths.audit_log

    async def record(
        self,
        actor: str,
        action: AuditAction,
        target: str,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditEntry:
        """Ajoute une entrée horodatée au journal et la retourne."""
        entry = AuditEntry(
            timestamp=utc_now(),
            actor=actor,
            action=action,
            target=target,
            details=details or {},
        )
        await self._store.append(self._path, format_entry(entry))
        return entry

    async def read_entries(self) -> list[AuditEntry]:
        """Relit toutes les entrées dans l'ordre d'écriture."""
        text = await self._store.read_text(self._path, "")
        return [parse_line(line) for line in text.splitlines() if line.strip()]
