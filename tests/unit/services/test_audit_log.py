"""
Tests unitaires pour le journal d'audit.
"""

import pytest

from streamvault.core.entities import AuditAction
from streamvault.services.audit import format_entry, parse_line


class TestAuditLog:
    """Tests de l'ecriture et relecture du journal."""

    @pytest.mark.asyncio
    async def test_record_appends_one_line(self, audit_log, paths) -> None:
        entry = await audit_log.record(
            "alice", AuditAction.CREATE_MOVIE, "iron-legacy", {"title": "Iron Legacy"}
        )

        lines = paths.audit_log.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        timestamp, actor, action, target, details = lines[0].split(" | ")
        assert timestamp.endswith("Z")
        assert (actor, action, target) == ("alice", "CREATE_MOVIE", "iron-legacy")
        assert details == '{"title": "Iron Legacy"}'
        assert entry.details == {"title": "Iron Legacy"}

    @pytest.mark.asyncio
    async def test_entries_read_back_in_order(self, audit_log) -> None:
        await audit_log.record("alice", AuditAction.LOGIN, "user", {"success": True})
        await audit_log.record("alice", AuditAction.DELETE_SERIES, "solstice-chronicles")

        entries = await audit_log.read_entries()

        assert [e.action for e in entries] == [AuditAction.LOGIN, AuditAction.DELETE_SERIES]
        assert entries[1].details == {}

    @pytest.mark.asyncio
    async def test_empty_log(self, audit_log) -> None:
        assert await audit_log.read_entries() == []


class TestLineFormat:
    """Tests du format de ligne."""

    @pytest.mark.asyncio
    async def test_separator_in_fields_cannot_forge_columns(self, audit_log) -> None:
        entry = await audit_log.record("eve | admin\nx", AuditAction.LOGIN, "user", {"note": "a | b"})

        line = format_entry(entry)
        parsed = parse_line(line)

        assert "\n" not in line
        assert parsed.actor == "eve / admin x"
        assert parsed.details == {"note": "a | b"}
