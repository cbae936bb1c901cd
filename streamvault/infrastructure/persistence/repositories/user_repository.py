"""
Implémentation fichiers du repository des comptes.

Les comptes sont partitionnés par rôle : users/admin.json pour les
administrateurs, users/users.json pour les autres, chacun de forme
{"users": [...]}. L'unicité du nom (insensible à la casse) porte sur
l'ensemble des deux collections.
"""

from pathlib import Path

from streamvault.core.entities import Role, UserRecord, parse_model
from streamvault.core.errors import DecodeError
from streamvault.core.ports.document_store import IDocumentStore
from streamvault.core.ports.repositories import IUserRepository
from streamvault.infrastructure.persistence.paths import DataPaths
from streamvault.utils.helpers import utc_now


def _same_user(left: str, right: str) -> bool:
    return left.casefold() == right.casefold()


class JsonUserRepository(IUserRepository):
    """Repository des comptes sur IDocumentStore."""

    def __init__(self, store: IDocumentStore, paths: DataPaths) -> None:
        self._store = store
        self._paths = paths

    def _file_for_role(self, role: Role) -> Path:
        return self._paths.admin_db if role == Role.ADMIN else self._paths.users_db

    async def _load(self, path: Path) -> list[UserRecord]:
        payload = await self._store.read(path, {"users": []})
        if not isinstance(payload, dict) or not isinstance(payload.get("users", []), list):
            raise DecodeError(path, "expected an object with a users list")
        return [parse_model(UserRecord, item) for item in payload.get("users", [])]

    async def _save(self, path: Path, users: list[UserRecord]) -> None:
        await self._store.write_unlocked(path, {"users": [user.to_document() for user in users]})

    async def _remove_from(self, path: Path, username: str) -> None:
        async with self._store.lock(path):
            users = await self._load(path)
            remaining = [user for user in users if not _same_user(user.username, username)]
            if len(remaining) != len(users):
                await self._save(path, remaining)

    async def list_all(self) -> list[UserRecord]:
        return await self._load(self._paths.admin_db) + await self._load(self._paths.users_db)

    async def find(self, username: str) -> UserRecord | None:
        return next(
            (user for user in await self.list_all() if _same_user(user.username, username)),
            None,
        )

    async def upsert(self, record: UserRecord) -> UserRecord:
        """
        Enregistre le compte dans la collection de son rôle, updatedAt à maintenant.

        Un changement de rôle retire le compte de l'autre collection.
        Les deux documents sont verrouillés l'un après l'autre, jamais imbriqués.
        """
        updated = record.model_copy(update={"updated_at": utc_now()})
        target = self._file_for_role(updated.role)
        async with self._store.lock(target):
            users = [user for user in await self._load(target) if not _same_user(user.username, updated.username)]
            users.append(updated)
            await self._save(target, users)

        other = self._paths.users_db if target == self._paths.admin_db else self._paths.admin_db
        await self._remove_from(other, updated.username)
        return updated

    async def delete(self, username: str) -> None:
        for path in (self._paths.admin_db, self._paths.users_db):
            await self._remove_from(path, username)

    async def replace(self, role: Role, users: list[UserRecord]) -> None:
        await self._store.write(
            self._file_for_role(role), {"users": [user.to_document() for user in users]}
        )
