"""
Disposition des documents sous le répertoire de données.

    <root>/users/admin.json          {"users": [...]}
    <root>/users/users.json          {"users": [...]}
    <root>/users/history/<user>.json [HistoryEntry...]
    <root>/catalog/movies/<id>.json
    <root>/catalog/series/<slug>.json
    <root>/catalog/categories.json   [Category...]
    <root>/sessions.json             {"sessions": [...]}
    <root>/audit.log                 une entrée par ligne

Construite depuis Settings puis passée explicitement à chaque composant.
"""

from dataclasses import dataclass
from pathlib import Path

from streamvault.core.errors import ValidationError


def _safe_name(name: str, field: str) -> str:
    """Refuse les noms qui sortiraient de leur répertoire (séparateurs, '..')."""
    if not name or name.startswith(".") or "/" in name or "\\" in name or "\x00" in name:
        raise ValidationError(
            f"Invalid {field}", details={field: [f"'{name}' is not a valid file name"]}
        )
    return name


@dataclass(frozen=True)
class DataPaths:
    """Chemins des documents, relatifs à root."""

    root: Path

    @property
    def users_dir(self) -> Path:
        return self.root / "users"

    @property
    def admin_db(self) -> Path:
        return self.users_dir / "admin.json"

    @property
    def users_db(self) -> Path:
        return self.users_dir / "users.json"

    @property
    def history_dir(self) -> Path:
        return self.users_dir / "history"

    @property
    def catalog_dir(self) -> Path:
        return self.root / "catalog"

    @property
    def movies_dir(self) -> Path:
        return self.catalog_dir / "movies"

    @property
    def series_dir(self) -> Path:
        return self.catalog_dir / "series"

    @property
    def categories_file(self) -> Path:
        return self.catalog_dir / "categories.json"

    @property
    def sessions_file(self) -> Path:
        return self.root / "sessions.json"

    @property
    def audit_log(self) -> Path:
        return self.root / "audit.log"

    def movie_file(self, movie_id: str) -> Path:
        return self.movies_dir / f"{_safe_name(movie_id, 'id')}.json"

    def series_file(self, slug: str) -> Path:
        return self.series_dir / f"{_safe_name(slug, 'slug')}.json"

    def history_file(self, username: str) -> Path:
        return self.history_dir / f"{_safe_name(username, 'username')}.json"
