"""
Implémentation fichiers du repository catalogue.

Un film par fichier (catalog/movies/<id>.json), une série par fichier
(catalog/series/<slug>.json) avec ses saisons et épisodes imbriqués, et une
liste ordonnée unique pour les catégories (catalog/categories.json).

La série est l'unité de durabilité : ajouter un épisode réécrit le document
complet sous le verrou de la série, lecture comprise.
"""

import uuid
from pathlib import Path
from typing import Any, Iterable, Optional, TypeVar

from loguru import logger

from streamvault.core.entities import (
    Category,
    CategoryInput,
    Episode,
    Movie,
    MovieInput,
    Season,
    Series,
    SeriesInput,
    StoredModel,
    parse_model,
    sort_episodes,
    sort_seasons,
)
from streamvault.core.errors import ConflictError, DecodeError, NotFoundError, ValidationError
from streamvault.core.ports.document_store import IDocumentStore
from streamvault.core.ports.repositories import ICatalogRepository
from streamvault.infrastructure.persistence.paths import DataPaths
from streamvault.utils.helpers import slugify, utc_now

ModelT = TypeVar("ModelT", bound=StoredModel)

# Champs de série conservés depuis le document existant s'ils ne sont pas fournis
_SERIES_STICKY_FIELDS = ("featured", "published", "tags")


def slug_for_series(title: str) -> str:
    """Slug d'une série dérivé de son titre."""
    return slugify(title)


class JsonCatalogRepository(ICatalogRepository):
    """
    Repository du catalogue sur IDocumentStore.

    Attributes:
        skipped_documents: Nombre de documents ignorés lors des listages
            (JSON invalide ou rejet du schéma)
    """

    def __init__(
        self,
        store: IDocumentStore,
        paths: DataPaths,
        allowed_domains: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Initialise le repository.

        Args :
            store : Store de documents (verrous et écriture atomique)
            paths : Disposition des fichiers du catalogue
            allowed_domains : Domaines autorisés pour les URLs de flux
        """
        self._store = store
        self._paths = paths
        self._allowed_domains = list(allowed_domains) if allowed_domains is not None else None
        self.skipped_documents = 0

    def _parse(self, model_cls: type[ModelT], data: Any) -> ModelT:
        return parse_model(model_cls, data, self._allowed_domains)

    def _skip(self, path: Path, reason: str) -> None:
        self.skipped_documents += 1
        logger.warning(f"Document ignore: {path} ({reason})")

    async def _load(self, path: Path, model_cls: type[ModelT]) -> Optional[ModelT]:
        """Charge un document ; None s'il est absent ou rejeté par le schéma."""
        payload = await self._store.read(path)
        if payload is None:
            return None
        try:
            return self._parse(model_cls, payload)
        except ValidationError as exc:
            logger.warning(f"Document invalide: {path} ({exc.details})")
            return None

    async def _read_directory(self, directory: Path, model_cls: type[ModelT]) -> list[ModelT]:
        items: list[ModelT] = []
        for path in await self._store.list_documents(directory):
            try:
                payload = await self._store.read(path)
            except DecodeError as exc:
                self._skip(path, exc.reason)
                continue
            if payload is None:
                # Supprime entre le listage et la lecture
                continue
            try:
                items.append(self._parse(model_cls, payload))
            except ValidationError as exc:
                self._skip(path, str(exc.details))
        return items

    # ------------------------------------------------------------------
    # Films
    # ------------------------------------------------------------------

    async def get_movie(self, movie_id: str) -> Optional[Movie]:
        return await self._load(self._paths.movie_file(movie_id), Movie)

    async def movie_exists(self, movie_id: str) -> bool:
        """Vérifie si un document film existe pour cet ID."""
        return await self._store.exists(self._paths.movie_file(movie_id))

    async def list_movies(self) -> list[Movie]:
        return await self._read_directory(self._paths.movies_dir, Movie)

    async def upsert_movie(self, movie: MovieInput | dict[str, Any]) -> Movie:
        """
        Crée ou met à jour un film.

        Un ID est généré s'il est absent. createdAt et views sont repris du
        document existant ; sinon views vient de l'entrée (0 par défaut).

        Raises:
            ValidationError: Si le film complet est rejeté par le schéma
        """
        movie_input = self._parse(MovieInput, movie)
        movie_id = movie_input.id or str(uuid.uuid4())
        path = self._paths.movie_file(movie_id)

        async with self._store.lock(path):
            existing = await self._load(path, Movie)
            now = utc_now()
            record = self._parse(
                Movie,
                {
                    **movie_input.model_dump(exclude={"id", "views"}),
                    "id": movie_id,
                    "created_at": existing.created_at if existing else now,
                    "updated_at": now,
                    "views": existing.views if existing else (movie_input.views or 0),
                },
            )
            await self._store.write_unlocked(path, record.to_document())

        logger.info(f"Film enregistre: {movie_id}")
        return record

    async def delete_movie(self, movie_id: str) -> None:
        await self._store.remove(self._paths.movie_file(movie_id))

    # ------------------------------------------------------------------
    # Séries
    # ------------------------------------------------------------------

    async def get_series(self, slug: str) -> Optional[Series]:
        return await self._load(self._paths.series_file(slug), Series)

    async def list_series(self) -> list[Series]:
        return await self._read_directory(self._paths.series_dir, Series)

    async def upsert_series_episode(
        self,
        series_title: str,
        slug: Optional[str],
        series_meta: SeriesInput | dict[str, Any],
        season_number: int,
        episode: Episode | dict[str, Any],
    ) -> Series:
        """
        Fusionne un épisode dans sa série et réécrit le document complet.

        Trois formes sont réconciliées : série nouvelle, saison nouvelle
        d'une série existante, saison existante. Un épisode de même numéro
        est remplacé, ce qui rend l'opération idempotente.

        Une saison nouvelle reprend titre et synopsis de la saison de même
        numéro dans series_meta, sinon "Season {n}" et la description.
        """
        meta = self._parse(SeriesInput, series_meta)
        new_episode = self._parse(Episode, episode)
        if season_number < 1:
            raise ValidationError(
                "Invalid season number", details={"seasonNumber": ["must be >= 1"]}
            )
        slug = slug or slug_for_series(series_title)
        path = self._paths.series_file(slug)

        async with self._store.lock(path):
            existing = await self._load(path, Series)
            seasons: list[Season] = list(existing.seasons) if existing else []
            target = existing.find_season(season_number) if existing else None

            if target is not None:
                episodes = [
                    item for item in target.episodes
                    if item.episode_number != new_episode.episode_number
                ]
                episodes.append(new_episode)
                merged = target.model_copy(update={"episodes": sort_episodes(episodes)})
                seasons = [
                    merged if season.season_number == season_number else season
                    for season in seasons
                ]
            else:
                base = next(
                    (s for s in meta.seasons if s.season_number == season_number), None
                )
                seasons.append(
                    self._parse(
                        Season,
                        {
                            "season_number": season_number,
                            "title": base.title if base else f"Season {season_number}",
                            "synopsis": base.synopsis if base else meta.description,
                            "episodes": [new_episode],
                        },
                    )
                )

            now = utc_now()
            record = self._parse(
                Series,
                {
                    **meta.model_dump(exclude={"slug", "seasons"}),
                    "slug": slug,
                    "title": meta.title or series_title,
                    "seasons": sort_seasons(seasons),
                    "created_at": existing.created_at if existing else now,
                    "updated_at": now,
                },
            )
            await self._store.write_unlocked(path, record.to_document())

        logger.info(
            f"Episode S{season_number:02d}E{new_episode.episode_number:02d} fusionne dans {slug}"
        )
        return record

    async def create_series(self, series: SeriesInput | dict[str, Any]) -> Series:
        """
        Crée une série à partir d'une entrée complète.

        Raises:
            ConflictError: Si une série existe déjà pour ce slug
        """
        series_input = self._parse(SeriesInput, series)
        slug = series_input.slug or slug_for_series(series_input.title)
        path = self._paths.series_file(slug)

        async with self._store.lock(path):
            if await self._store.exists(path):
                raise ConflictError(f"Series already exists: {slug}")
            now = utc_now()
            record = self._parse(
                Series,
                {
                    **series_input.model_dump(exclude={"slug", "seasons"}),
                    "slug": slug,
                    "seasons": sort_seasons(series_input.seasons),
                    "created_at": now,
                    "updated_at": now,
                },
            )
            await self._store.write_unlocked(path, record.to_document())
        return record

    async def update_series(self, slug: str, series: SeriesInput | dict[str, Any]) -> Series:
        """
        Remplace le contenu d'une série existante.

        featured, published et tags non fournis sont conservés.

        Raises:
            NotFoundError: Si la série n'existe pas
        """
        series_input = self._parse(SeriesInput, series)
        path = self._paths.series_file(slug)

        async with self._store.lock(path):
            existing = await self._load(path, Series)
            if existing is None:
                raise NotFoundError("series", slug)
            values = series_input.model_dump(exclude={"slug", "seasons"})
            for field in _SERIES_STICKY_FIELDS:
                if field not in series_input.model_fields_set:
                    values[field] = getattr(existing, field)
            record = self._parse(
                Series,
                {
                    **values,
                    "slug": slug,
                    "seasons": sort_seasons(series_input.seasons),
                    "created_at": existing.created_at,
                    "updated_at": utc_now(),
                },
            )
            await self._store.write_unlocked(path, record.to_document())
        return record

    async def save_series(self, series: Series) -> Series:
        """Enregistre un document série complet, re-trié, updatedAt à maintenant."""
        record = self._parse(
            Series,
            {
                **series.model_dump(exclude={"seasons"}),
                "seasons": sort_seasons(series.seasons),
                "updated_at": utc_now(),
            },
        )
        await self._store.write(self._paths.series_file(record.slug), record.to_document())
        return record

    async def delete_series(self, slug: str) -> None:
        await self._store.remove(self._paths.series_file(slug))

    # ------------------------------------------------------------------
    # Catégories
    # ------------------------------------------------------------------

    async def _load_categories(self) -> list[Category]:
        path = self._paths.categories_file
        payload = await self._store.read(path, [])
        if not isinstance(payload, list):
            raise DecodeError(path, "expected a list of categories")
        return [self._parse(Category, item) for item in payload]

    async def list_categories(self) -> list[Category]:
        categories = await self._load_categories()
        return sorted(categories, key=lambda category: category.order)

    async def save_categories(self, categories: list[Category | dict[str, Any]]) -> list[Category]:
        ordered = sorted(
            (self._parse(Category, item) for item in categories),
            key=lambda category: category.order,
        )
        await self._store.write(
            self._paths.categories_file, [category.to_document() for category in ordered]
        )
        return ordered

    async def replace_categories(
        self, inputs: list[CategoryInput | dict[str, Any]]
    ) -> list[Category]:
        """
        Construit les catégories depuis des entrées puis remplace la liste.

        Un ID est généré s'il manque, le slug est dérivé du nom s'il manque ;
        createdAt est conservé pour les IDs déjà présents.
        """
        parsed = [self._parse(CategoryInput, item) for item in inputs]
        path = self._paths.categories_file

        async with self._store.lock(path):
            current = {category.id: category for category in await self._load_categories()}
            now = utc_now()
            categories = []
            for item in parsed:
                category_id = item.id or uuid.uuid4().hex
                previous = current.get(category_id)
                categories.append(
                    self._parse(
                        Category,
                        {
                            "id": category_id,
                            "name": item.name,
                            "slug": item.slug or slugify(item.name),
                            "order": item.order,
                            "hero_id": item.hero_id,
                            "created_at": previous.created_at if previous else now,
                            "updated_at": now,
                        },
                    )
                )
            categories.sort(key=lambda category: category.order)
            await self._store.write_unlocked(path, [category.to_document() for category in categories])
        return categories
