"""
Tests unitaires pour JsonCatalogRepository.

Verifie :
- upsert_movie : generation d'ID, conservation de createdAt et views
- upsert_series_episode : serie nouvelle, saison nouvelle, saison existante
- Tri des saisons et episodes, idempotence
- Listages tolerants aux documents corrompus
- Creation / mise a jour de series et categories
"""

import asyncio
import json

import pytest

from streamvault.core.errors import ConflictError, DecodeError, NotFoundError, ValidationError
from streamvault.infrastructure.persistence.repositories import (
    JsonCatalogRepository,
    slug_for_series,
)


class TestMovies:
    """Tests des films."""

    @pytest.mark.asyncio
    async def test_upsert_new_movie(self, catalog_repository, movie_payload) -> None:
        movie = await catalog_repository.upsert_movie(movie_payload)

        assert movie.id == "iron-legacy"
        assert movie.views == 0
        assert movie.created_at == movie.updated_at
        assert await catalog_repository.movie_exists("iron-legacy")

    @pytest.mark.asyncio
    async def test_upsert_without_id_generates_one(
        self, catalog_repository, movie_payload
    ) -> None:
        del movie_payload["id"]

        movie = await catalog_repository.upsert_movie(movie_payload)

        assert movie.id
        assert await catalog_repository.get_movie(movie.id) == movie

    @pytest.mark.asyncio
    async def test_update_preserves_created_at_and_views(
        self, catalog_repository, document_store, paths, movie_payload
    ) -> None:
        """Les compteurs existants ne sont jamais ecrases par une mise a jour."""
        first = await catalog_repository.upsert_movie(movie_payload)
        stored = await document_store.read(paths.movie_file("iron-legacy"))
        stored["views"] = 42
        await document_store.write(paths.movie_file("iron-legacy"), stored)

        movie_payload["title"] = "Iron Legacy (Director's Cut)"
        movie_payload["views"] = 0
        updated = await catalog_repository.upsert_movie(movie_payload)

        assert updated.title == "Iron Legacy (Director's Cut)"
        assert updated.views == 42
        assert updated.created_at == first.created_at
        assert updated.updated_at >= first.updated_at

    @pytest.mark.asyncio
    async def test_stored_document_uses_camel_case(
        self, catalog_repository, document_store, paths, movie_payload
    ) -> None:
        await catalog_repository.upsert_movie(movie_payload)

        stored = await document_store.read(paths.movie_file("iron-legacy"))

        assert stored["streamUrl"] == movie_payload["streamUrl"]
        assert stored["createdAt"].endswith("Z")
        assert "stream_url" not in stored

    @pytest.mark.asyncio
    async def test_disallowed_stream_domain_rejected(
        self, catalog_repository, paths, movie_payload
    ) -> None:
        movie_payload["streamUrl"] = "https://evil.test/movie.m3u8"

        with pytest.raises(ValidationError) as exc_info:
            await catalog_repository.upsert_movie(movie_payload)

        assert "streamUrl" in exc_info.value.details
        assert not paths.movie_file("iron-legacy").exists()

    @pytest.mark.asyncio
    async def test_custom_allowed_domains(self, document_store, paths, movie_payload) -> None:
        repo = JsonCatalogRepository(document_store, paths, allowed_domains=["videos.studio.test"])
        movie_payload["streamUrl"] = "https://eu.videos.studio.test/iron.m3u8"

        movie = await repo.upsert_movie(movie_payload)

        assert movie.stream_url == "https://eu.videos.studio.test/iron.m3u8"

    @pytest.mark.asyncio
    async def test_delete_movie_is_idempotent(self, catalog_repository, movie_payload) -> None:
        await catalog_repository.upsert_movie(movie_payload)

        await catalog_repository.delete_movie("iron-legacy")
        await catalog_repository.delete_movie("iron-legacy")

        assert await catalog_repository.get_movie("iron-legacy") is None


class TestUpsertSeriesEpisode:
    """Tests de la fusion d'un episode dans sa serie."""

    @pytest.mark.asyncio
    async def test_creates_series_with_default_season(
        self, catalog_repository, series_meta, make_episode
    ) -> None:
        series = await catalog_repository.upsert_series_episode(
            "Solstice Chronicles", None, series_meta, 1, make_episode(1)
        )

        assert series.slug == "solstice-chronicles"
        assert len(series.seasons) == 1
        season = series.seasons[0]
        assert season.title == "Season 1"
        assert season.synopsis == series_meta["description"]
        assert [e.episode_number for e in season.episodes] == [1]

    @pytest.mark.asyncio
    async def test_new_season_takes_title_from_meta(
        self, catalog_repository, series_meta, make_episode
    ) -> None:
        series_meta["seasons"] = [
            {"seasonNumber": 2, "title": "The Long Dusk", "synopsis": "Night finally returns."}
        ]

        series = await catalog_repository.upsert_series_episode(
            "Solstice Chronicles", None, series_meta, 2, make_episode(1)
        )

        assert series.seasons[0].title == "The Long Dusk"
        assert series.seasons[0].synopsis == "Night finally returns."

    @pytest.mark.asyncio
    async def test_out_of_order_inserts_stay_sorted(
        self, catalog_repository, series_meta, make_episode
    ) -> None:
        """Saisons et episodes sont tries quel que soit l'ordre d'arrivee."""
        for season_number, number in [(2, 1), (1, 3), (1, 1), (1, 2), (2, 2)]:
            series = await catalog_repository.upsert_series_episode(
                "Solstice Chronicles", None, series_meta, season_number, make_episode(number)
            )

        assert [s.season_number for s in series.seasons] == [1, 2]
        assert [e.episode_number for e in series.seasons[0].episodes] == [1, 2, 3]
        assert [e.episode_number for e in series.seasons[1].episodes] == [1, 2]
        assert await catalog_repository.get_series("solstice-chronicles") == series

    @pytest.mark.asyncio
    async def test_same_episode_is_replaced(
        self, catalog_repository, series_meta, make_episode
    ) -> None:
        """Reimporter un episode remplace l'existant sans le dupliquer."""
        await catalog_repository.upsert_series_episode(
            "Solstice Chronicles", None, series_meta, 1, make_episode(1)
        )
        series = await catalog_repository.upsert_series_episode(
            "Solstice Chronicles", None, series_meta, 1, make_episode(1, title="Dawn")
        )

        episodes = series.seasons[0].episodes
        assert len(episodes) == 1
        assert episodes[0].title == "Dawn"

    @pytest.mark.asyncio
    async def test_created_at_preserved_across_merges(
        self, catalog_repository, series_meta, make_episode
    ) -> None:
        first = await catalog_repository.upsert_series_episode(
            "Solstice Chronicles", None, series_meta, 1, make_episode(1)
        )
        second = await catalog_repository.upsert_series_episode(
            "Solstice Chronicles", None, series_meta, 1, make_episode(2)
        )

        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at

    @pytest.mark.asyncio
    async def test_explicit_slug_used(self, catalog_repository, series_meta, make_episode) -> None:
        series = await catalog_repository.upsert_series_episode(
            "Solstice Chronicles", "solstice", series_meta, 1, make_episode(1)
        )
        assert series.slug == "solstice"
        assert await catalog_repository.get_series("solstice-chronicles") is None

    @pytest.mark.asyncio
    async def test_concurrent_episodes_are_all_kept(
        self, catalog_repository, series_meta, make_episode
    ) -> None:
        """Aucune mise a jour perdue entre importations simultanees."""
        await asyncio.gather(
            *(
                catalog_repository.upsert_series_episode(
                    "Solstice Chronicles", None, series_meta, 1, make_episode(n)
                )
                for n in range(1, 6)
            )
        )

        series = await catalog_repository.get_series("solstice-chronicles")
        assert [e.episode_number for e in series.seasons[0].episodes] == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_invalid_episode_writes_nothing(
        self, catalog_repository, paths, series_meta, make_episode
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await catalog_repository.upsert_series_episode(
                "Solstice Chronicles", None, series_meta, 1, make_episode(1, description="short")
            )

        assert "description" in exc_info.value.details
        assert not paths.series_file("solstice-chronicles").exists()

    @pytest.mark.asyncio
    async def test_season_number_must_be_positive(
        self, catalog_repository, series_meta, make_episode
    ) -> None:
        with pytest.raises(ValidationError):
            await catalog_repository.upsert_series_episode(
                "Solstice Chronicles", None, series_meta, 0, make_episode(1)
            )


class TestListing:
    """Tests des listages tolerants."""

    @pytest.mark.asyncio
    async def test_missing_directories_are_empty(self, catalog_repository) -> None:
        assert await catalog_repository.list_movies() == []
        assert await catalog_repository.list_series() == []
        assert await catalog_repository.list_categories() == []

    @pytest.mark.asyncio
    async def test_corrupt_documents_are_skipped_and_counted(
        self, catalog_repository, paths, series_meta, make_episode
    ) -> None:
        await catalog_repository.upsert_series_episode(
            "Solstice Chronicles", None, series_meta, 1, make_episode(1)
        )
        (paths.series_dir / "broken.json").write_text("{", encoding="utf-8")
        (paths.series_dir / "partial.json").write_text(
            json.dumps({"title": "No slug"}), encoding="utf-8"
        )

        series = await catalog_repository.list_series()

        assert [s.slug for s in series] == ["solstice-chronicles"]
        assert catalog_repository.skipped_documents == 2

    @pytest.mark.asyncio
    async def test_non_utf8_document_is_skipped(
        self, catalog_repository, paths, series_meta, make_episode
    ) -> None:
        await catalog_repository.upsert_series_episode(
            "Solstice Chronicles", None, series_meta, 1, make_episode(1)
        )
        (paths.series_dir / "binary.json").write_bytes(b"\xff\xfe\x00garbage")

        series = await catalog_repository.list_series()

        assert [s.slug for s in series] == ["solstice-chronicles"]
        assert catalog_repository.skipped_documents == 1

    @pytest.mark.asyncio
    async def test_categories_document_must_be_a_list(self, catalog_repository, paths) -> None:
        paths.catalog_dir.mkdir(parents=True)
        paths.categories_file.write_text('{"categories": []}', encoding="utf-8")

        with pytest.raises(DecodeError):
            await catalog_repository.list_categories()

    @pytest.mark.asyncio
    async def test_get_invalid_document_returns_none(self, catalog_repository, paths) -> None:
        paths.movies_dir.mkdir(parents=True)
        paths.movie_file("ghost").write_text(json.dumps({"id": "ghost"}), encoding="utf-8")

        assert await catalog_repository.get_movie("ghost") is None

    @pytest.mark.asyncio
    async def test_get_unreadable_document_raises(self, catalog_repository, paths) -> None:
        paths.movies_dir.mkdir(parents=True)
        paths.movie_file("ghost").write_text("not json", encoding="utf-8")

        with pytest.raises(DecodeError):
            await catalog_repository.get_movie("ghost")


class TestSeriesCrud:
    """Tests de creation et mise a jour des series."""

    def test_slug_for_series(self) -> None:
        assert slug_for_series("Solstice Chronicles: Part II") == "solstice-chronicles-part-ii"

    @pytest.mark.asyncio
    async def test_create_twice_conflicts(self, catalog_repository, series_meta) -> None:
        await catalog_repository.create_series(series_meta)

        with pytest.raises(ConflictError):
            await catalog_repository.create_series(series_meta)

    @pytest.mark.asyncio
    async def test_update_unknown_series(self, catalog_repository, series_meta) -> None:
        with pytest.raises(NotFoundError):
            await catalog_repository.update_series("solstice-chronicles", series_meta)

    @pytest.mark.asyncio
    async def test_update_keeps_flags_not_provided(self, catalog_repository, series_meta) -> None:
        """featured, published et tags absents de la mise a jour sont conserves."""
        created = await catalog_repository.create_series(
            {**series_meta, "featured": True, "published": True, "tags": ["summer"]}
        )

        updated = await catalog_repository.update_series(
            created.slug, {**series_meta, "title": "Solstice Chronicles Redux"}
        )

        assert updated.title == "Solstice Chronicles Redux"
        assert updated.featured is True
        assert updated.published is True
        assert updated.tags == ["summer"]
        assert updated.created_at == created.created_at

    @pytest.mark.asyncio
    async def test_update_applies_explicit_flags(self, catalog_repository, series_meta) -> None:
        created = await catalog_repository.create_series({**series_meta, "featured": True})

        updated = await catalog_repository.update_series(
            created.slug, {**series_meta, "featured": False}
        )

        assert updated.featured is False

    @pytest.mark.asyncio
    async def test_save_series_resorts(
        self, catalog_repository, series_meta, make_episode
    ) -> None:
        series = await catalog_repository.upsert_series_episode(
            "Solstice Chronicles", None, series_meta, 1, make_episode(1)
        )
        season = series.seasons[0]
        shuffled = series.model_copy(
            update={
                "seasons": [
                    season.model_copy(update={"season_number": 3}),
                    season.model_copy(update={"season_number": 2}),
                ]
            }
        )

        saved = await catalog_repository.save_series(shuffled)

        assert [s.season_number for s in saved.seasons] == [2, 3]
        assert (await catalog_repository.get_series(series.slug)) == saved


class TestCategories:
    """Tests des categories."""

    @pytest.mark.asyncio
    async def test_replace_categories_sorted_with_slugs(self, catalog_repository) -> None:
        categories = await catalog_repository.replace_categories(
            [
                {"name": "Science Fiction", "order": 2},
                {"name": "Drames", "order": 1, "heroId": "iron-legacy"},
            ]
        )

        assert [c.slug for c in categories] == ["drames", "science-fiction"]
        assert categories[0].hero_id == "iron-legacy"
        assert await catalog_repository.list_categories() == categories

    @pytest.mark.asyncio
    async def test_replace_keeps_created_at_for_known_ids(self, catalog_repository) -> None:
        [first] = await catalog_repository.replace_categories([{"name": "Drames", "order": 0}])

        [second] = await catalog_repository.replace_categories(
            [{"id": first.id, "name": "Drames intenses", "order": 0}]
        )

        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.name == "Drames intenses"

    @pytest.mark.asyncio
    async def test_save_categories_orders_by_order(self, catalog_repository) -> None:
        stamp = "2026-01-01T00:00:00.000Z"
        saved = await catalog_repository.save_categories(
            [
                {"id": "b", "name": "Bb", "slug": "bb", "order": 5, "createdAt": stamp, "updatedAt": stamp},
                {"id": "a", "name": "Aa", "slug": "aa", "order": 1, "createdAt": stamp, "updatedAt": stamp},
            ]
        )

        assert [c.id for c in saved] == ["a", "b"]
