"""
Entités du catalogue : films, séries (saisons et épisodes imbriqués), catégories.

Les entités stockées (Movie, Series, Category) portent leurs horodatages ;
les entités d'entrée (MovieInput, SeriesInput, CategoryInput) sont ce que
l'appelant fournit avant que le store n'attribue identifiants et dates.

Invariant des séries : saisons triées par numéro croissant, épisodes triés
par numéro croissant dans chaque saison, numéros uniques dans leur portée.
"""

from typing import Annotated, Optional

from pydantic import Field, model_validator

from streamvault.core.entities.base import StoredModel, StreamUrl, Timestamp, Url, Year

Genre = Annotated[str, Field(min_length=2)]


class Subtitle(StoredModel):
    """Piste de sous-titres servie depuis un domaine autorisé."""

    language: str = Field(min_length=2)
    url: StreamUrl


class MovieInput(StoredModel):
    """
    Film tel que soumis à upsert_movie.

    Attributes:
        id: Identifiant (généré si absent)
        views: Compteur initial, ignoré si le film existe déjà
    """

    id: Optional[str] = Field(default=None, min_length=1)
    title: str = Field(min_length=1)
    description: str = Field(min_length=10)
    year: Year
    genres: list[Genre] = Field(min_length=1)
    poster_url: Url
    backdrop_url: Url
    stream_url: StreamUrl
    duration: int = Field(ge=1)
    content_rating: str = Field(min_length=1)
    published: bool = False
    featured: bool = False
    tags: list[str] = Field(default_factory=list)
    subtitles: list[Subtitle] = Field(default_factory=list)
    categories: list[Annotated[str, Field(min_length=1)]] = Field(default_factory=list)
    views: Optional[int] = Field(default=None, ge=0)


class Movie(MovieInput):
    """Film stocké dans catalog/movies/<id>.json."""

    id: str = Field(min_length=1)
    created_at: Timestamp
    updated_at: Timestamp
    views: int = Field(default=0, ge=0)


class Episode(StoredModel):
    """Épisode d'une saison, unique par episode_number dans sa saison."""

    episode_number: int = Field(ge=1)
    title: str = Field(min_length=1)
    description: str = Field(min_length=10)
    duration: int = Field(ge=1)
    stream_url: StreamUrl
    subtitles: list[Subtitle] = Field(default_factory=list)
    thumbnail_url: Url
    released_at: Timestamp
    published: bool = True


class Season(StoredModel):
    """Saison d'une série, unique par season_number dans la série."""

    season_number: int = Field(ge=1)
    title: str = Field(min_length=1)
    synopsis: str = Field(min_length=10)
    episodes: list[Episode] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_episode_numbers(self) -> "Season":
        numbers = [episode.episode_number for episode in self.episodes]
        if len(numbers) != len(set(numbers)):
            raise ValueError(f"Duplicate episode numbers in season {self.season_number}")
        return self


class SeriesInput(StoredModel):
    """
    Série telle que soumise par l'appelant.

    Sert aussi de métadonnées pour upsert_series_episode : titre, description
    et visuels de la série, saisons connues pour amorcer titre et synopsis
    d'une nouvelle saison.
    """

    slug: Optional[str] = Field(default=None, min_length=1)
    title: str = Field(min_length=1)
    description: str = Field(min_length=10)
    year: Year
    genres: list[Genre] = Field(min_length=1)
    poster_url: Url
    backdrop_url: Url
    featured: bool = False
    published: bool = False
    seasons: list[Season] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class Series(SeriesInput):
    """Série stockée dans catalog/series/<slug>.json."""

    slug: str = Field(min_length=1)
    created_at: Timestamp
    updated_at: Timestamp

    @model_validator(mode="after")
    def _unique_season_numbers(self) -> "Series":
        numbers = [season.season_number for season in self.seasons]
        if len(numbers) != len(set(numbers)):
            raise ValueError("Duplicate season numbers")
        return self

    def find_season(self, season_number: int) -> Optional[Season]:
        """Retourne la saison portant ce numéro, ou None."""
        return next(
            (season for season in self.seasons if season.season_number == season_number),
            None,
        )


class CategoryInput(StoredModel):
    """Catégorie soumise par l'appelant (id et slug optionnels)."""

    id: Optional[str] = None
    name: str = Field(min_length=2)
    slug: Optional[str] = Field(default=None, min_length=1)
    order: int = Field(ge=0)
    hero_id: Optional[str] = None


class Category(StoredModel):
    """Catégorie stockée dans la liste ordonnée catalog/categories.json."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=2)
    slug: str = Field(min_length=1)
    order: int = Field(ge=0)
    hero_id: Optional[str] = None
    created_at: Timestamp
    updated_at: Timestamp


def sort_episodes(episodes: list[Episode]) -> list[Episode]:
    """Épisodes triés par numéro croissant."""
    return sorted(episodes, key=lambda episode: episode.episode_number)


def sort_seasons(seasons: list[Season]) -> list[Season]:
    """Saisons triées par numéro croissant, épisodes triés dans chacune."""
    return [
        season.model_copy(update={"episodes": sort_episodes(season.episodes)})
        for season in sorted(seasons, key=lambda season: season.season_number)
    ]
