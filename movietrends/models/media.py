"""Provider-agnostic domain models for movies."""

from datetime import date, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel


class MovieProvider(str, Enum):
    """Source a movie identifier originated from."""

    TMDB = "tmdb"
    IMDB = "imdb"
    UNKNOWN = "unknown"


class MovieId(RootModel[str]):
    """A provider-aware movie identifier encoded as ``"<provider>:<raw id>"``.

    Parsing never fails: an unrecognised prefix resolves to
    ``MovieProvider.UNKNOWN`` and, without a colon, the whole string is the
    raw id.
    """

    model_config = ConfigDict(frozen=True)

    @property
    def value(self) -> str:
        return self.root

    @property
    def provider(self) -> MovieProvider:
        for provider in (MovieProvider.TMDB, MovieProvider.IMDB):
            if self.root.startswith(f"{provider.value}:"):
                return provider
        return MovieProvider.UNKNOWN

    @property
    def raw_id(self) -> str:
        _, sep, rest = self.root.partition(":")
        return rest if sep else self.root

    @classmethod
    def tmdb(cls, tmdb_id: int) -> "MovieId":
        return cls(f"{MovieProvider.TMDB.value}:{tmdb_id}")

    @classmethod
    def imdb(cls, imdb_id: str) -> "MovieId":
        return cls(f"{MovieProvider.IMDB.value}:{imdb_id}")

    def __str__(self) -> str:
        return self.root


class Genre(BaseModel):
    """A movie genre, e.g. ``Genre(id=28, name="Action")``."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class Movie(BaseModel):
    """A movie as shown in the trending list."""

    model_config = ConfigDict(frozen=True)

    id: MovieId
    title: str
    overview: str = ""
    poster_url: str = ""
    genres: tuple[Genre, ...] = ()
    release_date: Optional[date] = None
    popularity: float = 0.0

    @property
    def genre_ids(self) -> frozenset[int]:
        return frozenset(genre.id for genre in self.genres)


class MovieDetails(BaseModel):
    """Full information for the movie detail screen.

    Budget and revenue of exactly 0 mean "not available".
    """

    model_config = ConfigDict(frozen=True)

    movie: Movie
    tagline: Optional[str] = None
    backdrop_url: Optional[str] = None
    vote_average: float = 0.0
    vote_count: int = 0
    budget: int = Field(default=0, ge=0)
    revenue: int = Field(default=0, ge=0)
    status: str = ""
    imdb_url: Optional[str] = None
    runtime: Optional[timedelta] = None

    @property
    def budget_display(self) -> str:
        return _format_amount(self.budget)

    @property
    def revenue_display(self) -> str:
        return _format_amount(self.revenue)


def _format_amount(amount: int) -> str:
    if amount == 0:
        return "N/A"
    return f"${amount:,}"


class SortField(str, Enum):
    """Fields a movie list can be sorted by."""

    TITLE = "title"
    RELEASE_DATE = "release_date"
    POPULARITY = "popularity"


class SortDirection(str, Enum):
    """Direction of a sort."""

    ASCENDING = "ascending"
    DESCENDING = "descending"
