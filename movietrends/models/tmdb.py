"""Pydantic models for TMDB API responses."""

from datetime import date
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, field_validator

T = TypeVar("T")


def _blank_date_to_none(v):
    """TMDB sometimes sends ``""`` instead of null for unreleased titles."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


class TMDBGenre(BaseModel):
    """TMDB genre."""

    id: int
    name: str


class TMDBGenreResponse(BaseModel):
    """Response of ``genre/movie/list``."""

    genres: List[TMDBGenre] = []


class TMDBMovie(BaseModel):
    """A movie entry in a trending page."""

    id: int
    title: str
    overview: str = ""
    poster_path: str = ""
    genre_ids: List[int] = []
    release_date: Optional[date] = None
    popularity: float = 0.0

    @field_validator("poster_path", mode="before")
    @classmethod
    def parse_poster_path(cls, v):
        return "" if v is None else v

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_release_date(cls, v):
        return _blank_date_to_none(v)


class TMDBPagedResponse(BaseModel, Generic[T]):
    """A paginated TMDB list."""

    page: int
    results: List[T] = []
    total_pages: int = 0
    total_results: int = 0


class TMDBMovieDetails(BaseModel):
    """Response of ``movie/{id}``."""

    id: int
    title: str
    tagline: Optional[str] = None
    overview: str = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    genres: List[TMDBGenre] = []
    release_date: Optional[date] = None
    popularity: float = 0.0
    vote_average: float = 0.0
    vote_count: int = 0
    budget: int = 0
    revenue: int = 0
    status: str = ""
    imdb_id: Optional[str] = None
    runtime: Optional[int] = None

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_release_date(cls, v):
        return _blank_date_to_none(v)
