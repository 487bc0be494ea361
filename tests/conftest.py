import asyncio
from datetime import date
from typing import List, Optional

import pytest

from movietrends.core.config import Settings
from movietrends.models.media import Genre, Movie, MovieDetails, MovieId
from movietrends.services.repository import MovieRepository


def _make_movie(
    tmdb_id: int,
    title: str = "",
    popularity: float = 0.0,
    release_date: Optional[date] = None,
    genres: tuple = (),
) -> Movie:
    return Movie(
        id=MovieId.tmdb(tmdb_id),
        title=title or f"Movie {tmdb_id}",
        overview="",
        poster_url="",
        genres=genres,
        release_date=release_date,
        popularity=popularity,
    )


class FakeMovieRepository(MovieRepository):
    """In-memory repository with optional gates to hold fetches open."""

    def __init__(
        self,
        movies: Optional[List[Movie]] = None,
        error: Optional[Exception] = None,
        details: Optional[MovieDetails] = None,
    ):
        self.movies = movies if movies is not None else []
        self.error = error
        self.details = details
        self.stale = False
        self.trending_calls = 0
        self.details_calls = 0
        self.gate: Optional[asyncio.Event] = None

    async def trending_movies(self):
        self.trending_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        yield list(self.movies)

    async def movie_details(self, movie_id: MovieId):
        self.details_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        yield self.details

    def is_trending_stale(self) -> bool:
        return self.stale


@pytest.fixture
def make_movie():
    return _make_movie


@pytest.fixture
def settings():
    return Settings(
        tmdb_bearer_token="test-token",
        tmdb_api_base_url="https://api.example.org/3/",
        tmdb_image_base_url="https://img.example.org/w500",
        imdb_base_url="https://www.imdb.com/title/",
        state_wait_timeout=5,
    )


@pytest.fixture
def action():
    return Genre(id=1, name="Action")


@pytest.fixture
def comedy():
    return Genre(id=2, name="Comedy")


@pytest.fixture
def fake_repository():
    return FakeMovieRepository
