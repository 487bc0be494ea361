"""Movie repository: the data-access layer used by the view models."""

import asyncio
import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import AsyncIterator, Awaitable, Callable, Dict, Iterable, List, Mapping

from movietrends.core.config import Settings
from movietrends.models.media import Movie, MovieDetails, MovieId
from movietrends.models.tmdb import TMDBGenre
from movietrends.services.mapper import details_from_tmdb, movie_from_tmdb
from movietrends.services.tmdb import TMDBClient

logger = logging.getLogger(__name__)

# Top 100 trending movies: 5 pages of 20. Not derived from total_pages.
TRENDING_PAGE_COUNT = 5
PAGE_SIZE = 20
MAX_TMDB_ID = 2**31 - 1


class InvalidMovieIdError(ValueError):
    """The raw part of a MovieId is not usable by the provider."""

    def __init__(self, movie_id: MovieId):
        super().__init__(f"Invalid TMDB ID: {movie_id}")
        self.movie_id = movie_id


def _parse_tmdb_id(movie_id: MovieId) -> int:
    """Plain ASCII digits within the signed 32-bit range TMDB uses for ids."""
    raw = movie_id.raw_id
    if not raw.isascii() or not raw.isdigit():
        raise InvalidMovieIdError(movie_id)
    tmdb_id = int(raw)
    if tmdb_id > MAX_TMDB_ID:
        raise InvalidMovieIdError(movie_id)
    return tmdb_id


class GenreCache:
    """Process-lifetime genre id -> name map with single-flight population.

    The map is filled at most once per successful load. All access goes
    through one lock, so concurrent callers either see the complete map or
    wait until the loading caller has finished; never a partial map. A failed
    load leaves the cache empty.
    """

    def __init__(self):
        self._names: Dict[int, str] = {}
        self._lock = asyncio.Lock()

    @property
    def is_populated(self) -> bool:
        return bool(self._names)

    async def get_or_load(
        self, loader: Callable[[], Awaitable[Iterable[TMDBGenre]]]
    ) -> Mapping[int, str]:
        async with self._lock:
            if not self._names:
                genres = await loader()
                self._names.update({genre.id: genre.name for genre in genres})
                logger.info("Cached %d genres", len(self._names))
            return MappingProxyType(dict(self._names))

    async def clear(self) -> None:
        """Drop cached names; waits for an in-flight load to finish first."""
        async with self._lock:
            self._names.clear()


class MovieRepository(ABC):
    """Unified data interface for movie information."""

    @abstractmethod
    def trending_movies(self) -> AsyncIterator[List[Movie]]:
        """Stream the trending movies. Each iteration performs a fresh fetch."""

    @abstractmethod
    def movie_details(self, movie_id: MovieId) -> AsyncIterator[MovieDetails]:
        """Stream the details of a single movie."""

    def is_trending_stale(self) -> bool:
        """Whether the trending data is old enough to warrant a refresh."""
        return False


class TMDBMovieRepository(MovieRepository):
    """MovieRepository backed by the TMDB API."""

    def __init__(
        self,
        client: TMDBClient,
        settings: Settings,
        genre_cache: GenreCache | None = None,
    ):
        self._client = client
        self._image_base_url = settings.tmdb_image_base_url
        self._imdb_base_url = settings.imdb_base_url
        self._genre_cache = genre_cache if genre_cache is not None else GenreCache()

    async def _genres(self) -> Mapping[int, str]:
        return await self._genre_cache.get_or_load(self._client.get_genres)

    async def _fetch_pages(self) -> list:
        """Fetch all trending pages concurrently; results are in page order.

        One failing page cancels the others and its exception is re-raised.
        """
        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [
                    tg.create_task(self._client.get_trending_movies(page))
                    for page in range(1, TRENDING_PAGE_COUNT + 1)
                ]
        except ExceptionGroup as group:
            logger.error("Trending fetch failed: %s", group.exceptions[0])
            raise group.exceptions[0]
        return [task.result() for task in tasks]

    async def trending_movies(self) -> AsyncIterator[List[Movie]]:
        genres = await self._genres()
        pages = await self._fetch_pages()

        movies: Dict[MovieId, Movie] = {}
        for page in pages:
            for record in page.results:
                movie = movie_from_tmdb(record, self._image_base_url, genres)
                movies.setdefault(movie.id, movie)

        logger.debug("Fetched %d unique trending movies", len(movies))
        yield list(movies.values())

    async def movie_details(self, movie_id: MovieId) -> AsyncIterator[MovieDetails]:
        tmdb_id = _parse_tmdb_id(movie_id)

        record = await self._client.get_movie_details(tmdb_id)
        yield details_from_tmdb(record, self._image_base_url, self._imdb_base_url)
