"""TMDB client for the genre, trending and movie detail endpoints."""

import logging
from typing import Any, List, Optional, Type, TypeVar

import niquests
from pydantic import BaseModel, ValidationError

from movietrends.core.config import Settings
from movietrends.models.tmdb import (
    TMDBGenre,
    TMDBGenreResponse,
    TMDBMovie,
    TMDBMovieDetails,
    TMDBPagedResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

PATH_GENRES = "genre/movie/list"
PATH_TRENDING_MOVIES = "trending/movie/week"
PATH_MOVIE_DETAILS = "movie/{movie_id}"


class TMDBError(Exception):
    """Domain exception for TMDB failures."""

    def __init__(
        self,
        message: str,
        original_exception: Exception = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.original_exception = original_exception
        self.status_code = status_code


class TMDBNotFoundError(TMDBError):
    """TMDB answered 404 for the requested resource."""


class TMDBDecodeError(TMDBError):
    """TMDB returned a body that is not JSON or does not match the model."""


class TMDBClient:
    """Thin async wrapper over the TMDB REST API.

    Performs no retries; callers decide what to do on failure.
    """

    def __init__(
        self,
        base_url: str,
        bearer_token: str,
        timeout: int = 30,
        proxy: str | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self.session = niquests.AsyncSession(retries=0)
        self.session.headers.update(
            {
                "Authorization": f"Bearer {bearer_token}",
                "Accept": "application/json",
            }
        )
        if proxy:
            self.session.proxies = {"http": proxy, "https": proxy}

    @classmethod
    def from_settings(cls, settings: Settings) -> "TMDBClient":
        return cls(
            base_url=settings.tmdb_api_base_url,
            bearer_token=settings.tmdb_bearer_token.get_secret_value(),
            timeout=settings.request_timeout,
            proxy=settings.proxy,
        )

    async def aclose(self) -> None:
        """Properly close the internal HTTP session."""
        if self.session:
            await self.session.close()

    async def __aenter__(self) -> "TMDBClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _get(self, path: str, params: dict | None = None) -> Any:
        """GET ``path`` and return the decoded JSON body."""
        url = f"{self._base_url}/{path}"
        try:
            response = await self.session.get(
                url, params=params, timeout=self._timeout
            )
        except niquests.exceptions.RequestException as exc:
            logger.error("Request to %s failed: %s", path, exc)
            raise TMDBError(f"Request to {path} failed: {exc}", exc) from exc

        status = response.status_code
        if status == 404:
            logger.error("TMDB resource not found: %s", path)
            raise TMDBNotFoundError(f"Not found: {path}", status_code=status)
        if status is None or not 200 <= status < 300:
            logger.error("TMDB returned HTTP %s for %s", status, path)
            raise TMDBError(f"HTTP {status} for {path}", status_code=status)

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Malformed JSON from %s: %s", path, exc)
            raise TMDBDecodeError(f"Malformed JSON from {path}", exc) from exc

    @staticmethod
    def _parse(model: Type[ModelT], data: Any, path: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("Unexpected response shape from %s: %s", path, exc)
            raise TMDBDecodeError(f"Unexpected response shape from {path}", exc) from exc

    async def get_genres(self) -> List[TMDBGenre]:
        """Fetch the list of movie genres."""
        data = await self._get(PATH_GENRES)
        return self._parse(TMDBGenreResponse, data, PATH_GENRES).genres

    async def get_trending_movies(self, page: int = 1) -> TMDBPagedResponse[TMDBMovie]:
        """Fetch one page of the movies trending this week."""
        if page < 1:
            raise ValueError(f"Page must be positive, got {page}")
        data = await self._get(PATH_TRENDING_MOVIES, params={"page": page})
        return self._parse(TMDBPagedResponse[TMDBMovie], data, PATH_TRENDING_MOVIES)

    async def get_movie_details(self, movie_id: int) -> TMDBMovieDetails:
        """Fetch detailed information for a single movie."""
        path = PATH_MOVIE_DETAILS.format(movie_id=movie_id)
        data = await self._get(path)
        return self._parse(TMDBMovieDetails, data, path)
