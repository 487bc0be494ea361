"""View model for the trending movie list screen."""

import asyncio
import logging
from typing import Dict, FrozenSet, List, Optional

from movietrends.models.media import Genre, Movie, SortDirection, SortField
from movietrends.services.repository import MovieRepository
from movietrends.services.sorting import filter_movies, sort_movies
from movietrends.viewmodels.state import StateFlow
from movietrends.viewmodels.ui_state import (
    MovieListError,
    MovieListLoading,
    MovieListSuccess,
    MovieListUiState,
    error_message,
)

logger = logging.getLogger(__name__)


def collect_genres(movies: List[Movie]) -> List[Genre]:
    """Unique genres across ``movies`` in first-seen order."""
    genres: Dict[int, Genre] = {}
    for movie in movies:
        for genre in movie.genres:
            genres.setdefault(genre.id, genre)
    return list(genres.values())


class MovieListViewModel:
    """Combines trending movies with the user's sort and filter preferences.

    The first subscription to ``state`` (or ``start()``) triggers exactly one
    fetch. ``refresh()`` re-fetches; a newer fetch always supersedes an older
    one still in flight, and the older result is dropped.
    """

    def __init__(self, repository: MovieRepository):
        self._repository = repository

        self._sort_field = SortField.POPULARITY
        self._sort_direction = SortDirection.DESCENDING
        self._selected_genres: FrozenSet[int] = frozenset()
        self._is_refreshing = False

        # Last fetch result: either movies or an error message, never both.
        self._movies: Optional[List[Movie]] = None
        self._error: Optional[str] = None

        self._generation = 0
        self._task: Optional[asyncio.Task] = None

        self.state: StateFlow[MovieListUiState] = StateFlow(
            MovieListLoading(), on_start=self._launch_fetch
        )

    def start(self) -> None:
        self.state.start()

    # --- Commands ---

    def set_sort_field(self, field: SortField) -> None:
        self._sort_field = field
        self._publish()

    def set_sort_direction(self, direction: SortDirection) -> None:
        self._sort_direction = direction
        self._publish()

    def toggle_genre(self, genre_id: int) -> None:
        self._selected_genres = self._selected_genres ^ {genre_id}
        self._publish()

    def clear_filters(self) -> None:
        self._selected_genres = frozenset()
        self._publish()

    def refresh(self) -> None:
        """Re-fetch the trending movies, keeping current data visible meanwhile."""
        self._is_refreshing = True
        # Retrying from an error shows Loading rather than the stale error
        self._error = None
        self._publish()
        if not self.state.start():
            self._launch_fetch()

    def refresh_if_stale(self) -> None:
        if not self._repository.is_trending_stale():
            return
        if not isinstance(self.state.value, MovieListSuccess):
            return
        logger.info("Trending movies are stale, refreshing")
        self.refresh()

    async def aclose(self) -> None:
        """Cancel any fetch still in flight."""
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    # --- Internals ---

    def _launch_fetch(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(
            self._fetch(self._generation)
        )

    async def _fetch(self, generation: int) -> None:
        try:
            async for movies in self._repository.trending_movies():
                if generation != self._generation:
                    return
                self._movies = movies
                self._error = None
                self._is_refreshing = False
                self._publish()
        except Exception as exc:
            if generation != self._generation:
                return
            logger.warning("Failed to load trending movies: %s", exc)
            self._movies = None
            self._error = error_message(exc)
            self._is_refreshing = False
            self._publish()
            return

        if generation == self._generation and self._is_refreshing:
            self._is_refreshing = False
            self._publish()

    def _compute_state(self) -> MovieListUiState:
        if self._error is not None:
            return MovieListError(message=self._error)
        if self._movies is None:
            return MovieListLoading()

        visible = sort_movies(
            filter_movies(self._movies, self._selected_genres),
            self._sort_field,
            self._sort_direction,
        )
        return MovieListSuccess(
            movies=visible,
            available_genres=collect_genres(self._movies),
            selected_genres=self._selected_genres,
            sort_field=self._sort_field,
            sort_direction=self._sort_direction,
            is_refreshing=self._is_refreshing,
        )

    def _publish(self) -> None:
        self.state.emit(self._compute_state())
