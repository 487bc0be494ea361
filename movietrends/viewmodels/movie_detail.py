"""View model for the movie detail screen."""

import asyncio
import logging
from typing import Optional

from movietrends.models.media import MovieId
from movietrends.services.repository import MovieRepository
from movietrends.viewmodels.state import StateFlow
from movietrends.viewmodels.ui_state import (
    MovieDetailError,
    MovieDetailLoading,
    MovieDetailSuccess,
    MovieDetailUiState,
    error_message,
)

logger = logging.getLogger(__name__)


class MovieDetailViewModel:
    """Loads the details of one movie; ``retry()`` starts a fresh load.

    Only the latest load may publish: a retry cancels the previous one and
    any result it still produces is discarded.
    """

    def __init__(self, movie_id: MovieId, repository: MovieRepository):
        self.movie_id = movie_id
        self._repository = repository
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self.state: StateFlow[MovieDetailUiState] = StateFlow(
            MovieDetailLoading(), on_start=self._launch_fetch
        )

    def start(self) -> None:
        self.state.start()

    def retry(self) -> None:
        if self.state.start():
            return
        self.state.emit(MovieDetailLoading())
        self._launch_fetch()

    async def aclose(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _launch_fetch(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(
            self._fetch(self._generation)
        )

    async def _fetch(self, generation: int) -> None:
        try:
            async for details in self._repository.movie_details(self.movie_id):
                if generation != self._generation:
                    return
                self.state.emit(MovieDetailSuccess(details=details))
        except Exception as exc:
            if generation != self._generation:
                return
            logger.warning("Failed to load details for %s: %s", self.movie_id, exc)
            self.state.emit(MovieDetailError(message=error_message(exc)))
