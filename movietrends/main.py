import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from movietrends.api.routes_api import router as api_router
from movietrends.core.config import get_settings
from movietrends.core.logging import configure_logging
from movietrends.services.repository import GenreCache, TMDBMovieRepository
from movietrends.services.tmdb import TMDBClient
from movietrends.viewmodels.movie_list import MovieListViewModel

load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Build the client, repository and list view model; close them on exit."""
    settings = get_settings()
    configure_logging(settings)

    client = TMDBClient.from_settings(settings)
    repository = TMDBMovieRepository(client, settings, GenreCache())
    movie_list = MovieListViewModel(repository)

    app.state.settings = settings
    app.state.repository = repository
    app.state.movie_list = movie_list
    try:
        yield
    finally:
        await movie_list.aclose()
        try:
            await client.aclose()
        except Exception as e:
            logger.error(f"Error closing TMDB client: {e}")


app = FastAPI(
    title="movietrends",
    description="Trending movies from TMDB with sorting and genre filters",
    version="0.1.0",
    lifespan=app_lifespan,
)

app.include_router(api_router, prefix="/api")
