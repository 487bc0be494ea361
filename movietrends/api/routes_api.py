"""JSON routes exposing the movie list and movie detail view models."""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from movietrends.core.config import Settings
from movietrends.models.media import MovieId, SortDirection, SortField
from movietrends.services.repository import MovieRepository
from movietrends.viewmodels.movie_detail import MovieDetailViewModel
from movietrends.viewmodels.movie_list import MovieListViewModel
from movietrends.viewmodels.ui_state import (
    MovieDetailLoading,
    MovieListLoading,
    MovieListSuccess,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _list_settled(state) -> bool:
    if isinstance(state, MovieListLoading):
        return False
    return not (isinstance(state, MovieListSuccess) and state.is_refreshing)


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _list_view_model(request: Request) -> MovieListViewModel:
    return request.app.state.movie_list


def _repository(request: Request) -> MovieRepository:
    return request.app.state.repository


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "movietrends"}


# --- Movie list ---


class SortRequest(BaseModel):
    """Request body for changing the list ordering."""

    field: SortField | None = None
    direction: SortDirection | None = None


@router.get("/movies")
async def get_movies(request: Request):
    """Current list state; waits for any in-flight load to settle."""
    view_model = _list_view_model(request)
    timeout = _settings(request).state_wait_timeout
    try:
        return await view_model.state.wait_for(_list_settled, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Movie list still loading after %ss", timeout)
        return view_model.state.value


@router.post("/movies/sort")
async def sort_movies(request: Request, body: SortRequest):
    view_model = _list_view_model(request)
    if body.field is not None:
        view_model.set_sort_field(body.field)
    if body.direction is not None:
        view_model.set_sort_direction(body.direction)
    return view_model.state.value


@router.post("/movies/genres/{genre_id}/toggle")
async def toggle_genre(request: Request, genre_id: int):
    view_model = _list_view_model(request)
    view_model.toggle_genre(genre_id)
    return view_model.state.value


@router.post("/movies/filters/clear")
async def clear_filters(request: Request):
    view_model = _list_view_model(request)
    view_model.clear_filters()
    return view_model.state.value


@router.post("/movies/refresh")
async def refresh_movies(
    request: Request,
    force: bool = Query(True, description="Refresh even if data is not stale"),
):
    view_model = _list_view_model(request)
    if force:
        view_model.refresh()
    else:
        view_model.refresh_if_stale()
    return view_model.state.value


# --- Movie detail ---


@router.get("/movies/{movie_id}")
async def get_movie_details(request: Request, movie_id: str):
    """Load one movie, e.g. ``/api/movies/tmdb:550``."""
    timeout = _settings(request).state_wait_timeout
    view_model = MovieDetailViewModel(MovieId(movie_id), _repository(request))
    try:
        return await view_model.state.wait_for(
            lambda s: not isinstance(s, MovieDetailLoading), timeout=timeout
        )
    except asyncio.TimeoutError:
        raise HTTPException(
            status_code=504, detail=f"Timed out loading details for {movie_id}"
        )
    finally:
        await view_model.aclose()
