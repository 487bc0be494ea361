import asyncio

import pytest

from movietrends.models.media import SortDirection, SortField
from movietrends.services.tmdb import TMDBError
from movietrends.viewmodels.movie_list import MovieListViewModel
from movietrends.viewmodels.ui_state import (
    MovieListError,
    MovieListLoading,
    MovieListSuccess,
)


def _is_success(state):
    return isinstance(state, MovieListSuccess)


def _titles(state):
    return [m.title for m in state.movies]


async def _settled(view_model, predicate=_is_success):
    return await view_model.state.wait_for(predicate, timeout=1)


@pytest.mark.asyncio
async def test_initial_state_is_loading_until_subscribed(fake_repository, make_movie):
    repository = fake_repository([make_movie(1)])
    view_model = MovieListViewModel(repository)

    assert isinstance(view_model.state.value, MovieListLoading)
    assert repository.trending_calls == 0

    await _settled(view_model)
    assert repository.trending_calls == 1


@pytest.mark.asyncio
async def test_exactly_one_fetch_on_startup(fake_repository, make_movie):
    repository = fake_repository([make_movie(1)])
    view_model = MovieListViewModel(repository)

    view_model.start()
    view_model.start()
    await _settled(view_model)
    await _settled(view_model)

    assert repository.trending_calls == 1


@pytest.mark.asyncio
async def test_default_sort_and_change_to_title_ascending(fake_repository, make_movie):
    repository = fake_repository(
        [
            make_movie(1, "Movie B", popularity=10.0),
            make_movie(2, "Movie A", popularity=20.0),
        ]
    )
    view_model = MovieListViewModel(repository)

    state = await _settled(view_model)
    assert _titles(state) == ["Movie A", "Movie B"]
    assert state.sort_field == SortField.POPULARITY
    assert state.sort_direction == SortDirection.DESCENDING

    view_model.set_sort_field(SortField.TITLE)
    view_model.set_sort_direction(SortDirection.ASCENDING)
    state = view_model.state.value
    assert _titles(state) == ["Movie A", "Movie B"]
    assert state.sort_field == SortField.TITLE
    assert state.sort_direction == SortDirection.ASCENDING

    view_model.set_sort_direction(SortDirection.DESCENDING)
    assert _titles(view_model.state.value) == ["Movie B", "Movie A"]


@pytest.mark.asyncio
async def test_toggle_genre_and_clear_filters(fake_repository, make_movie, action, comedy):
    repository = fake_repository(
        [
            make_movie(1, "Action Movie", genres=(action,)),
            make_movie(2, "Comedy Movie", genres=(comedy,)),
        ]
    )
    view_model = MovieListViewModel(repository)
    await _settled(view_model)

    view_model.toggle_genre(1)
    state = view_model.state.value
    assert _is_success(state)
    assert _titles(state) == ["Action Movie"]
    assert state.selected_genres == {1}
    # Available genres still cover the unfiltered list
    assert [g.id for g in state.available_genres] == [1, 2]

    view_model.clear_filters()
    state = view_model.state.value
    assert len(state.movies) == 2
    assert state.selected_genres == frozenset()


@pytest.mark.asyncio
async def test_toggle_genre_twice_removes_it(fake_repository, make_movie, action):
    repository = fake_repository([make_movie(1, genres=(action,)), make_movie(2)])
    view_model = MovieListViewModel(repository)
    await _settled(view_model)

    view_model.toggle_genre(1)
    view_model.toggle_genre(1)

    state = view_model.state.value
    assert state.selected_genres == frozenset()
    assert len(state.movies) == 2


@pytest.mark.asyncio
async def test_available_genres_are_first_seen_unique(fake_repository, make_movie, action, comedy):
    repository = fake_repository(
        [
            make_movie(1, genres=(comedy,)),
            make_movie(2, genres=(action, comedy)),
        ]
    )
    view_model = MovieListViewModel(repository)

    state = await _settled(view_model)

    assert [g.name for g in state.available_genres] == ["Comedy", "Action"]


@pytest.mark.asyncio
async def test_fetch_failure_shows_error_regardless_of_preferences(fake_repository):
    repository = fake_repository(error=TMDBError("HTTP 500 for trending/movie/week"))
    view_model = MovieListViewModel(repository)

    state = await _settled(view_model, lambda s: isinstance(s, MovieListError))
    assert state.message == "HTTP 500 for trending/movie/week"

    view_model.set_sort_field(SortField.TITLE)
    view_model.toggle_genre(3)
    assert isinstance(view_model.state.value, MovieListError)


@pytest.mark.asyncio
async def test_error_without_message_falls_back_to_unknown_error(fake_repository):
    repository = fake_repository(error=RuntimeError())
    view_model = MovieListViewModel(repository)

    state = await _settled(view_model, lambda s: isinstance(s, MovieListError))
    assert state.message == "Unknown error"


@pytest.mark.asyncio
async def test_refresh_shows_refreshing_then_new_data(fake_repository, make_movie):
    repository = fake_repository([make_movie(1, "Old")])
    view_model = MovieListViewModel(repository)
    await _settled(view_model)

    repository.gate = asyncio.Event()
    repository.movies = [make_movie(2, "New")]
    view_model.refresh()

    state = view_model.state.value
    assert _is_success(state)
    assert state.is_refreshing is True
    assert _titles(state) == ["Old"]

    repository.gate.set()
    state = await _settled(view_model, lambda s: _is_success(s) and not s.is_refreshing)
    assert _titles(state) == ["New"]
    assert repository.trending_calls == 2


@pytest.mark.asyncio
async def test_refresh_failure_never_reports_refreshing_with_error(fake_repository, make_movie):
    repository = fake_repository([make_movie(1)])
    view_model = MovieListViewModel(repository)
    await _settled(view_model)

    seen = []

    async def collect():
        async for state in view_model.state.subscribe():
            seen.append(state)
            if isinstance(state, MovieListError):
                return

    collector = asyncio.create_task(collect())
    await asyncio.sleep(0)

    repository.error = TMDBError("network down")
    view_model.refresh()
    await asyncio.wait_for(collector, timeout=1)

    assert isinstance(seen[-1], MovieListError)
    assert view_model._is_refreshing is False


@pytest.mark.asyncio
async def test_refresh_from_error_shows_loading_then_success(fake_repository, make_movie):
    repository = fake_repository(error=TMDBError("boom"))
    view_model = MovieListViewModel(repository)
    await _settled(view_model, lambda s: isinstance(s, MovieListError))

    repository.error = None
    repository.movies = [make_movie(1, "Recovered")]
    repository.gate = asyncio.Event()
    view_model.refresh()
    assert isinstance(view_model.state.value, MovieListLoading)

    repository.gate.set()
    state = await _settled(view_model)
    assert _titles(state) == ["Recovered"]
    assert state.is_refreshing is False


@pytest.mark.asyncio
async def test_newer_refresh_supersedes_in_flight_fetch(fake_repository, make_movie):
    repository = fake_repository([make_movie(1, "First")])
    view_model = MovieListViewModel(repository)
    await _settled(view_model)

    repository.gate = asyncio.Event()
    repository.movies = [make_movie(2, "Stale")]
    view_model.refresh()
    first_task = view_model._task
    await asyncio.sleep(0)

    repository.movies = [make_movie(3, "Latest")]
    view_model.refresh()
    repository.gate.set()

    state = await _settled(view_model, lambda s: _is_success(s) and not s.is_refreshing)
    assert _titles(state) == ["Latest"]
    assert first_task.cancelled()


@pytest.mark.asyncio
async def test_refresh_if_stale_is_noop_when_not_stale(fake_repository, make_movie):
    repository = fake_repository([make_movie(1)])
    view_model = MovieListViewModel(repository)
    before = await _settled(view_model)

    view_model.refresh_if_stale()

    assert view_model.state.value is before
    assert repository.trending_calls == 1


@pytest.mark.asyncio
async def test_refresh_if_stale_requires_success_state(fake_repository):
    repository = fake_repository(error=TMDBError("boom"))
    view_model = MovieListViewModel(repository)
    await _settled(view_model, lambda s: isinstance(s, MovieListError))

    repository.stale = True
    view_model.refresh_if_stale()

    assert isinstance(view_model.state.value, MovieListError)
    assert repository.trending_calls == 1


@pytest.mark.asyncio
async def test_refresh_if_stale_refreshes_stale_success(fake_repository, make_movie):
    repository = fake_repository([make_movie(1)])
    view_model = MovieListViewModel(repository)
    await _settled(view_model)

    repository.stale = True
    view_model.refresh_if_stale()
    await _settled(view_model, lambda s: _is_success(s) and not s.is_refreshing)

    assert repository.trending_calls == 2


@pytest.mark.asyncio
async def test_aclose_cancels_in_flight_fetch(fake_repository, make_movie):
    repository = fake_repository([make_movie(1)])
    repository.gate = asyncio.Event()
    view_model = MovieListViewModel(repository)
    view_model.start()
    task = view_model._task

    await view_model.aclose()

    assert task.cancelled()
    assert isinstance(view_model.state.value, MovieListLoading)
