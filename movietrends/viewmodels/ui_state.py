"""UI states for the movie list and movie detail screens.

Each screen's state is a closed union discriminated by ``kind``; consumers
are expected to handle every variant.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from movietrends.models.media import (
    Genre,
    Movie,
    MovieDetails,
    SortDirection,
    SortField,
)

UNKNOWN_ERROR = "Unknown error"


class _UiState(BaseModel):
    model_config = ConfigDict(frozen=True)


class MovieListLoading(_UiState):
    kind: Literal["loading"] = "loading"


class MovieListSuccess(_UiState):
    """The movie list was loaded.

    ``movies`` is already filtered and sorted; ``available_genres`` covers
    the full, unfiltered list.
    """

    kind: Literal["success"] = "success"
    movies: tuple[Movie, ...]
    available_genres: tuple[Genre, ...]
    selected_genres: frozenset[int] = frozenset()
    sort_field: SortField = SortField.POPULARITY
    sort_direction: SortDirection = SortDirection.DESCENDING
    is_refreshing: bool = False


class MovieListError(_UiState):
    kind: Literal["error"] = "error"
    message: str = UNKNOWN_ERROR


MovieListUiState = Annotated[
    Union[MovieListLoading, MovieListSuccess, MovieListError],
    Field(discriminator="kind"),
]


class MovieDetailLoading(_UiState):
    kind: Literal["loading"] = "loading"


class MovieDetailSuccess(_UiState):
    kind: Literal["success"] = "success"
    details: MovieDetails


class MovieDetailError(_UiState):
    kind: Literal["error"] = "error"
    message: str = UNKNOWN_ERROR


MovieDetailUiState = Annotated[
    Union[MovieDetailLoading, MovieDetailSuccess, MovieDetailError],
    Field(discriminator="kind"),
]


def error_message(exc: BaseException) -> str:
    """Human-readable message for a failed fetch."""
    return str(exc) or UNKNOWN_ERROR
