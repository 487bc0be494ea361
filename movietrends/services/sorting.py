"""In-memory sorting and filtering of movie lists."""

from typing import AbstractSet, List, Sequence

from movietrends.models.media import Movie, SortDirection, SortField


def sort_movies(
    movies: Sequence[Movie],
    field: SortField = SortField.POPULARITY,
    direction: SortDirection = SortDirection.DESCENDING,
) -> List[Movie]:
    """Return a new list sorted by ``field``.

    Descending is the ascending result reversed. When sorting by release
    date, movies without one always come last; descending reverses their
    order among themselves as it does for every other tie.
    """
    descending = direction == SortDirection.DESCENDING

    if field == SortField.TITLE:
        ordered = sorted(movies, key=lambda m: m.title.lower())
    elif field == SortField.POPULARITY:
        ordered = sorted(movies, key=lambda m: m.popularity)
    else:
        dated = sorted(
            (m for m in movies if m.release_date is not None),
            key=lambda m: m.release_date,
        )
        undated = [m for m in movies if m.release_date is None]
        if descending:
            dated.reverse()
            undated.reverse()
        return dated + undated

    if descending:
        ordered.reverse()
    return ordered


def filter_movies(movies: Sequence[Movie], genre_ids: AbstractSet[int]) -> List[Movie]:
    """Keep movies that have ALL of ``genre_ids``; an empty set keeps everything."""
    if not genre_ids:
        return list(movies)
    return [movie for movie in movies if movie.genre_ids >= genre_ids]
