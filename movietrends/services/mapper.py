"""Mapping of TMDB transport records to domain models."""

from datetime import timedelta
from typing import Mapping

from movietrends.models.media import Genre, Movie, MovieDetails, MovieId
from movietrends.models.tmdb import TMDBMovie, TMDBMovieDetails

UNKNOWN_GENRE_NAME = "Unknown"


def movie_from_tmdb(
    record: TMDBMovie, image_base_url: str, genre_names: Mapping[int, str]
) -> Movie:
    """Build a Movie from a trending entry, resolving genre ids by name."""
    return Movie(
        id=MovieId.tmdb(record.id),
        title=record.title,
        overview=record.overview,
        poster_url=f"{image_base_url}{record.poster_path}",
        genres=[
            Genre(id=genre_id, name=genre_names.get(genre_id, UNKNOWN_GENRE_NAME))
            for genre_id in record.genre_ids
        ],
        release_date=record.release_date,
        popularity=record.popularity,
    )


def details_from_tmdb(
    record: TMDBMovieDetails, image_base_url: str, imdb_base_url: str
) -> MovieDetails:
    """Build MovieDetails from a ``movie/{id}`` response."""
    movie = Movie(
        id=MovieId.tmdb(record.id),
        title=record.title,
        overview=record.overview,
        poster_url=f"{image_base_url}{record.poster_path}"
        if record.poster_path is not None
        else "",
        genres=[Genre(id=g.id, name=g.name) for g in record.genres],
        release_date=record.release_date,
        popularity=record.popularity,
    )
    return MovieDetails(
        movie=movie,
        tagline=record.tagline,
        backdrop_url=f"{image_base_url}{record.backdrop_path}"
        if record.backdrop_path is not None
        else None,
        vote_average=record.vote_average,
        vote_count=record.vote_count,
        budget=record.budget,
        revenue=record.revenue,
        status=record.status,
        imdb_url=f"{imdb_base_url}{record.imdb_id}"
        if record.imdb_id is not None
        else None,
        runtime=timedelta(minutes=record.runtime)
        if record.runtime is not None
        else None,
    )
