"""Trending movies from TMDB with sorting, genre filters and detail views."""

__version__ = "0.1.0"
