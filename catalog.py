from __future__ import annotations

import math
from typing import Any, Callable, List, Tuple

from loguru import logger

from data_store import MovieRepository
from models import (
    Movie,
    ValidationResult,
    clamp_rating,
    create_movie,
    get_next_id,
    parse_rating,
    validate_movie,
)


def add_movie_with_id(movies: List[Movie], movie_input: Any) -> List[Movie]:
    if not validate_movie(movie_input).valid:
        return movies
    payload = dict(movie_input.to_dict() if isinstance(movie_input, Movie) else movie_input)
    payload["id"] = get_next_id(movies)
    return [*movies, create_movie(payload)]


def filter_movies(movies: List[Movie], title: str = "", min_rating: float = 0.0) -> List[Movie]:
    needle = title.strip().casefold()
    return [
        m
        for m in movies
        if (not needle or needle in m.title.casefold()) and m.rating >= min_rating
    ]


class FilteredView:
    """Caches the last filter result until the collection or a filter changes."""

    def __init__(self) -> None:
        self._source: List[Movie] | None = None
        self._signature: tuple | None = None
        self._result: List[Movie] = []

    def compute(self, movies: List[Movie], title: str, min_rating: float) -> List[Movie]:
        signature = (title.strip().casefold(), min_rating)
        if movies is not self._source or signature != self._signature:
            self._result = filter_movies(movies, title, min_rating)
            self._source = movies
            self._signature = signature
        return self._result


class Debouncer:
    """Delays a callback until ``delay_ms`` passes without another call.

    ``after`` and ``after_cancel`` follow the Tk widget API, so any Tk widget
    can drive it.
    """

    def __init__(
        self,
        after: Callable[..., Any],
        after_cancel: Callable[[Any], None],
        delay_ms: int = 250,
    ) -> None:
        self._after = after
        self._after_cancel = after_cancel
        self.delay_ms = delay_ms
        self._pending_id: Any = None

    @property
    def pending(self) -> bool:
        return self._pending_id is not None

    def call(self, callback: Callable[..., None], *args: Any) -> None:
        self.cancel()

        def fire() -> None:
            self._pending_id = None
            callback(*args)

        self._pending_id = self._after(self.delay_ms, fire)

    def cancel(self) -> None:
        if self._pending_id is not None:
            self._after_cancel(self._pending_id)
            self._pending_id = None


def star_breakdown(value: float, out_of: int = 5) -> Tuple[int, int, int]:
    full = max(0, min(out_of, int(math.floor(value))))
    half = 1 if full < out_of and value % 1 >= 0.5 else 0
    return full, half, out_of - full - half


def star_text(value: float, out_of: int = 5) -> str:
    full, half, empty = star_breakdown(value, out_of)
    return "★" * full + "½" * half + "☆" * empty


class CatalogState:
    def __init__(self, repo: MovieRepository) -> None:
        self.repo = repo
        self.movies: List[Movie] = repo.load_movies()
        self.title_filter = ""
        self.min_rating = 0.0
        self.selected: Movie | None = None
        self._view = FilteredView()
        self._listeners: List[Callable[[], None]] = []
        self.repo.save_movies(self.movies)

    @property
    def filtered_movies(self) -> List[Movie]:
        return self._view.compute(self.movies, self.title_filter, self.min_rating)

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    def set_title_filter(self, text: str) -> None:
        text = text or ""
        if text == self.title_filter:
            return
        self.title_filter = text
        self._notify()

    def set_min_rating(self, value: Any) -> None:
        rating = parse_rating(value)
        rating = clamp_rating(rating if rating is not None else 0.0)
        if rating == self.min_rating:
            return
        self.min_rating = rating
        self._notify()

    def reset_filters(self) -> None:
        self.title_filter = ""
        self.min_rating = 0.0
        self._notify()

    def submit_movie(self, raw: Any) -> ValidationResult:
        result = validate_movie(raw)
        updated = add_movie_with_id(self.movies, raw)
        if updated is not self.movies:
            self.movies = updated
            self.repo.save_movies(self.movies)
            logger.info(f"[Catalog] Added '{updated[-1].title}' as #{updated[-1].id}")
            self._notify()
        return result

    def select(self, movie: Movie) -> None:
        self.selected = movie
        self._notify()

    def clear_selection(self) -> None:
        if self.selected is None:
            return
        self.selected = None
        self._notify()
