"""
Tests for the collection service, the filter derivation, debounce, and catalog state.
"""

import json

import pytest

from catalog import CatalogState, Debouncer, FilteredView, add_movie_with_id, filter_movies, star_breakdown, star_text
from data_store import STORAGE_KEY, MemoryStore, MovieRepository
from models import create_movie, seed_movies

NEW_MOVIE = {"title": "A", "description": "B", "posterURL": "http://x", "rating": 4}


class FakeScheduler:
    def __init__(self):
        self.jobs = {}
        self.cancelled = []
        self._next = 0

    def after(self, delay_ms, callback):
        self._next += 1
        job = f"after#{self._next}"
        self.jobs[job] = (delay_ms, callback)
        return job

    def after_cancel(self, job):
        self.cancelled.append(job)
        self.jobs.pop(job, None)

    def fire_all(self):
        jobs, self.jobs = self.jobs, {}
        for _, callback in jobs.values():
            callback()


def two_movies():
    return [
        create_movie({"id": 1, "title": "Inception", "description": "d", "posterURL": "https://x", "rating": 4.5}),
        create_movie({"id": 2, "title": "Interstellar", "description": "d", "posterURL": "https://x", "rating": 5}),
    ]


def test_add_valid_movie_to_empty_list():
    result = add_movie_with_id([], NEW_MOVIE)
    assert len(result) == 1
    assert result[0].id == 1
    assert result[0].rating == 4


def test_add_appends_with_next_id_without_mutating():
    movies = seed_movies()
    result = add_movie_with_id(movies, {**NEW_MOVIE, "id": 99, "title": "  Trimmed  "})
    assert result is not movies
    assert len(movies) == 6
    assert result[:6] == movies
    assert result[-1].id == 7
    assert result[-1].title == "Trimmed"


def test_add_invalid_movie_is_a_no_op():
    movies = seed_movies()
    result = add_movie_with_id(movies, {**NEW_MOVIE, "posterURL": "ftp://x"})
    assert result is movies
    assert len(result) == 6


def test_filter_by_title_and_rating():
    result = filter_movies(two_movies(), "in", 4.6)
    assert [m.title for m in result] == ["Interstellar"]


def test_filter_is_case_insensitive_and_stable():
    movies = two_movies()
    assert [m.title for m in filter_movies(movies, "  INTER ")] == ["Interstellar"]
    assert filter_movies(movies, "", 0) == movies
    assert filter_movies(movies, "zzz") == []


def test_filter_rating_threshold_is_inclusive():
    assert [m.id for m in filter_movies(two_movies(), min_rating=4.5)] == [1, 2]


def test_filtered_view_reuses_result_until_inputs_change():
    view = FilteredView()
    movies = two_movies()
    first = view.compute(movies, "in", 0)
    assert view.compute(movies, "in", 0) is first
    assert view.compute(movies, "in", 5) is not first
    assert view.compute([*movies], "in", 5) is not first


def test_debouncer_only_fires_last_value():
    scheduler = FakeScheduler()
    seen = []
    debouncer = Debouncer(scheduler.after, scheduler.after_cancel, delay_ms=250)
    debouncer.call(seen.append, "i")
    debouncer.call(seen.append, "in")
    assert debouncer.pending
    assert scheduler.cancelled == ["after#1"]
    assert [delay for delay, _ in scheduler.jobs.values()] == [250]
    scheduler.fire_all()
    assert seen == ["in"]
    assert not debouncer.pending


def test_debouncer_cancel_drops_pending_call():
    scheduler = FakeScheduler()
    seen = []
    debouncer = Debouncer(scheduler.after, scheduler.after_cancel)
    debouncer.call(seen.append, "x")
    debouncer.cancel()
    scheduler.fire_all()
    assert seen == []
    debouncer.cancel()
    assert scheduler.cancelled == ["after#1"]


@pytest.mark.parametrize("value, expected", [(0, (0, 0, 5)), (4.5, (4, 1, 0)), (3.2, (3, 0, 2)), (5, (5, 0, 0))])
def test_star_breakdown(value, expected):
    assert star_breakdown(value) == expected


def test_star_text():
    assert star_text(3.5) == "★★★½☆"


def test_state_loads_seeds_and_persists_them():
    store = MemoryStore()
    state = CatalogState(MovieRepository(store))
    assert state.movies == seed_movies()
    assert len(json.loads(store.items[STORAGE_KEY])) == 6


def test_state_filters_and_notifies():
    state = CatalogState(MovieRepository(MemoryStore()))
    calls = []
    state.subscribe(lambda: calls.append(len(state.filtered_movies)))
    state.set_title_filter("the")
    state.set_title_filter("the")
    state.set_min_rating(4.6)
    assert [m.title for m in state.filtered_movies] == ["The Dark Knight"]
    assert calls == [2, 1]
    state.reset_filters()
    assert len(state.filtered_movies) == 6


def test_state_min_rating_is_clamped():
    state = CatalogState(MovieRepository(MemoryStore()))
    state.set_min_rating(9)
    assert state.min_rating == 5.0
    state.set_min_rating("junk")
    assert state.min_rating == 0.0


def test_submit_valid_movie_persists():
    store = MemoryStore()
    state = CatalogState(MovieRepository(store))
    result = state.submit_movie(NEW_MOVIE)
    assert result.valid
    assert state.movies[-1].id == 7
    assert MovieRepository(store).load_movies() == state.movies


def test_submit_invalid_movie_reports_errors_and_keeps_collection():
    store = MemoryStore()
    state = CatalogState(MovieRepository(store))
    before = state.movies
    result = state.submit_movie({**NEW_MOVIE, "title": ""})
    assert result.errors == {"title": "Title is required"}
    assert state.movies is before
    assert len(json.loads(store.items[STORAGE_KEY])) == 6


def test_selection_holds_at_most_one_record():
    state = CatalogState(MovieRepository(MemoryStore()))
    first, second = state.movies[0], state.movies[1]
    state.select(first)
    state.select(second)
    assert state.selected is second
    state.clear_selection()
    assert state.selected is None
