from __future__ import annotations

import math
import re
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Iterable, List, Mapping

MIN_RATING = 0.0
MAX_RATING = 5.0

POSTER_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


@dataclass
class Movie:
    id: int | None
    title: str = ""
    description: str = ""
    poster_url: str = ""
    rating: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["posterURL"] = payload.pop("poster_url")
        return payload


@dataclass
class ValidationResult:
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors


def _field(data: Any, name: str) -> Any:
    if isinstance(data, Movie):
        return data.to_dict().get(name)
    if isinstance(data, Mapping):
        return data.get(name)
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_rating(value: Any) -> float | None:
    """Return ``value`` as a finite float, or None when it is not a number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_id(value: Any) -> int:
    """Return a positive integer id, or 0 when ``value`` is not one."""
    number = parse_rating(value)
    if number is None or number < 1:
        return 0
    return int(number)


def clamp_rating(value: float) -> float:
    return max(MIN_RATING, min(MAX_RATING, value))


def is_poster_url(value: Any) -> bool:
    return bool(POSTER_URL_RE.match(_text(value)))


def create_movie(data: Any) -> Movie:
    rating = parse_rating(_field(data, "rating"))
    return Movie(
        id=_field(data, "id"),
        title=_text(_field(data, "title")),
        description=_text(_field(data, "description")),
        poster_url=_text(_field(data, "posterURL")),
        rating=clamp_rating(rating if rating is not None else 0.0),
    )


def validate_movie(data: Any) -> ValidationResult:
    errors: Dict[str, str] = {}
    if not _text(_field(data, "title")):
        errors["title"] = "Title is required"
    if not _text(_field(data, "description")):
        errors["description"] = "Description is required"
    if not is_poster_url(_field(data, "posterURL")):
        errors["posterURL"] = "Valid image URL required (http/https)"
    rating = parse_rating(_field(data, "rating"))
    if rating is None or not MIN_RATING <= rating <= MAX_RATING:
        errors["rating"] = "Rating must be 0 to 5"
    return ValidationResult(errors)


def get_next_id(items: Iterable[Any] | None) -> int:
    ids = [parse_id(_field(item, "id")) for item in items or ()]
    return max(ids) + 1 if ids else 1


SEED_DATA: List[Dict[str, Any]] = [
    {
        "id": 1,
        "title": "Inception",
        "description": "A thief who steals corporate secrets through dream-sharing tech is given the inverse task of planting an idea.",
        "posterURL": "https://image.tmdb.org/t/p/w500/edv5CZvWj09upOsy2Y6IwDhK8bt.jpg",
        "rating": 4.5,
    },
    {
        "id": 2,
        "title": "Interstellar",
        "description": "Explorers travel through a wormhole in space in an attempt to ensure humanity's survival.",
        "posterURL": "https://image.tmdb.org/t/p/w500/rAiYTfKGqDCRIIqoNM8OmMzMgc0.jpg",
        "rating": 5,
    },
    {
        "id": 3,
        "title": "The Dark Knight",
        "description": "Batman faces the Joker, a criminal mastermind who thrusts Gotham into chaos.",
        "posterURL": "https://image.tmdb.org/t/p/w500/qJ2tW6WMUDux911r6m7haRef0WH.jpg",
        "rating": 5,
    },
    {
        "id": 4,
        "title": "The Matrix",
        "description": "A hacker discovers reality as he knows it is a simulation and joins a rebellion.",
        "posterURL": "https://image.tmdb.org/t/p/w500/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg",
        "rating": 4.5,
    },
    {
        "id": 5,
        "title": "Breaking Bad",
        "description": "A chemistry teacher diagnosed with cancer starts producing methamphetamine.",
        "posterURL": "https://image.tmdb.org/t/p/w500/ggFHVNu6YYI5L9pCfOacjizRGt.jpg",
        "rating": 5,
    },
    {
        "id": 6,
        "title": "Game of Thrones",
        "description": "Noble families vie for control of the Iron Throne while an ancient enemy returns.",
        "posterURL": "https://image.tmdb.org/t/p/w500/u3bZgnGQ9T01sWNhyveQz0wH0Hl.jpg",
        "rating": 4,
    },
]


def seed_movies() -> List[Movie]:
    return [create_movie(item) for item in SEED_DATA]
