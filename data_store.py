from __future__ import annotations

import json
import os
import tempfile
from typing import Dict, List, Protocol

from loguru import logger

from models import Movie, create_movie, parse_id, seed_movies

STORAGE_KEY = "movies:data"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> bool:
        ...


class MemoryStore:
    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self.items: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.items.get(key)

    def set(self, key: str, value: str) -> bool:
        self.items[key] = value
        return True


class JsonFileStore:
    """Key-value store kept as a single JSON object on disk."""

    def __init__(self, data_file: str = "movies_data.json") -> None:
        self.data_file = data_file

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.data_file):
            return {}
        try:
            with open(self.data_file, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"[JsonFileStore] Unreadable store {self.data_file}: {exc}")
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> bool:
        payload = self._read_all()
        payload[key] = value
        directory = os.path.dirname(self.data_file) or "."
        try:
            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        except OSError as exc:
            logger.warning(f"[JsonFileStore] Cannot write {self.data_file}: {exc}")
            return False
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as temp:
                json.dump(payload, temp, indent=2)
            os.replace(temp_path, self.data_file)
        except OSError as exc:
            logger.warning(f"[JsonFileStore] Cannot write {self.data_file}: {exc}")
            return False
        finally:
            if os.path.exists(temp_path):
                os.remove(temp_path)
        return True


class MovieRepository:
    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY) -> None:
        self.store = store
        self.key = key

    def load_movies(self) -> List[Movie]:
        try:
            raw = self.store.get(self.key)
            if not raw:
                logger.info("[MovieRepository] No stored movies, using seed set")
                return seed_movies()
            payload = json.loads(raw)
            if not isinstance(payload, list):
                logger.warning("[MovieRepository] Stored movies are not a list, using seed set")
                return seed_movies()
            movies = [create_movie(item) for item in payload]
            for position, movie in enumerate(movies):
                movie.id = parse_id(movie.id) or position + 1
        except Exception as exc:
            logger.warning(f"[MovieRepository] Failed to load movies, using seed set: {exc}")
            return seed_movies()

        if not movies:
            return seed_movies()
        logger.info(f"[MovieRepository] Loaded {len(movies)} movies")
        return movies

    def save_movies(self, movies: List[Movie]) -> None:
        try:
            raw = json.dumps([movie.to_dict() for movie in movies])
            saved = self.store.set(self.key, raw)
        except Exception as exc:
            logger.warning(f"[MovieRepository] Failed to save movies: {exc}")
            return
        if not saved:
            logger.warning("[MovieRepository] Store rejected the write, keeping in-memory movies")
            return
        logger.debug(f"[MovieRepository] Saved {len(movies)} movies")
