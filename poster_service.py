from __future__ import annotations

from concurrent.futures import Executor
from functools import lru_cache
from io import BytesIO
from typing import Any, Callable, Tuple

import requests
from loguru import logger
from PIL import Image

from models import is_poster_url
from settings import FALLBACK_POSTER_URL


class PosterCache:
    def __init__(self, max_items: int = 256) -> None:
        self._items: dict[tuple[str, tuple[int, int]], object] = {}
        self._order: list[tuple[str, tuple[int, int]]] = []
        self._max_items = max_items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, key: tuple[str, tuple[int, int]]):
        return self._items.get(key)

    def put(self, key: tuple[str, tuple[int, int]], value: object) -> None:
        if key not in self._items:
            self._order.append(key)
        self._items[key] = value
        while len(self._order) > self._max_items:
            oldest = self._order.pop(0)
            self._items.pop(oldest, None)


class PosterService:
    def __init__(
        self,
        fallback_url: str = FALLBACK_POSTER_URL,
        timeout: Tuple[float, float] = (4, 10),
    ) -> None:
        self.fallback_url = fallback_url
        self.session = requests.Session()
        self._timeout = timeout

    @lru_cache(maxsize=1024)
    def fetch_poster_bytes(self, url: str) -> bytes:
        if not is_poster_url(url):
            raise ValueError(f"Not an http(s) poster URL: {url!r}")
        response = self.session.get(url.strip(), timeout=self._timeout)
        response.raise_for_status()
        return response.content

    def _decode(self, raw: bytes, size: Tuple[int, int]) -> Image.Image:
        image = Image.open(BytesIO(raw)).convert("RGB")
        image.thumbnail(size, Image.Resampling.LANCZOS)
        return image

    def load_poster(self, url: str, size: Tuple[int, int], use_fallback: bool = True) -> Image.Image | None:
        candidates = [url]
        if use_fallback and self.fallback_url and self.fallback_url != url:
            candidates.append(self.fallback_url)
        for candidate in candidates:
            try:
                return self._decode(self.fetch_poster_bytes(candidate), size)
            except (requests.RequestException, OSError, ValueError) as exc:
                logger.debug(f"[PosterService] Poster {candidate!r} failed: {exc}")
        return None


class PosterLoader:
    """Runs poster loads on ``executor`` and hands results back through ``after``.

    A request made for a ``slot`` supersedes earlier requests for the same
    slot; results of superseded requests are dropped.
    """

    def __init__(self, service: PosterService, after: Callable[..., Any], executor: Executor, cache: PosterCache | None = None) -> None:
        self.service = service
        self._after = after
        self._executor = executor
        self.cache = cache if cache is not None else PosterCache()
        self._latest: dict[str, str] = {}

    def forget(self, slot: str) -> None:
        self._latest.pop(slot, None)

    def request(
        self,
        url: str,
        size: Tuple[int, int],
        done: Callable[[Image.Image | None], None],
        use_fallback: bool = True,
        slot: str | None = None,
    ) -> None:
        if slot is not None:
            self._latest[slot] = url

        def deliver(image: Image.Image | None) -> None:
            if slot is not None and self._latest.get(slot) != url:
                return
            done(image)

        key = (url, size)
        cached = self.cache.get(key)
        if cached is not None:
            deliver(cached)
            return

        def task() -> None:
            try:
                image = self.service.load_poster(url, size, use_fallback=use_fallback)
            except Exception:
                logger.exception(f"[PosterLoader] Poster task failed for {url!r}")
                image = None
            if image is not None:
                self.cache.put(key, image)
            self._after(0, lambda: deliver(image))

        self._executor.submit(task)
