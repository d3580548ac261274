from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, fields
from typing import Any, Dict, Tuple

from loguru import logger

from data_store import STORAGE_KEY

FALLBACK_POSTER_URL = "https://images.unsplash.com/photo-1524985069026-dd778a71c7b4?q=80&w=1200&auto=format&fit=crop"


@dataclass
class AppConfig:
    data_file: str = "movies_data.json"
    storage_key: str = STORAGE_KEY
    debounce_ms: int = 250
    poster_size: Tuple[int, int] = (140, 200)
    preview_size: Tuple[int, int] = (280, 160)
    fallback_poster_url: str = FALLBACK_POSTER_URL
    appearance_mode: str = "dark"
    color_theme: str = "blue"
    log_level: str = "INFO"
    request_timeout: Tuple[float, float] = (4.0, 10.0)


def _coerce(default: Any, value: Any) -> Any:
    """Return ``value`` shaped like ``default``, or None when it does not fit."""
    if isinstance(default, tuple):
        if not isinstance(value, list) or len(value) != len(default):
            return None
        items = [_coerce(d, v) for d, v in zip(default, value)]
        return None if None in items else tuple(items)
    if isinstance(value, bool):
        return None
    if isinstance(default, float) and isinstance(value, (int, float)):
        return float(value)
    if isinstance(default, int) and isinstance(value, int) and value >= 0:
        return value
    if isinstance(default, str) and isinstance(value, str):
        return value
    return None


def load_config(settings_file: str = "settings.json", **overrides: Any) -> AppConfig:
    values: Dict[str, Any] = {}
    if os.path.exists(settings_file):
        try:
            with open(settings_file, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"[Settings] Ignoring unreadable {settings_file}: {exc}")
            payload = {}
        if isinstance(payload, dict):
            defaults = AppConfig()
            known = {f.name for f in fields(AppConfig)}
            for key, value in payload.items():
                if key not in known:
                    continue
                coerced = _coerce(getattr(defaults, key), value)
                if coerced is None:
                    logger.warning(f"[Settings] Ignoring {key}={value!r}: wrong type")
                    continue
                values[key] = coerced
    values.update({k: v for k, v in overrides.items() if v is not None})
    return AppConfig(**values)


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="{time:HH:mm:ss} | {level: <8} | {message}")
