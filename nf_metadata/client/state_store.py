"""
Persisted client state: one JSON document per key under a state directory.

Every value is read once at startup with a type-checked fallback and fully
rewritten after each mutation. Single writer per process; no locking.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORAGE_KEY_HISTORY = "nf-search-history"
STORAGE_KEY_THEME = "nf-theme"
STORAGE_KEY_ANALYTICS = "nf-analytics"

DEFAULT_STATE_DIR = Path.home() / ".nf_metadata"


def resolve_state_dir(value: str | os.PathLike[str] | None = None) -> Path:
    if value:
        return Path(value).expanduser()
    env_value = (os.getenv("NF_METADATA_STATE_DIR") or "").strip()
    if env_value:
        return Path(env_value).expanduser()
    return DEFAULT_STATE_DIR


class JsonStateStore:
    def __init__(self, root: str | os.PathLike[str] | None = None) -> None:
        self.root = resolve_state_dir(root)

    def _path(self, key: str) -> Path:
        safe = key.replace("/", "_")
        return self.root / f"{safe}.json"

    def get(self, key: str, default: T) -> T:
        """
        Return the stored value for `key`, or `default` when the value is absent,
        unreadable, or not the same JSON type as `default`.
        """
        path = self._path(key)
        if not path.exists():
            return default
        try:
            value = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state {path}: {e}")
            return default
        if not isinstance(value, type(default)):
            logger.warning(f"Ignoring state {key!r}: expected {type(default).__name__}, got {type(value).__name__}")
            return default
        return value

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            # Storage full or unavailable; in-memory state stays authoritative.
            logger.warning(f"Failed to persist state {key!r}: {e}")
