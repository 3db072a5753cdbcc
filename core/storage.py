"""
Persistent key-value storage for client-side state.

Holds string values under string keys, the way browser local storage does,
and keeps them in a single JSON document on disk.
"""

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    String key-value store backed by a JSON file.

    Usage:
        store = KeyValueStore("~/.video_job_client/storage.json")
        store.set("generated_videos", '["video_123"]')
        store.get("generated_videos")

    Pass ``path=None`` for a memory-only store.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path).expanduser() if path else None
        self._data: Optional[dict[str, str]] = None

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data

        self._data = {}
        if self.path is None or not self.path.exists():
            return self._data

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return self._data

        if not isinstance(raw, dict):
            logger.warning(f"Ignoring storage file {self.path}: expected a JSON object")
            return self._data

        self._data = {str(k): v for k, v in raw.items() if isinstance(v, str)}
        return self._data

    def _flush(self):
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is unset."""
        return self._load().get(key)

    def set(self, key: str, value: str):
        """Store a value, replacing any previous one."""
        self._load()[key] = value
        self._flush()

    def remove(self, key: str):
        data = self._load()
        if key in data:
            del data[key]
            self._flush()
