"""Persistence adapters: named text blobs keyed by string."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)


class PersistenceAdapter(Protocol):
    """Load/save serialized collections by key."""

    def load(self, key: str) -> Optional[str]:
        ...

    def save(self, key: str, text: str) -> None:
        ...


class FileStorage:
    """One ``<key>.json`` file per key, written with crash-safe replaces."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        return self._base_path / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def save(self, key: str, text: str) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
            # Atomic on POSIX; readers never see a half-written snapshot.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc
        logger.debug("Saved %s (%d bytes)", path, len(text))

    @property
    def base_path(self) -> Path:
        return self._base_path


class MemoryStorage:
    """Dict-backed store, handy for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.entries: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def save(self, key: str, text: str) -> None:
        self.entries[key] = text
