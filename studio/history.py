"""
Generation History
==================

A capped, newest-first log of past generations.

The store owns the JSON encoding of the entry list; a backend only keeps one
text slot (an in-memory string, or a file on disk). Missing data reads as an
empty history. Data that cannot be decoded is logged and also treated as an
empty history, so a damaged file never takes the service down.

Usage:
    from studio.history import HistoryStore, JsonFileBackend

    store = HistoryStore(JsonFileBackend("history.json"), max_entries=50)
    store.add(entry)
    entries = store.list()
"""

import json
import logging
import threading
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from studio.errors import NotFoundError, StorageError
from studio.models import HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 100


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class MemoryBackend:
    """Single text slot held in process memory."""

    def __init__(self, text: str | None = None) -> None:
        self.text = text

    def read(self) -> str | None:
        return self.text

    def write(self, text: str) -> None:
        self.text = text

    def remove(self) -> None:
        self.text = None


class JsonFileBackend:
    """Single text slot stored in a JSON file."""

    def __init__(self, path) -> None:
        self.path = Path(path)

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read history file {self.path}: {e}") from e

    def write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(self.path)

    def remove(self) -> None:
        self.path.unlink(missing_ok=True)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class HistoryStore:
    """Newest-first history capped at ``max_entries`` (oldest evicted first)."""

    def __init__(self, backend=None, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.backend = backend if backend is not None else MemoryBackend()
        self.max_entries = max_entries
        self._lock = threading.Lock()

    def _decode(self, text: str | None) -> list[HistoryEntry]:
        if not text:
            return []
        try:
            raw = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as e:
            raise StorageError(f"History is not valid JSON: {e}") from e
        if not isinstance(raw, list):
            raise StorageError(f"History must be a JSON array, got {type(raw).__name__}")
        try:
            return [HistoryEntry.model_validate(item) for item in raw]
        except PydanticValidationError as e:
            raise StorageError(f"History contains an invalid entry: {e}") from e

    def _load(self) -> list[HistoryEntry]:
        try:
            return self._decode(self.backend.read())
        except StorageError as e:
            logger.warning("Discarding unreadable history: %s", e)
            return []

    def _save(self, entries: list[HistoryEntry]) -> None:
        self.backend.write(json.dumps([e.to_dict() for e in entries], indent=2))

    def add(self, entry: HistoryEntry) -> HistoryEntry:
        """Prepend an entry, evicting the oldest ones past the cap."""
        with self._lock:
            entries = self._load()
            entries.insert(0, entry)
            evicted = len(entries) - self.max_entries
            if evicted > 0:
                logger.debug("History full, evicting %d oldest entries", evicted)
            self._save(entries[:self.max_entries])
        return entry

    def list(self) -> list[HistoryEntry]:
        return self._load()

    def get(self, entry_id: str) -> HistoryEntry:
        entry = next((e for e in self._load() if e.id == entry_id), None)
        if entry is None:
            raise NotFoundError(f"History entry {entry_id} not found")
        return entry

    def delete_by_id(self, entry_id: str) -> HistoryEntry:
        """Remove one entry. Raises NotFoundError and leaves the store alone if absent."""
        with self._lock:
            entries = self._load()
            for i, entry in enumerate(entries):
                if entry.id == entry_id:
                    del entries[i]
                    self._save(entries)
                    return entry
        raise NotFoundError(f"History entry {entry_id} not found")

    def clear(self) -> None:
        with self._lock:
            self.backend.remove()

    def __len__(self) -> int:
        return len(self._load())
