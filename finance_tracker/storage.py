"""Durable key-value storage for record collections.

Each logical collection is written as one JSON array under a named
key.  Two backends share the same ``get_item``/``set_item`` interface:

* :class:`JsonFileStorage` – one ``<key>.json`` file per key inside a
  data directory (the default for the Streamlit app)
* :class:`MemoryStorage` – an in-process dictionary, handy for tests
  and throwaway sessions

Failures never propagate out of :func:`load_collection` or
:func:`save_collection`.  They are logged and, when a callback is
supplied, reported as a :class:`StorageResult` so the embedding
application can decide whether to surface them.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, TypeVar

from . import config

logger = logging.getLogger(__name__)

T = TypeVar('T')

READ = 'read'
WRITE = 'write'


class StorageError(OSError):
    """A storage backend failed to read or write a key."""

    def __init__(self, key: str, operation: str, message: str):
        super().__init__(f"Failed to {operation} '{key}': {message}")
        self.key = key
        self.operation = operation


@dataclass
class StorageResult:
    """Outcome of a single read or write against the storage backend."""
    key: str
    operation: str
    ok: bool = True
    error: Optional[BaseException] = None


StorageErrorHandler = Callable[[StorageResult], None]


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


def safe_filename(name: str, default: str = 'collection') -> str:
    """Create a safe filename from a storage key.

    Keeps alphanumeric characters, underscores and hyphens; spaces
    become underscores.

    Example:
        >>> safe_filename("expense-tracker-data")
        'expense-tracker-data'
        >>> safe_filename("../etc passwd")
        'etc_passwd'
    """
    if not name:
        return default
    cleaned = ''.join(c for c in name if c.isalnum() or c in {' ', '_', '-'})
    cleaned = cleaned.strip().replace(' ', '_')
    while '__' in cleaned:
        cleaned = cleaned.replace('__', '_')
    cleaned = cleaned.strip('_')
    return cleaned if cleaned else default


class JsonFileStorage:
    """Stores each key as a JSON file inside ``data_dir``."""

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize file storage.

        Args:
            data_dir: Optional custom directory for the collection files.
                      Defaults to DATA_DIR from config.
        """
        self.data_dir = Path(data_dir) if data_dir is not None else config.DATA_DIR

    def get_path(self, key: str) -> Path:
        return self.data_dir / f"{safe_filename(key)}.json"

    def get_item(self, key: str) -> Optional[str]:
        """Return the raw text stored under ``key``, or ``None`` if absent.

        Raises:
            StorageError: If the file exists but cannot be read
        """
        target = self.get_path(key)
        if not target.exists():
            return None
        try:
            return target.read_text(encoding='utf-8')
        except OSError as e:
            raise StorageError(key, READ, str(e)) from e

    def set_item(self, key: str, value: str) -> None:
        """Write ``value`` under ``key``, replacing any previous content.

        The text is written to a sibling temp file first and then moved
        into place, so a crash never leaves a half-written collection.

        Raises:
            StorageError: If the file cannot be written
        """
        target = self.get_path(key)
        tmp = target.with_suffix('.json.tmp')
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(value, encoding='utf-8')
            tmp.replace(target)
        except OSError as e:
            raise StorageError(key, WRITE, str(e)) from e


class MemoryStorage:
    """Dictionary-backed storage with the same interface as the file backend."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


def _report(on_error: Optional[StorageErrorHandler], result: StorageResult) -> None:
    if on_error is not None:
        on_error(result)


def serialize_collection(records: Iterable[Any]) -> str:
    """Serialize records exposing ``to_dict`` as a JSON array."""
    return json.dumps([record.to_dict() for record in records], ensure_ascii=False)


# Raised by record decoders for a single malformed entry.
RECORD_DECODE_ERRORS = (KeyError, TypeError, ValueError, AttributeError)

BadEntryHandler = Callable[[int, Exception], None]


def deserialize_collection(
    text: str,
    decoder: Callable[[Dict[str, Any]], T],
    on_bad_entry: Optional[BadEntryHandler] = None,
) -> List[T]:
    """Parse a JSON array and decode each entry.

    When ``on_bad_entry`` is given, an entry the decoder rejects is
    passed to it with its index and skipped; otherwise the error
    propagates.

    Raises:
        ValueError: If the text is not valid JSON or not a JSON array.
        KeyError, InvalidRecordError: If an entry is malformed and no
            ``on_bad_entry`` handler is given.
    """
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array, got {type(data).__name__}")
    records: List[T] = []
    for index, entry in enumerate(data):
        try:
            records.append(decoder(entry))
        except RECORD_DECODE_ERRORS as e:
            if on_bad_entry is None:
                raise
            on_bad_entry(index, e)
    return records


def load_collection(
    storage: KeyValueStorage,
    key: str,
    decoder: Callable[[Dict[str, Any]], T],
    on_error: Optional[StorageErrorHandler] = None,
) -> List[T]:
    """Read and decode the collection stored under ``key``.

    A missing key yields an empty list.  A read failure or a payload
    that is not a JSON array is logged at ERROR, reported through
    ``on_error``, and yields an empty list.  Individual entries that
    fail to decode are logged at WARNING, reported, and skipped so the
    remaining records survive the next save.
    """
    def skip_entry(index: int, error: Exception) -> None:
        logger.warning("Skipping bad record %d in '%s': %s", index, key, error)
        _report(on_error, StorageResult(key=key, operation=READ, ok=False, error=error))

    try:
        text = storage.get_item(key)
        if text is None:
            return []
        records = deserialize_collection(text, decoder, on_bad_entry=skip_entry)
    except Exception as e:
        logger.error("Failed to load collection '%s': %s", key, e)
        _report(on_error, StorageResult(key=key, operation=READ, ok=False, error=e))
        return []
    logger.debug("Loaded %d records from '%s'", len(records), key)
    return records


def save_collection(
    storage: KeyValueStorage,
    key: str,
    records: Iterable[Any],
    on_error: Optional[StorageErrorHandler] = None,
) -> StorageResult:
    """Serialize and write the full collection under ``key``.

    Write failures are logged and reported; they are never raised.
    """
    try:
        storage.set_item(key, serialize_collection(records))
    except Exception as e:
        logger.error("Failed to save collection '%s': %s", key, e)
        result = StorageResult(key=key, operation=WRITE, ok=False, error=e)
        _report(on_error, result)
        return result
    return StorageResult(key=key, operation=WRITE)
