from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from .errors import TransportError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """String key-value sink/source, e.g. a browser's localStorage."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process key-value store."""

    def __init__(self, items: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


def atomic_write_text(path: Path, text: str) -> None:
    """Atomically write text to a path using a temporary file and replace.

    Either the old file remains or the new file fully replaces it.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=path.name, dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


class FileStore:
    """Key-value store keeping one JSON file per key in a directory."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise TransportError(f"Failed to read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            atomic_write_text(path, value)
        except OSError as e:
            raise TransportError(f"Failed to write {path}: {e}") from e
        logger.debug("Stored %d bytes under %s", len(value), path)


def write_export(destination: Union[str, Path], text: str, default_filename: str) -> Path:
    """Write an exported snapshot; a directory destination gets the default name."""
    path = Path(destination)
    if path.is_dir():
        path = path / default_filename
    try:
        atomic_write_text(path, text)
    except OSError as e:
        raise TransportError(f"Failed to export snapshot to {path}: {e}") from e
    return path


def read_import(source: Union[str, Path]) -> str:
    """Read a snapshot file chosen for import as UTF-8 text."""
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TransportError(f"Failed to read {path}: {e}") from e
