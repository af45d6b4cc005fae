from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .capture import capture, current_scene_index
from .codec import decode_document, encode_snapshot
from .config import SaveSettings
from .errors import IdollError, TransportError
from .models import LiveState, Snapshot
from .restore import prepare_restore
from .storage import FileStore, KeyValueStore, read_import, write_export

logger = logging.getLogger(__name__)

LiveSource = Union[LiveState, Callable[[], LiveState]]


@dataclass
class ImportResult:
    success: bool
    reason: Optional[str] = None  # None | cancelled | empty | read_error

    CANCELLED = "cancelled"
    EMPTY = "empty"
    READ_ERROR = "read_error"


class SaveService:
    """Save, load, export and import for a single interpreter session.

    Every public operation reports success as a bool (imports also carry a
    reason code) and never raises: faults are logged and degrade to failure.
    Snapshots are computed wholly in memory before anything is written or the
    screen is cleared, so a failure never leaves the interpreter half-restored.
    """

    def __init__(
        self,
        live: LiveSource,
        store: Optional[KeyValueStore] = None,
        settings: Optional[SaveSettings] = None,
    ) -> None:
        self._live = live
        self.settings = settings or SaveSettings()
        self.store = store if store is not None else FileStore(self.settings.save_dir)

    @property
    def live(self) -> LiveState:
        return self._live() if callable(self._live) else self._live

    # Capture side

    def get_full_state(self) -> Optional[Snapshot]:
        return capture(self.live, self.settings.default_version)

    def get_current_scene_index(self) -> Optional[int]:
        return current_scene_index(self.live)

    def _write_save(self, snapshot: Snapshot) -> bool:
        if not snapshot.is_well_formed():
            return False
        try:
            self.store.set_item(self.settings.storage_key, encode_snapshot(snapshot, pretty=False))
        except TransportError as exc:
            logger.error("Failed to write save: %s", exc)
            return False
        except Exception:
            logger.exception("Unexpected error while writing save")
            return False
        logger.info("Saved scene %s under %s", snapshot.scene_name, self.settings.storage_key)
        return True

    def save(self, callback: Optional[Callable[[bool], None]] = None) -> Optional[bool]:
        """Capture and persist the live state.

        With a callback the result is delivered to it and None is returned.
        """
        snapshot = self.get_full_state()
        ok = self._write_save(snapshot) if snapshot is not None else False
        if callback is not None:
            callback(ok)
            return None
        return ok

    def export_to_file(
        self,
        destination: Union[str, Path],
        callback: Optional[Callable[[bool], None]] = None,
    ) -> Optional[bool]:
        """Write the pretty-printed snapshot document to ``destination``."""
        snapshot = self.get_full_state()
        logger.info(
            "Exporting index: %s checkpoint: %r",
            snapshot.current_scene_index if snapshot else None,
            snapshot.checkpoint if snapshot else "",
        )
        ok = False
        if snapshot is not None:
            try:
                path = write_export(destination, encode_snapshot(snapshot), self.settings.export_filename)
                logger.info("Exported snapshot to %s", path)
                ok = True
            except TransportError as exc:
                logger.error("Export failed: %s", exc)
            except Exception:
                logger.exception("Unexpected error during export")
        if callback is not None:
            callback(ok)
            return None
        return ok

    # Restore side

    def render_scene(self, doc: Any) -> bool:
        """Prepare and apply a restore of ``doc`` into the live interpreter."""
        directive = prepare_restore(doc, self.live)
        if directive is None:
            return False
        try:
            directive.execute()
        except Exception:
            logger.exception("Host failed while restoring scene %s", directive.scene_name)
            return False
        logger.info("Restored scene %s at checkpoint %r", directive.scene_name, directive.checkpoint)
        return True

    def _restore_text(self, text: str) -> bool:
        try:
            doc = decode_document(text)
        except IdollError as exc:
            logger.warning("Snapshot rejected: %s", exc)
            return False
        except Exception:
            logger.exception("Unexpected error while decoding snapshot")
            return False
        return self.render_scene(doc)

    def load(self) -> bool:
        """Restore from the key-value store. False when nothing is saved."""
        try:
            raw = self.store.get_item(self.settings.storage_key)
        except TransportError as exc:
            logger.error("Failed to read save: %s", exc)
            return False
        except Exception:
            logger.exception("Unexpected error while reading save")
            return False
        if not raw:
            logger.info("No saved data under %s", self.settings.storage_key)
            return False
        return self._restore_text(raw)

    def import_from_json(self, text: Any) -> bool:
        if not isinstance(text, str) or not text.strip():
            return False
        return self._restore_text(text)

    def import_from_file(
        self,
        source: Optional[Union[str, Path]],
        callback: Optional[Callable[[bool, Optional[str]], None]] = None,
    ) -> ImportResult:
        """Import a user-selected snapshot file.

        ``source`` is None when the user cancelled the file picker. The
        callback, if given, is invoked exactly once with ``(ok, reason)``.
        """
        try:
            result = self._import_file(source)
        except Exception:
            logger.exception("Unexpected error during import")
            result = ImportResult(False)
        if callback is not None:
            callback(result.success, result.reason)
        return result

    def _import_file(self, source: Optional[Union[str, Path]]) -> ImportResult:
        if source is None:
            return ImportResult(False, ImportResult.CANCELLED)
        try:
            text = read_import(source)
        except TransportError as exc:
            logger.error("Import failed: %s", exc)
            return ImportResult(False, ImportResult.READ_ERROR)
        if not text:
            return ImportResult(False, ImportResult.EMPTY)
        return ImportResult(self.import_from_json(text))
