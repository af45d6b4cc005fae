"""
Idoll snapshot save/restore for interactive-fiction interpreter sessions.

This package provides:
- Capture of the live interpreter state into a portable Snapshot
- Checkpoint resolution (nearest label at or before the current line)
- Scene identity by position in the ordered scene catalog
- Reconciliation of an old snapshot onto a newer live variable bank
- Restore directives that resume at the right scene and label
- Key-value and file transports plus a SaveService facade
"""
from importlib.metadata import PackageNotFoundError, version

from .capture import capture
from .catalog import scene_index, scene_name_at
from .checkpoint import resolve_checkpoint
from .clone import ABSENT, clone_value
from .codec import decode_snapshot, encode_snapshot
from .config import SaveSettings
from .errors import (
    CyclicValueError,
    HostUnavailableError,
    IdollError,
    SnapshotValidationError,
    TransportError,
)
from .merge import reconcile
from .models import LiveScene, LiveState, RestoreDirective, Snapshot, is_well_formed
from .restore import prepare_restore
from .service import ImportResult, SaveService
from .storage import FileStore, MemoryStore

try:
    __version__ = version("idoll-save")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "ABSENT",
    "clone_value",
    "resolve_checkpoint",
    "scene_index",
    "scene_name_at",
    "capture",
    "reconcile",
    "prepare_restore",
    "encode_snapshot",
    "decode_snapshot",
    "is_well_formed",
    "LiveScene",
    "LiveState",
    "Snapshot",
    "RestoreDirective",
    "SaveService",
    "ImportResult",
    "SaveSettings",
    "MemoryStore",
    "FileStore",
    "IdollError",
    "HostUnavailableError",
    "SnapshotValidationError",
    "CyclicValueError",
    "TransportError",
]
