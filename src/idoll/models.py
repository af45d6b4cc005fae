from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import SnapshotValidationError

CHECKPOINT_FIELD = "_idoll_checkpoint"
SCENE_FIELD = "scene"
SCENE_NAME_FIELD = "sceneName"
DEFAULT_VERSION = "UNKNOWN"

# Flags forced into ``temps`` so the interpreter treats the resume as a user restore
CHOICE_REUSE_FLAG = "choice_reuse"
CHOICE_REUSE_VALUE = "allow"
USER_RESTORED_FLAG = "choice_user_restored"

Stats = Dict[str, Any]

# Snapshot documents use the interpreter's camelCase names
_SCENE_KEYS = {"line_num": "lineNum"}


def scene_attr(scene: Any, name: str, default: Any = None) -> Any:
    """Read a field off a live scene, which may be an object or a mapping."""
    if isinstance(scene, Mapping):
        return scene.get(_SCENE_KEYS.get(name, name), default)
    return getattr(scene, name, default)


def is_well_formed(doc: Any) -> bool:
    """Admissibility gate shared by capture and restore.

    A document is admissible when ``stats`` is a mapping and it either names
    its scene (non-empty ``stats.sceneName``) or carries a non-negative
    integer ``currentSceneIndex``.
    """
    if not isinstance(doc, Mapping):
        return False
    stats = doc.get("stats")
    if not isinstance(stats, Mapping):
        return False
    name = stats.get(SCENE_NAME_FIELD)
    if isinstance(name, str) and name:
        return True
    index = doc.get("currentSceneIndex")
    return isinstance(index, int) and not isinstance(index, bool) and index >= 0


@dataclass
class LiveScene:
    """Interpreter scene as seen by the capturer.

    Host integrations may pass any object exposing these attributes instead.
    """

    name: str
    labels: Dict[str, int] = field(default_factory=dict)
    line_num: int = 0
    indent: int = 0
    temps: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LiveState:
    """Explicit view of the host interpreter's global state.

    ``stats`` is the persistent-variable bank; the live scene lives under its
    ``scene`` key. ``clear_screen`` and ``restore_game`` are the two resume
    primitives; either may be missing, in which case restores are rejected.
    """

    stats: Any = None
    scene_list: Optional[Sequence[str]] = None
    cached_scene_index: Optional[int] = None
    past_lines: Any = None
    recent_checks: Any = None
    version: Optional[str] = None
    clear_screen: Optional[Callable[[Callable[[], None]], None]] = None
    restore_game: Optional[Callable[[Dict[str, Any], Any, bool], None]] = None

    @property
    def scene(self) -> Any:
        if isinstance(self.stats, Mapping):
            return self.stats.get(SCENE_FIELD)
        return None


@dataclass
class Snapshot:
    """Persisted unit of interpreter state."""

    stats: Stats
    version: str = DEFAULT_VERSION
    temps: Dict[str, Any] = field(default_factory=dict)
    line_num: int = 0
    indent: int = 0
    current_scene_index: Optional[int] = None
    past_lines: List[Any] = field(default_factory=list)
    recent_checks: Dict[str, Any] = field(default_factory=dict)

    @property
    def scene_name(self) -> Optional[str]:
        return self.stats.get(SCENE_NAME_FIELD)

    @property
    def checkpoint(self) -> str:
        return self.stats.get(CHECKPOINT_FIELD) or ""

    def is_well_formed(self) -> bool:
        return is_well_formed(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "version": self.version,
            "stats": self.stats,
            "temps": self.temps,
            "lineNum": self.line_num,
            "indent": self.indent,
        }
        if self.current_scene_index is not None:
            data["currentSceneIndex"] = self.current_scene_index
        data["pastLines"] = self.past_lines
        data["recentChecks"] = self.recent_checks
        return data

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Snapshot":
        if not isinstance(data, Mapping):
            raise SnapshotValidationError("Snapshot document must be an object")
        stats = data.get("stats")
        if not isinstance(stats, Mapping):
            raise SnapshotValidationError("Snapshot 'stats' must be an object")
        index = data.get("currentSceneIndex")
        return Snapshot(
            stats=dict(stats),
            version=str(data.get("version") or DEFAULT_VERSION),
            temps=dict(data.get("temps") or {}),
            line_num=int(data.get("lineNum") or 0),
            indent=int(data.get("indent") or 0),
            current_scene_index=int(index) if index is not None else None,
            past_lines=list(data.get("pastLines") or []),
            recent_checks=dict(data.get("recentChecks") or {}),
        )


@dataclass
class RestoreDirective:
    """Prepared restore: clear the screen, then enter the host's restore path.

    The host re-renders during restore, so clearing first avoids showing
    stale output.
    """

    state: Dict[str, Any]
    clear_screen: Callable[[Callable[[], None]], None]
    restore_game: Callable[[Dict[str, Any], Any, bool], None]
    user_restored: bool = True

    @property
    def scene_name(self) -> str:
        return self.state["stats"][SCENE_NAME_FIELD]

    @property
    def checkpoint(self) -> str:
        return self.state["stats"][CHECKPOINT_FIELD]

    def execute(self) -> None:
        self.clear_screen(self._resume)

    def _resume(self) -> None:
        self.restore_game(self.state, None, self.user_restored)
