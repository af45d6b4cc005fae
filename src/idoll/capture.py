from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from .catalog import scene_index
from .checkpoint import current_label
from .clone import ABSENT, clone_key, clone_value
from .errors import HostUnavailableError, IdollError
from .models import (
    CHECKPOINT_FIELD,
    DEFAULT_VERSION,
    SCENE_FIELD,
    SCENE_NAME_FIELD,
    LiveState,
    Snapshot,
    Stats,
    scene_attr,
)

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def _scene_name(bank: Mapping[str, Any]) -> Any:
    """Name of the current scene: the live scene object's, else the bank's."""
    scene = bank.get(SCENE_FIELD)
    if scene is not None:
        name = scene_attr(scene, "name")
        if name is not None:
            return name
    return bank.get(SCENE_NAME_FIELD)


def serialize_stats(bank: Any) -> Stats:
    """Clone the persistent-variable bank, swapping the live scene for its name."""
    if not isinstance(bank, Mapping):
        raise HostUnavailableError("Variable bank is not a mapping")
    out: Stats = {}
    for key, value in bank.items():
        if key == SCENE_FIELD:
            continue
        copied = clone_value(value)
        if copied is not ABSENT:
            out[clone_key(key)] = copied
    name = _scene_name(bank)
    if name is not None:
        out[SCENE_NAME_FIELD] = name
    return out


def current_scene_index(live: LiveState) -> Optional[int]:
    name = _scene_name(live.stats) if isinstance(live.stats, Mapping) else None
    return scene_index(live.scene_list, name, live.cached_scene_index)


def build_snapshot(live: LiveState, default_version: str = DEFAULT_VERSION) -> Snapshot:
    """Assemble a Snapshot from live state; raises on unavailable host state."""
    stats = serialize_stats(live.stats)
    scene = live.scene
    if scene is not None:
        temps = clone_value(scene_attr(scene, "temps") or {})
        line_num = _as_int(scene_attr(scene, "line_num"))
        indent = _as_int(scene_attr(scene, "indent"))
        stats[CHECKPOINT_FIELD] = current_label(scene)
    else:
        temps, line_num, indent = {}, 0, 0

    index = current_scene_index(live)

    past_lines = live.past_lines
    recent_checks = live.recent_checks
    return Snapshot(
        stats=stats,
        version=live.version or default_version,
        temps=temps if isinstance(temps, dict) else {},
        line_num=line_num,
        indent=indent,
        current_scene_index=index,
        past_lines=clone_value(past_lines) if isinstance(past_lines, (list, tuple)) else [],
        recent_checks=clone_value(recent_checks) if isinstance(recent_checks, Mapping) else {},
    )


def capture(live: LiveState, default_version: str = DEFAULT_VERSION) -> Optional[Snapshot]:
    """Capture the live interpreter state.

    Returns None when there is nothing admissible to persist: no variable
    bank, or neither a scene name nor a resolvable scene index.
    """
    try:
        snapshot = build_snapshot(live, default_version)
    except IdollError as exc:
        logger.debug("Capture skipped: %s", exc)
        return None
    except Exception:
        logger.exception("Unexpected error while capturing interpreter state")
        return None
    if not snapshot.is_well_formed():
        logger.debug("Capture produced no scene identity; nothing to persist")
        return None
    logger.debug(
        "Captured scene=%s checkpoint=%r index=%s",
        snapshot.scene_name,
        snapshot.checkpoint,
        snapshot.current_scene_index,
    )
    return snapshot
