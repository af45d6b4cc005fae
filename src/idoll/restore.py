from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Union

from .catalog import scene_name_at
from .clone import clone_value
from .errors import HostUnavailableError, IdollError, SnapshotValidationError
from .merge import reconcile
from .models import (
    CHECKPOINT_FIELD,
    CHOICE_REUSE_FLAG,
    CHOICE_REUSE_VALUE,
    SCENE_NAME_FIELD,
    USER_RESTORED_FLAG,
    LiveState,
    RestoreDirective,
    Snapshot,
    is_well_formed,
)

logger = logging.getLogger(__name__)


def resolve_scene_name(stats: Mapping[str, Any], index: Any, live: LiveState) -> Optional[str]:
    """Pick the scene to resume in.

    A scene name that the live catalog still lists (or any non-empty name when
    no catalog is available) is authoritative. Otherwise the stored catalog
    index is reverse-resolved, falling back to whatever name was stored.
    """
    name = stats.get(SCENE_NAME_FIELD)
    valid_name = isinstance(name, str) and bool(name)
    if valid_name and (live.scene_list is None or name in live.scene_list):
        return name
    resolved = scene_name_at(live.scene_list, index)
    if resolved:
        return resolved
    return name if valid_name else None


def build_restore_state(doc: Mapping[str, Any], live: LiveState) -> Dict[str, Any]:
    """Produce the interpreter state to hand to the host's restore entry point.

    Raises SnapshotValidationError when the document cannot be resumed.
    """
    if not is_well_formed(doc):
        raise SnapshotValidationError("Snapshot has neither a scene name nor a scene index")
    state = clone_value(doc)
    stats = state["stats"]

    name = resolve_scene_name(stats, state.get("currentSceneIndex"), live)
    if not name:
        raise SnapshotValidationError("Snapshot scene could not be resolved")
    stats[SCENE_NAME_FIELD] = name

    if isinstance(live.stats, Mapping):
        stats = reconcile(live.stats, stats)
    else:
        logger.debug("No live variable bank; restoring snapshot stats as-is")
    if not stats.get(CHECKPOINT_FIELD):
        stats[CHECKPOINT_FIELD] = ""
    state["stats"] = stats

    temps = state.get("temps")
    temps = dict(temps) if isinstance(temps, Mapping) else {}
    temps[CHOICE_REUSE_FLAG] = CHOICE_REUSE_VALUE
    temps[USER_RESTORED_FLAG] = True
    state["temps"] = temps

    # Always resume at the top of the scene; the checkpoint label drives the seek
    state["lineNum"] = 0
    state["indent"] = 0
    return state


def prepare_restore(
    snapshot: Union[Snapshot, Mapping[str, Any]],
    live: LiveState,
) -> Optional[RestoreDirective]:
    """Turn a snapshot into a directive that resumes the live interpreter.

    Returns None (rejected) when the snapshot is not admissible, its scene
    cannot be resolved, or the host lacks a resume primitive. Nothing is
    executed here; call ``RestoreDirective.execute`` to apply it.
    """
    doc = snapshot.to_dict() if isinstance(snapshot, Snapshot) else snapshot
    try:
        if not callable(live.clear_screen) or not callable(live.restore_game):
            raise HostUnavailableError("Host exposes no clearScreen/restoreGame primitives")
        state = build_restore_state(doc, live)
    except IdollError as exc:
        logger.warning("Restore rejected: %s", exc)
        return None
    except Exception:
        logger.exception("Unexpected error while preparing restore")
        return None
    logger.debug(
        "Prepared restore scene=%s checkpoint=%r",
        state["stats"][SCENE_NAME_FIELD],
        state["stats"][CHECKPOINT_FIELD],
    )
    return RestoreDirective(
        state=state,
        clear_screen=live.clear_screen,
        restore_game=live.restore_game,
    )
