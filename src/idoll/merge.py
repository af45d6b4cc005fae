from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .clone import ABSENT, clone_key, clone_value
from .models import SCENE_FIELD, Stats


def _copy(value: Any) -> Any:
    copied = clone_value(value)
    return None if copied is ABSENT else copied


def deep_merge(base: Any, override: Any) -> Any:
    """Merge ``override`` onto ``base`` without mutating either.

    A non-mapping override (scalar or sequence) replaces the base value
    outright; sequences are never merged element-wise. Mapping overrides are
    merged key by key: base-only keys survive, override-only keys are added,
    shared keys recurse. The ``scene`` key is skipped at every level.
    """
    if not isinstance(override, Mapping):
        return _copy(override)
    if not isinstance(base, Mapping):
        base = {}
    result = {}
    for key, value in base.items():
        if key == SCENE_FIELD:
            continue
        name = clone_key(key)
        if name in override:
            merged = deep_merge(value, override[name])
        else:
            merged = clone_value(value)
        if merged is not ABSENT:
            result[name] = merged
    for key, value in override.items():
        name = clone_key(key)
        if name == SCENE_FIELD or name in result:
            continue
        copied = clone_value(value)
        if copied is not ABSENT:
            result[name] = copied
    return result


def reconcile(live_stats: Mapping[str, Any], snapshot_stats: Mapping[str, Any]) -> Stats:
    """Reconcile a snapshot's ``stats`` onto the live bank.

    Fields the live interpreter introduced after the snapshot was taken are
    kept, so restoring an old save into a newer build never deletes them.
    """
    return deep_merge(live_stats, snapshot_stats)
