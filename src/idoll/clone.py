from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Set

from .errors import CyclicValueError, SnapshotValidationError


class _Absent:
    """Marker returned for values that are not data (callables)."""

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def clone_value(value: Any) -> Any:
    """Return a structurally independent copy of ``value``.

    Mappings become dicts with string keys, lists and tuples become lists,
    sets and frozensets become lists (sorted when their items allow it),
    scalars are returned as-is. Callables are never copied or invoked: they
    clone to ``ABSENT``. Inside a mapping an absent entry is dropped; inside a
    sequence it becomes ``None``, which is how the exported JSON document
    renders it.

    Raises CyclicValueError if a container contains itself and
    SnapshotValidationError for values with no JSON rendering.
    """
    return _clone(value, set())


def clone_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    # Same coercion json.dumps applies to non-string keys
    if key is None or isinstance(key, (bool, int, float)):
        return json.dumps(key)
    raise SnapshotValidationError(f"Cannot use {type(key).__name__} as a variable name")


def _clone_items(items: Iterable[Any], path: Set[int]) -> List[Any]:
    out = []
    for item in items:
        copied = _clone(item, path)
        out.append(None if copied is ABSENT else copied)
    return out


def _clone(value: Any, path: Set[int]) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if callable(value):
        return ABSENT
    if isinstance(value, Mapping):
        marker = id(value)
        if marker in path:
            raise CyclicValueError("Cannot clone a cyclic mapping")
        path.add(marker)
        try:
            out = {}
            for key, item in value.items():
                copied = _clone(item, path)
                if copied is ABSENT:
                    continue
                out[clone_key(key)] = copied
            return out
        finally:
            path.discard(marker)
    if isinstance(value, (list, tuple)):
        marker = id(value)
        if marker in path:
            raise CyclicValueError("Cannot clone a cyclic sequence")
        path.add(marker)
        try:
            return _clone_items(value, path)
        finally:
            path.discard(marker)
    if isinstance(value, (set, frozenset)):
        try:
            ordered = sorted(value)
        except TypeError:
            ordered = list(value)
        return _clone_items(ordered, path)
    raise SnapshotValidationError(f"Cannot clone value of type {type(value).__name__}")
