from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

logger = logging.getLogger(__name__)


def _valid_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def scene_index(
    catalog: Optional[Sequence[str]],
    name: Any,
    cached_index: Any = None,
) -> Optional[int]:
    """Map a scene name to its ordinal position in the scene catalog.

    Scene objects do not survive an interpreter restart, so identity is
    stored as a position in the host's ordered catalog. When the catalog is
    unavailable or does not list ``name``, a previously cached index is used
    if it is a non-negative integer. Returns None when unresolved.
    """
    if name and catalog is not None:
        try:
            return list(catalog).index(name)
        except ValueError:
            logger.debug("Scene %r not found in catalog", name)
    if _valid_index(cached_index):
        return cached_index
    return None


def scene_name_at(catalog: Optional[Sequence[str]], index: Any) -> Optional[str]:
    """Return the catalog entry at ``index``, or None if out of range."""
    if catalog is None or not _valid_index(index):
        return None
    entries = list(catalog)
    if index >= len(entries):
        return None
    return entries[index]
