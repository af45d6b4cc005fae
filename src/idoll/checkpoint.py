from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .models import scene_attr


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def resolve_checkpoint(labels: Any, line_num: Any) -> str:
    """Return the label defined at or before ``line_num``.

    ``labels`` maps label name to the source line where it is defined. The
    label with the greatest line not exceeding ``line_num`` wins. An empty,
    absent or malformed table, or a line preceding every label, gives ``""``.
    """
    if not isinstance(labels, Mapping) or not _is_number(line_num):
        return ""
    best_line = -1
    best_label = ""
    for name, line in labels.items():
        if not _is_number(line):
            continue
        if best_line < line <= line_num:
            best_line = line
            best_label = str(name)
    return best_label


def current_label(scene: Any) -> str:
    """Resolve the checkpoint label for a live scene object."""
    if scene is None:
        return ""
    return resolve_checkpoint(scene_attr(scene, "labels"), scene_attr(scene, "line_num"))
