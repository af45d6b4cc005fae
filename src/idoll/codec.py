from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Sequence, Union

from jsonschema import Draft202012Validator, exceptions as js_exceptions

from .errors import SnapshotValidationError
from .models import Snapshot, is_well_formed

BOM = "\ufeff"

SNAPSHOT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["stats"],
    "properties": {
        "version": {"type": "string"},
        "stats": {"type": "object"},
        "temps": {"type": "object"},
        "lineNum": {"type": "integer"},
        "indent": {"type": "integer"},
        "currentSceneIndex": {"type": ["integer", "null"]},
        "pastLines": {"type": "array"},
        "recentChecks": {"type": "object"},
    },
}

_validator = Draft202012Validator(SNAPSHOT_SCHEMA)


def _format_errors(errors: Sequence[js_exceptions.ValidationError]) -> str:
    lines = ["Snapshot document failed validation:"]
    for err in errors:
        where = ".".join(str(p) for p in err.absolute_path) or "root"
        lines.append(f" - At {where}: {err.message}")
    return "\n".join(lines)


def validate_document(data: Any) -> Dict[str, Any]:
    """Check a decoded document's shape and the admissibility gate."""
    errors: List[js_exceptions.ValidationError] = sorted(
        _validator.iter_errors(data), key=lambda e: list(e.absolute_path)
    )
    if errors:
        raise SnapshotValidationError(_format_errors(errors))
    if not is_well_formed(data):
        raise SnapshotValidationError("Snapshot has neither stats.sceneName nor currentSceneIndex")
    return data


def encode_snapshot(snapshot: Union[Snapshot, Mapping[str, Any]], *, pretty: bool = True) -> str:
    """Encode a snapshot document.

    The pretty form (indent 2, sorted keys) is the exported file format and
    is byte-stable for a given value regardless of key insertion order.
    """
    data = snapshot.to_dict() if isinstance(snapshot, Snapshot) else snapshot
    if pretty:
        return json.dumps(data, ensure_ascii=False, sort_keys=True, indent=2)
    return json.dumps(data, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def parse_document(text: str) -> Any:
    """Parse snapshot text into a raw document without admissibility checks."""
    if not isinstance(text, str):
        raise SnapshotValidationError("Snapshot text must be a string")
    if text.startswith(BOM):
        text = text[len(BOM):]
    if not text.strip():
        raise SnapshotValidationError("Snapshot text is empty")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotValidationError(f"Invalid JSON: {e}") from e


def decode_document(text: str) -> Dict[str, Any]:
    """Parse and validate snapshot text, returning the raw document."""
    return validate_document(parse_document(text))


def decode_snapshot(text: str) -> Snapshot:
    return Snapshot.from_dict(decode_document(text))
