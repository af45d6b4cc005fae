from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml
from pydantic import ValidationError

from .checkpoint import resolve_checkpoint
from .codec import decode_document, encode_snapshot
from .config import SaveSettings
from .errors import IdollError
from .logging_config import configure_logging
from .models import CHECKPOINT_FIELD, SCENE_NAME_FIELD
from .storage import read_import

logger = logging.getLogger(__name__)


def snapshot_summary(doc: Mapping[str, Any]) -> Dict[str, Any]:
    stats = doc.get("stats") or {}
    return {
        "version": doc.get("version"),
        "sceneName": stats.get(SCENE_NAME_FIELD),
        "checkpoint": stats.get(CHECKPOINT_FIELD, ""),
        "currentSceneIndex": doc.get("currentSceneIndex"),
        "lineNum": doc.get("lineNum", 0),
    }


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="idoll-save", description="Inspect interpreter snapshot files")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    sub = parser.add_subparsers(dest="command", required=True)

    p_inspect = sub.add_parser("inspect", help="Validate a snapshot file and print its resume position")
    p_inspect.add_argument("path", type=Path)

    p_format = sub.add_parser("format", help="Re-emit a snapshot file in canonical pretty form")
    p_format.add_argument("path", type=Path)

    p_label = sub.add_parser("checkpoint", help="Resolve the label at or before a line")
    p_label.add_argument("labels", help='Label table as JSON, e.g. \'{"start": 0, "mid": 5}\'')
    p_label.add_argument("line", type=int)
    return parser.parse_args(argv)


def _load(path: Path) -> Dict[str, Any]:
    return decode_document(read_import(path))


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = SaveSettings.load(args.config)
    except (ValidationError, yaml.YAMLError) as exc:
        print(f"error: invalid settings: {exc}", file=sys.stderr)
        return 1
    configure_logging(settings, debug=args.debug)

    try:
        if args.command == "inspect":
            doc = _load(args.path)
            print(json.dumps(snapshot_summary(doc), indent=2, sort_keys=True))
        elif args.command == "format":
            print(encode_snapshot(_load(args.path)))
        elif args.command == "checkpoint":
            print(resolve_checkpoint(json.loads(args.labels), args.line))
    except IdollError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as exc:
        print(f"error: invalid label table: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
