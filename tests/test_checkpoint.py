from __future__ import annotations

from idoll.checkpoint import current_label, resolve_checkpoint
from idoll.models import LiveScene

LABELS = {"a": 0, "b": 5, "c": 12}


def test_nearest_preceding_label():
    assert resolve_checkpoint(LABELS, 7) == "b"
    assert resolve_checkpoint(LABELS, 12) == "c"
    assert resolve_checkpoint(LABELS, 100) == "c"


def test_label_on_current_line_counts():
    assert resolve_checkpoint(LABELS, 0) == "a"
    assert resolve_checkpoint(LABELS, 5) == "b"


def test_no_label_qualifies():
    assert resolve_checkpoint(LABELS, -1) == ""
    assert resolve_checkpoint({}, 7) == ""


def test_malformed_inputs_return_empty():
    assert resolve_checkpoint(None, 7) == ""
    assert resolve_checkpoint(["a", "b"], 7) == ""
    assert resolve_checkpoint(LABELS, None) == ""
    assert resolve_checkpoint(LABELS, "7") == ""


def test_malformed_label_lines_are_skipped():
    assert resolve_checkpoint({"bad": "3", "ok": 2, "flag": True}, 4) == "ok"


def test_current_label_reads_scene_object_and_mapping():
    scene = LiveScene(name="ch1", labels={"start": 0, "mid": 5}, line_num=7)
    assert current_label(scene) == "mid"
    assert current_label({"labels": {"start": 0, "mid": 5}, "lineNum": 3}) == "start"
    assert current_label(None) == ""
