from __future__ import annotations

import json
from pathlib import Path

import pytest

from idoll.config import SaveSettings
from idoll.models import LiveScene
from idoll.service import ImportResult, SaveService
from idoll.storage import MemoryStore


@pytest.fixture()
def settings(tmp_path: Path) -> SaveSettings:
    return SaveSettings(save_dir=tmp_path / "saves")


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


def test_save_then_load_restores_position(make_live, ch1_scene, host, store, settings):
    service = SaveService(make_live({"gold": 5}, ch1_scene), store=store, settings=settings)
    assert service.save() is True
    assert store.get_item("idoll_save_system")

    # A fresh session of a newer build with an extra persistent field
    restarted = SaveService(make_live({"gold": 0, "karma": 1}), store=store, settings=settings)
    assert restarted.load() is True

    assert host.calls == ["clear", "restore"]
    state, secondary, user_restored = host.restored[0]
    assert state["stats"]["sceneName"] == "ch1"
    assert state["stats"]["_idoll_checkpoint"] == "mid"
    assert state["stats"]["gold"] == 5
    assert state["stats"]["karma"] == 1
    assert state["lineNum"] == 0
    assert secondary is None
    assert user_restored is True


def test_save_with_callback(make_live, ch1_scene, store, settings):
    results = []
    service = SaveService(make_live({}, ch1_scene), store=store, settings=settings)
    assert service.save(results.append) is None
    assert results == [True]


def test_save_without_scene_reports_failure(make_live, store, settings):
    results = []
    service = SaveService(make_live({"gold": 1}), store=store, settings=settings)
    service.save(results.append)
    assert results == [False]
    assert store.get_item("idoll_save_system") is None


def test_save_reports_store_failure(make_live, ch1_scene, settings):
    class BrokenStore(MemoryStore):
        def set_item(self, key, value):
            raise OSError("quota exceeded")

    service = SaveService(make_live({}, ch1_scene), store=BrokenStore(), settings=settings)
    assert service.save() is False


def test_load_with_nothing_saved(make_live, host, store, settings):
    service = SaveService(make_live({}), store=store, settings=settings)
    assert service.load() is False
    assert host.calls == []


def test_load_rejects_corrupt_save(make_live, host, store, settings):
    store.set_item("idoll_save_system", "{ not json")
    assert SaveService(make_live({}), store=store, settings=settings).load() is False
    assert host.calls == []


def test_load_rejected_when_host_lacks_primitives(make_live, store, settings):
    store.set_item("idoll_save_system", json.dumps({"stats": {"sceneName": "ch1"}}))
    service = SaveService(make_live({}, clear_screen=None), store=store, settings=settings)
    assert service.load() is False


def test_file_store_is_default(make_live, ch1_scene, settings):
    service = SaveService(make_live({}, ch1_scene), settings=settings)
    assert service.save() is True
    assert (settings.save_dir / "idoll_save_system.json").exists()


def test_export_to_directory(make_live, ch1_scene, tmp_path: Path, settings):
    service = SaveService(make_live({"gold": 5}, ch1_scene), store=MemoryStore(), settings=settings)
    assert service.export_to_file(tmp_path) is True

    text = (tmp_path / "idoll-save.json").read_text(encoding="utf-8")
    assert text.startswith("{\n  ")
    data = json.loads(text)
    assert data["stats"]["_idoll_checkpoint"] == "mid"
    assert data["currentSceneIndex"] == 1


def test_export_without_state_fails(make_live, tmp_path: Path, settings):
    results = []
    service = SaveService(make_live({}), store=MemoryStore(), settings=settings)
    assert service.export_to_file(tmp_path, results.append) is None
    assert results == [False]
    assert not (tmp_path / "idoll-save.json").exists()


def test_export_then_import_file(make_live, ch1_scene, host, tmp_path: Path, settings):
    exporter = SaveService(make_live({"gold": 5}, ch1_scene), store=MemoryStore(), settings=settings)
    exporter.export_to_file(tmp_path / "save.json")

    outcomes = []
    importer = SaveService(make_live({}), store=MemoryStore(), settings=settings)
    result = importer.import_from_file(tmp_path / "save.json", lambda ok, reason: outcomes.append((ok, reason)))

    assert result == ImportResult(True, None)
    assert outcomes == [(True, None)]
    assert host.restored[0][0]["stats"]["sceneName"] == "ch1"


def test_import_cancelled(make_live, settings):
    outcomes = []
    service = SaveService(make_live({}), store=MemoryStore(), settings=settings)
    service.import_from_file(None, lambda ok, reason: outcomes.append((ok, reason)))
    assert outcomes == [(False, "cancelled")]


def test_import_read_error_and_empty(make_live, tmp_path: Path, settings):
    service = SaveService(make_live({}), store=MemoryStore(), settings=settings)
    assert service.import_from_file(tmp_path / "missing.json") == ImportResult(False, "read_error")

    empty = tmp_path / "empty.json"
    empty.write_text("", encoding="utf-8")
    assert service.import_from_file(empty) == ImportResult(False, "empty")


def test_import_from_json(make_live, host, settings):
    service = SaveService(make_live({}), store=MemoryStore(), settings=settings)
    assert service.import_from_json("") is False
    assert service.import_from_json("   ") is False
    assert service.import_from_json(None) is False
    assert service.import_from_json('{"stats": {}}') is False
    assert service.import_from_json("\ufeff" + '{"stats": {"sceneName": "ch2"}}') is True
    assert host.restored[-1][0]["stats"]["sceneName"] == "ch2"


def test_render_scene_survives_host_failure(make_live, settings):
    def exploding_restore(state, secondary, flag):
        raise RuntimeError("renderer crashed")

    service = SaveService(make_live({}, restore_game=exploding_restore), store=MemoryStore(), settings=settings)
    assert service.render_scene({"stats": {"sceneName": "ch1"}}) is False


def test_live_state_can_be_provided_lazily(make_live, store, settings):
    sessions = [make_live({}, LiveScene(name="intro"))]
    service = SaveService(lambda: sessions[-1], store=store, settings=settings)
    assert service.get_current_scene_index() == 0

    sessions.append(make_live({}, LiveScene(name="ch2")))
    assert service.get_current_scene_index() == 2
    assert service.get_full_state().scene_name == "ch2"


def test_save_and_reload_bank_with_int_key(make_live, ch1_scene, host, store, settings):
    service = SaveService(make_live({1: "x", "gold": 2}, ch1_scene), store=store, settings=settings)
    assert service.save() is True
    assert json.loads(store.get_item("idoll_save_system"))["stats"]["1"] == "x"

    assert SaveService(make_live({}), store=store, settings=settings).load() is True
    state = host.restored[0][0]
    assert state["stats"]["1"] == "x"
    assert state["stats"]["gold"] == 2


def test_save_and_export_bank_with_set(make_live, ch1_scene, store, settings, tmp_path: Path):
    service = SaveService(make_live({"visited": {"ch1", "intro"}}, ch1_scene), store=store, settings=settings)
    assert service.save() is True
    assert json.loads(store.get_item("idoll_save_system"))["stats"]["visited"] == ["ch1", "intro"]
    assert service.export_to_file(tmp_path) is True
