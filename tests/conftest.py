import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from idoll.models import LiveScene, LiveState  # noqa: E402

CATALOG = ["intro", "ch1", "ch2"]


class FakeHost:
    """Records calls to the interpreter's resume primitives."""

    def __init__(self) -> None:
        self.calls = []
        self.restored = []

    def clear_screen(self, continuation) -> None:
        self.calls.append("clear")
        continuation()

    def restore_game(self, state, secondary, user_restored) -> None:
        self.calls.append("restore")
        self.restored.append((state, secondary, user_restored))


@pytest.fixture()
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture()
def make_live(host):
    def _make(stats=None, scene=None, **kwargs) -> LiveState:
        bank = dict(stats) if stats is not None else {}
        if scene is not None:
            bank["scene"] = scene
        kwargs.setdefault("scene_list", list(CATALOG))
        kwargs.setdefault("version", "1.2.0")
        kwargs.setdefault("clear_screen", host.clear_screen)
        kwargs.setdefault("restore_game", host.restore_game)
        return LiveState(stats=bank, **kwargs)

    return _make


@pytest.fixture()
def ch1_scene() -> LiveScene:
    return LiveScene(
        name="ch1",
        labels={"start": 0, "mid": 5},
        line_num=7,
        indent=2,
        temps={"met_guide": True},
    )
