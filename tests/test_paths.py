# tests/test_paths.py
from __future__ import annotations

from cyfrboard.utils import paths


def test_logs_dir_is_created_on_first_use(tmp_path, monkeypatch):
    target = tmp_path / "state" / "cyfrboard" / "logs"
    monkeypatch.setattr(paths, "LOGS_DIR", target)

    assert paths.logs_dir() == target
    assert target.is_dir()


def test_config_dir_is_created_on_first_use(tmp_path, monkeypatch):
    target = tmp_path / "config" / "cyfrboard"
    monkeypatch.setattr(paths, "CONFIG_DIR", target)

    assert paths.config_dir() == target
    assert target.is_dir()
    # second call on an existing directory
    assert paths.config_dir() == target


def test_logs_live_under_the_state_dir():
    assert paths.LOGS_DIR.parent == paths.STATE_DIR
