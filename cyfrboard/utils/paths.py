# Rev 0.2.0

"""Paths and XDG helpers (Rev 0.2.0)
- Follows the XDG Base Directory layout
- Logs live under the state dir, settings.json under the config dir
- Nothing is persisted locally besides logs and UI settings; all data is remote
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "cyfrboard"


def _xdg(var: str, fallback: Path) -> Path:
    return Path(os.environ.get(var, fallback)).expanduser()


XDG_STATE_HOME = _xdg("XDG_STATE_HOME", Path.home() / ".local" / "state")
XDG_CONFIG_HOME = _xdg("XDG_CONFIG_HOME", Path.home() / ".config")


STATE_DIR = XDG_STATE_HOME / APP_NAME
LOGS_DIR = STATE_DIR / "logs"
CONFIG_DIR = XDG_CONFIG_HOME / APP_NAME


def logs_dir() -> Path:
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    return LOGS_DIR


def config_dir() -> Path:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR

