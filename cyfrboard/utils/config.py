# cyfrboard/utils/config.py
# Rev 0.2.0
from __future__ import annotations
import copy
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .paths import config_dir

log = logging.getLogger(__name__)

SETTINGS_NAME = "settings.json"

_DEFAULTS: Dict[str, Any] = {
    "main_window": {
        "width": 1200,
        "height": 760,
        "is_maximized": False,
    },
    "backend": {
        "url": "",
        "anon_key": "",
        "timeout": 10.0,
    },
}


class ConfigError(RuntimeError):
    """Raised when the backend connection settings are unusable."""


@dataclass(frozen=True)
class BackendConfig:
    url: str
    anon_key: str
    timeout: float = 10.0


def settings_file() -> Path:
    return config_dir() / SETTINGS_NAME


def _merge(base: Dict[str, Any], over: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in over.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_file()
    if path.exists():
        try:
            return _merge(_DEFAULTS, json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as exc:
            log.warning("Ignoring unreadable settings file %s: %s", path, exc)
    return copy.deepcopy(_DEFAULTS)


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def backend_config(settings: Dict[str, Any], env: Optional[Dict[str, str]] = None) -> BackendConfig:
    """Resolve backend settings; environment variables win over settings.json."""
    env = os.environ if env is None else env
    backend = settings.get("backend") or {}
    url = (env.get("CYFR_SUPABASE_URL") or backend.get("url") or "").strip().rstrip("/")
    key = (env.get("CYFR_SUPABASE_ANON_KEY") or backend.get("anon_key") or "").strip()
    raw_timeout = env.get("CYFR_HTTP_TIMEOUT") or backend.get("timeout") or 10.0
    try:
        timeout = float(raw_timeout)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid HTTP timeout: {raw_timeout!r}")

    if not url or not key:
        raise ConfigError(
            "Backend is not configured. Set CYFR_SUPABASE_URL and CYFR_SUPABASE_ANON_KEY "
            f"or fill the 'backend' section of {settings_file()}."
        )
    return BackendConfig(url=url, anon_key=key, timeout=timeout)
