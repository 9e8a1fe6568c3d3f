from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(os.path.expanduser("~")) / ".envdiag" / "config.json"

DEFAULTS: dict[str, Any] = {
    "launcher_name": "dotnet",
    "path_variable": "PATH",
    "log_level": "WARNING",
}


def config_path() -> Path:
    return Path(os.environ.get("ENVDIAG_CONFIG") or DEFAULT_CONFIG_PATH)


def load_config() -> dict[str, Any]:
    """DEFAULTS <- файл конфига <- переменные окружения ENVDIAG_*. Файл не создаётся."""
    path = config_path()
    data: dict[str, Any] = {}
    if path.exists():
        try:
            loaded = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(loaded, dict):
                data = loaded
        except (OSError, ValueError) as err:
            log.warning("Config %s is unreadable, using defaults: %s", path, err)
    merged = {**DEFAULTS, **{k: v for k, v in data.items() if k in DEFAULTS}}
    # ENV overlay (приоритетнее файла)
    env_overlay = {
        "launcher_name": os.getenv("ENVDIAG_LAUNCHER") or merged["launcher_name"],
        "path_variable": os.getenv("ENVDIAG_PATH_VARIABLE") or merged["path_variable"],
        "log_level": os.getenv("ENVDIAG_LOG_LEVEL") or merged["log_level"],
    }
    merged.update(env_overlay)
    return merged


def save_config(cfg: dict[str, Any]) -> Path:
    path = config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    known = {k: cfg[k] for k in DEFAULTS if k in cfg}
    path.write_text(json.dumps(known, ensure_ascii=False, indent=2), encoding="utf-8")
    return path
