from __future__ import annotations

from pathlib import Path
import os

APP_NAME = "assetroom"


def config_root() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        base = Path(xdg)
    else:
        base = Path.home() / ".config"
    root = base / APP_NAME
    root.mkdir(parents=True, exist_ok=True)
    return root


def state_root() -> Path:
    xdg = os.environ.get("XDG_STATE_HOME")
    if xdg:
        base = Path(xdg)
    else:
        base = Path.home() / ".local" / "state"
    root = base / APP_NAME
    root.mkdir(parents=True, exist_ok=True)
    return root


def default_bookmark_path() -> Path:
    return state_root() / "root.yaml"
