from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from assetroom.paths import config_root

VIEW_MODES = ("grid", "list")


@dataclass(slots=True)
class UIConfig:
    show_logo: bool = True
    view_mode: str = "list"
    page_size: int = 0


@dataclass(slots=True)
class CatalogConfig:
    journal_mode: str = "WAL"
    sweep_on_open: bool = False


@dataclass(slots=True)
class AppConfig:
    default_root: Path | None = None
    ui: UIConfig = field(default_factory=UIConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def _to_config(data: dict[str, Any]) -> AppConfig:
    ui = UIConfig(**data.get("ui", {}))
    if ui.view_mode not in VIEW_MODES:
        ui.view_mode = "list"
    catalog = CatalogConfig(**data.get("catalog", {}))
    raw_root = data.get("default_root")
    return AppConfig(
        default_root=Path(str(raw_root)).expanduser() if raw_root else None,
        ui=ui,
        catalog=catalog,
    )


def default_config_path() -> Path:
    return config_root() / "config.yaml"


def load_config(config_path: Path | None = None, overrides: dict[str, Any] | None = None) -> AppConfig:
    path = config_path or default_config_path()
    base: dict[str, Any] = {}
    if path.exists():
        loaded = yaml.safe_load(path.read_text())
        if isinstance(loaded, dict):
            base = loaded
    if overrides:
        base = _merge(base, overrides)
    return _to_config(base)


def write_default_config(path: Path | None = None) -> Path:
    target = path or default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists():
        return target
    target.write_text(
        yaml.safe_dump(
            {
                "default_root": None,
                "ui": {"show_logo": True, "view_mode": "list", "page_size": 0},
                "catalog": {"journal_mode": "WAL", "sweep_on_open": False},
            },
            sort_keys=False,
        )
    )
    return target
