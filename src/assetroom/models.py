from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class AssetRecord:
    id: str
    name: str
    tags: str
    asset_rel_path: str
    cover_rel_path: str
    created_at: int
    asset_path: str
    cover_path: str

    @property
    def tag_list(self) -> list[str]:
        return [t.strip() for t in self.tags.split(",") if t.strip()]


@dataclass(slots=True)
class DeletedPaths:
    asset_rel_path: str | None
    cover_rel_path: str | None


@dataclass(slots=True, frozen=True)
class CatalogLayout:
    root: Path
    db_dir: Path
    assets_dir: Path
    covers_dir: Path
    db_path: Path


@dataclass(slots=True)
class CopiedAsset:
    id: str
    rel_path: str
    abs_path: str


@dataclass(slots=True)
class ImportedCover:
    rel_path: str
    abs_path: str
    ext: str


@dataclass(slots=True)
class SweepReport:
    orphan_files: list[str]
    missing_files: list[str]
    removed: list[str]
    applied: bool = False
