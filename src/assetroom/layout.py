from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
import shutil
from typing import Iterator

from assetroom.errors import InvalidArgument, RootNotFound, StorageIOError
from assetroom.ids import new_asset_id, new_cover_token
from assetroom.models import CatalogLayout, CopiedAsset, ImportedCover

logger = logging.getLogger(__name__)

DB_DIRNAME = "asr-db"
ASSETS_DIRNAME = "assets"
COVERS_DIRNAME = "covers"
DB_FILENAME = "assetroom.sqlite"

COVER_EXTS = {"png": "png", "webp": "webp", "jpg": "jpg", "jpeg": "jpg"}
DEFAULT_COVER_EXT = "jpg"


def layout_for(root: Path) -> CatalogLayout:
    db_dir = root / DB_DIRNAME
    return CatalogLayout(
        root=root,
        db_dir=db_dir,
        assets_dir=root / ASSETS_DIRNAME,
        covers_dir=root / COVERS_DIRNAME,
        db_path=db_dir / DB_FILENAME,
    )


def ensure_layout(root: Path | str) -> CatalogLayout:
    root = Path(root).expanduser()
    if not root.is_dir():
        raise RootNotFound(root)
    layout = layout_for(root.resolve())
    try:
        for d in (layout.db_dir, layout.assets_dir, layout.covers_dir):
            d.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageIOError(f"cannot create catalog folders under {root}: {exc}") from exc
    return layout


def source_ext(path: Path | str) -> str:
    return Path(path).suffix.lstrip(".").lower()


def normalize_cover_ext(path: Path | str) -> str:
    return COVER_EXTS.get(source_ext(path), DEFAULT_COVER_EXT)


def to_rel_path(root: Path, path: Path) -> str:
    try:
        rel = path.relative_to(root)
    except ValueError as exc:
        raise InvalidArgument(f"{path} is not inside {root}") from exc
    return rel.as_posix()


def resolve_rel_path(root: Path, rel_path: str) -> Path:
    rel = PurePosixPath(rel_path.replace("\\", "/"))
    if not rel_path.strip() or rel.is_absolute() or ".." in rel.parts:
        raise InvalidArgument(f"not a catalog-relative path: {rel_path!r}")
    return root.joinpath(*rel.parts)


def _copy_into(source: Path, dst: Path) -> None:
    if not source.is_file():
        raise StorageIOError(f"source file does not exist: {source}")
    # Destination names are unique per attempt; anything already there is stale.
    remove_if_exists(dst)
    try:
        shutil.copy2(source, dst)
    except OSError as exc:
        dst.unlink(missing_ok=True)
        raise StorageIOError(f"copy {source} -> {dst} failed: {exc}") from exc


def copy_asset(root: Path | str, source: Path | str) -> CopiedAsset:
    layout = ensure_layout(root)
    source = Path(source).expanduser()
    asset_id = new_asset_id()
    ext = source_ext(source)
    file_name = f"asset_{asset_id}.{ext}" if ext else f"asset_{asset_id}"
    dst = layout.assets_dir / file_name
    _copy_into(source, dst)
    logger.debug("copied asset %s -> %s", source, dst)
    return CopiedAsset(id=asset_id, rel_path=f"{ASSETS_DIRNAME}/{file_name}", abs_path=str(dst))


def import_cover(root: Path | str, source: Path | str) -> ImportedCover:
    layout = ensure_layout(root)
    source = Path(source).expanduser()
    ext = normalize_cover_ext(source)
    file_name = f"cover_{new_cover_token()}.{ext}"
    dst = layout.covers_dir / file_name
    _copy_into(source, dst)
    logger.debug("imported cover %s -> %s", source, dst)
    return ImportedCover(rel_path=f"{COVERS_DIRNAME}/{file_name}", abs_path=str(dst), ext=ext)


def remove_if_exists(path: Path | str) -> bool:
    target = Path(path)
    if not target.exists() and not target.is_symlink():
        return False
    try:
        target.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise StorageIOError(f"cannot remove {target}: {exc}") from exc
    return True


def iter_catalog_files(layout: CatalogLayout) -> Iterator[Path]:
    for folder in (layout.assets_dir, layout.covers_dir):
        if not folder.is_dir():
            continue
        for path in sorted(folder.iterdir()):
            if path.is_file() or path.is_symlink():
                yield path
