from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from assetroom import layout as layout_mod
from assetroom.config import AppConfig
from assetroom.db import AssetStore
from assetroom.errors import CatalogClosed, InvalidArgument, NotFound, StorageIOError
from assetroom.filetypes import FileTypeFilter
from assetroom.models import AssetRecord, CatalogLayout, DeletedPaths, ImportedCover, SweepReport

logger = logging.getLogger(__name__)


def _clean_text(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidArgument(f"{field} must not be empty")
    return text


def _matches_query(record: AssetRecord, term: str) -> bool:
    hay = f"{record.name} {record.tags}".lower()
    return term in hay


class CatalogService:
    """User-facing catalog operations over one root folder at a time.

    File copies and database writes are sequenced so a failed operation does
    not leave files without rows: copies made by a failed add are removed, a
    cover imported for a failed update is removed, and a successful update
    drops the cover it replaced. Delete removes the row first and then cleans
    up files on a best-effort basis.
    """

    def __init__(self, config: AppConfig | None = None):
        self.config = config or AppConfig()
        self.store = AssetStore(journal_mode=self.config.catalog.journal_mode)
        self._layout: CatalogLayout | None = None

    @property
    def root(self) -> Path | None:
        return self._layout.root if self._layout else None

    @property
    def is_open(self) -> bool:
        return self._layout is not None and self.store.is_open

    def open_catalog(self, root: Path | str) -> dict[str, Any]:
        self.close()
        layout = layout_mod.ensure_layout(root)
        self.store.open(layout.db_path)
        self._layout = layout
        logger.info("opened catalog at %s", layout.root)

        info: dict[str, Any] = {
            "root": str(layout.root),
            "db_path": str(layout.db_path),
            "assets": self.store.count(),
        }
        if self.config.catalog.sweep_on_open:
            report = self.sweep_orphans(apply=False)
            info["orphan_files"] = len(report.orphan_files)
            info["missing_files"] = len(report.missing_files)
            if report.orphan_files or report.missing_files:
                logger.warning(
                    "catalog %s has %d orphan files and %d missing files",
                    layout.root,
                    len(report.orphan_files),
                    len(report.missing_files),
                )
        return info

    def close(self) -> None:
        self.store.close()
        self._layout = None

    def require_root(self, root: Path | str | None = None) -> CatalogLayout:
        if self._layout is None or not self.store.is_open:
            raise CatalogClosed()
        if root is not None and Path(root).expanduser().resolve() != self._layout.root:
            raise InvalidArgument(f"catalog open at {self._layout.root}, not {root}")
        return self._layout

    def list_assets(
        self,
        query: str | None = None,
        file_type: FileTypeFilter | str = FileTypeFilter.ALL,
    ) -> list[AssetRecord]:
        layout = self.require_root()
        try:
            kind = FileTypeFilter(file_type)
        except ValueError as exc:
            raise InvalidArgument(f"unknown file type filter: {file_type}") from exc
        rows = self.store.list(layout.root)
        term = (query or "").strip().lower()
        return [r for r in rows if (not term or _matches_query(r, term)) and kind.matches(r.asset_rel_path)]

    def get_asset(self, asset_id: str) -> AssetRecord:
        layout = self.require_root()
        record = self.store.get(asset_id, layout.root)
        if record is None:
            raise NotFound(asset_id)
        return record

    def import_cover(self, cover_path: Path | str) -> ImportedCover:
        layout = self.require_root()
        return layout_mod.import_cover(layout.root, cover_path)

    def add_asset(
        self,
        file_path: Path | str,
        cover_path: Path | str,
        name: str,
        tags: str,
    ) -> AssetRecord:
        layout = self.require_root()
        clean_name = _clean_text(name, "name")
        clean_tags = _clean_text(tags, "tags")
        for src in (Path(file_path).expanduser(), Path(cover_path).expanduser()):
            if not src.is_file():
                raise StorageIOError(f"source file does not exist: {src}")

        copied: list[str] = []
        try:
            cover = layout_mod.import_cover(layout.root, cover_path)
            copied.append(cover.abs_path)
            asset = layout_mod.copy_asset(layout.root, file_path)
            copied.append(asset.abs_path)
            self.store.insert(asset.id, clean_name, clean_tags, asset.rel_path, cover.rel_path)
        except Exception:
            for path in copied:
                self._discard(path)
            raise

        logger.info("added asset %s (%s)", asset.id, clean_name)
        return self.get_asset(asset.id)

    def update_asset(
        self,
        asset_id: str,
        name: str,
        tags: str,
        new_cover_path: Path | str | None = None,
    ) -> AssetRecord:
        layout = self.require_root()
        clean_name = _clean_text(name, "name")
        clean_tags = _clean_text(tags, "tags")
        current = self.get_asset(asset_id)

        cover: ImportedCover | None = None
        if new_cover_path is not None and str(new_cover_path).strip():
            cover = layout_mod.import_cover(layout.root, new_cover_path)

        try:
            self.store.update(asset_id, clean_name, clean_tags, cover.rel_path if cover else None)
        except Exception:
            if cover is not None:
                self._discard(cover.abs_path)
            raise

        if cover is not None and current.cover_rel_path != cover.rel_path:
            self._drop_replaced_cover(layout.root, current.cover_rel_path)
        logger.info("updated asset %s", asset_id)
        return self.get_asset(asset_id)

    def delete_asset(self, asset_id: str) -> DeletedPaths:
        layout = self.require_root()
        removed = self.store.delete(asset_id)
        for rel in (removed.asset_rel_path, removed.cover_rel_path):
            if rel:
                self._discard_rel(layout.root, rel)
        logger.info("deleted asset %s", asset_id)
        return removed

    def sweep_orphans(self, apply: bool = False) -> SweepReport:
        layout = self.require_root()
        referenced = self.store.referenced_paths()

        orphans: list[str] = []
        for path in layout_mod.iter_catalog_files(layout):
            rel = layout_mod.to_rel_path(layout.root, path)
            if rel not in referenced:
                orphans.append(rel)

        missing: list[str] = []
        for rel in sorted(referenced):
            try:
                target = layout_mod.resolve_rel_path(layout.root, rel)
            except InvalidArgument:
                missing.append(rel)
                continue
            if not target.is_file():
                missing.append(rel)

        removed: list[str] = []
        if apply:
            for rel in orphans:
                if self._discard_rel(layout.root, rel):
                    removed.append(rel)
        return SweepReport(orphan_files=orphans, missing_files=missing, removed=removed, applied=apply)

    def status(self) -> dict[str, Any]:
        layout = self.require_root()
        report = self.sweep_orphans(apply=False)
        return {
            "root": str(layout.root),
            "db_path": str(layout.db_path),
            "assets": self.store.count(),
            "orphan_files": len(report.orphan_files),
            "missing_files": len(report.missing_files),
        }

    def _drop_replaced_cover(self, root: Path, rel_path: str) -> None:
        # The update has already committed; failures here only leave a stray file.
        try:
            referenced = self.store.referenced_paths()
        except StorageIOError as exc:
            logger.warning("kept replaced cover %s: %s", rel_path, exc)
            return
        if rel_path not in referenced:
            self._discard_rel(root, rel_path)

    def _discard(self, path: Path | str) -> bool:
        try:
            return layout_mod.remove_if_exists(path)
        except StorageIOError as exc:
            logger.warning("could not remove %s: %s", path, exc)
            return False

    def _discard_rel(self, root: Path, rel_path: str) -> bool:
        try:
            target = layout_mod.resolve_rel_path(root, rel_path)
        except InvalidArgument as exc:
            logger.warning("skipping cleanup of %r: %s", rel_path, exc)
            return False
        return self._discard(target)
