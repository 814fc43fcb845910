from __future__ import annotations

from pydantic import BaseModel

from assetroom.filetypes import ext_label, file_type
from assetroom.media import ImageInfo
from assetroom.models import AssetRecord, SweepReport


class CoverOutput(BaseModel):
    rel_path: str
    path: str
    width: int | None = None
    height: int | None = None
    format: str | None = None


class AssetOutput(BaseModel):
    id: str
    name: str
    tags: list[str] = []
    tags_raw: str
    rel_path: str
    path: str
    file_type: str
    ext_label: str
    created_at: int
    cover: CoverOutput


class SweepOutput(BaseModel):
    applied: bool
    orphan_files: list[str] = []
    missing_files: list[str] = []
    removed: list[str] = []


def asset_output(record: AssetRecord, cover_info: ImageInfo | None = None) -> AssetOutput:
    cover = CoverOutput(rel_path=record.cover_rel_path, path=record.cover_path)
    if cover_info is not None:
        cover.width = cover_info.width
        cover.height = cover_info.height
        cover.format = cover_info.format
    return AssetOutput(
        id=record.id,
        name=record.name,
        tags=record.tag_list,
        tags_raw=record.tags,
        rel_path=record.asset_rel_path,
        path=record.asset_path,
        file_type=file_type(record.asset_rel_path),
        ext_label=ext_label(record.asset_rel_path),
        created_at=record.created_at,
        cover=cover,
    )


def sweep_output(report: SweepReport) -> SweepOutput:
    return SweepOutput(
        applied=report.applied,
        orphan_files=report.orphan_files,
        missing_files=report.missing_files,
        removed=report.removed,
    )
