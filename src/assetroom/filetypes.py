from __future__ import annotations

from enum import Enum
from pathlib import Path

FILE_TYPE_EXTS: dict[str, frozenset[str]] = {
    "3d": frozenset({"fbx", "obj", "glb", "gltf", "blend"}),
    "image": frozenset({"png", "jpg", "jpeg", "webp", "tga"}),
    "video": frozenset({"mp4", "mov", "avi", "webm"}),
    "audio": frozenset({"wav", "mp3", "ogg"}),
    "document": frozenset({"pdf", "doc", "docx"}),
}


class FileTypeFilter(str, Enum):
    ALL = "all"
    THREE_D = "3d"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"

    @property
    def label(self) -> str:
        return _LABELS[self]

    def matches(self, path: str | Path) -> bool:
        return self is FileTypeFilter.ALL or file_type(path) == self.value


_LABELS = {
    FileTypeFilter.ALL: "All",
    FileTypeFilter.THREE_D: "3D (FBX, OBJ)",
    FileTypeFilter.IMAGE: "Images",
    FileTypeFilter.VIDEO: "Video",
    FileTypeFilter.AUDIO: "Audio",
    FileTypeFilter.DOCUMENT: "Documents",
}


def file_type(path: str | Path) -> str:
    ext = Path(path).suffix.lstrip(".").lower()
    if not ext:
        return "other"
    for kind, exts in FILE_TYPE_EXTS.items():
        if ext in exts:
            return kind
    return ext


def ext_label(path: str | Path) -> str:
    ext = Path(path).suffix.lstrip(".")
    return (ext or "file").upper()
