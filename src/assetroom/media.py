from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError


@dataclass(slots=True)
class ImageInfo:
    width: int
    height: int
    format: str | None


def probe_image(path: Path | str) -> ImageInfo | None:
    """Read a cover's dimensions without decoding pixel data.

    Returns ``None`` when the file is missing or is not an image Pillow can
    identify; covers are copied verbatim and may be anything.
    """
    target = Path(path)
    if not target.is_file():
        return None
    try:
        with Image.open(target) as img:
            width, height = img.size
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        return None
    return ImageInfo(width=int(width), height=int(height), format=fmt)
