from __future__ import annotations

import logging
from pathlib import Path

import yaml

from assetroom.paths import default_bookmark_path

logger = logging.getLogger(__name__)


class RootBookmark:
    """Remembers the last catalog root between runs."""

    key = "root"

    def __init__(self, path: Path | None = None):
        self.path = path or default_bookmark_path()

    def save(self, root: Path) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(yaml.safe_dump({self.key: str(Path(root).expanduser().resolve())}))

    def load(self) -> Path | None:
        if not self.path.exists():
            return None
        try:
            data = yaml.safe_load(self.path.read_text())
        except yaml.YAMLError:
            logger.warning("ignoring unreadable bookmark file %s", self.path)
            return None
        if not isinstance(data, dict) or not data.get(self.key):
            return None
        root = Path(str(data[self.key]))
        if not root.is_dir():
            return None
        return root

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
