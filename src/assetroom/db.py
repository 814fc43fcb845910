from __future__ import annotations

from contextlib import contextmanager
import logging
from pathlib import Path
import sqlite3
from typing import Iterator

from assetroom.errors import CatalogClosed, ConstraintViolation, InvalidArgument, NotFound, StorageIOError
from assetroom.models import AssetRecord, DeletedPaths
from assetroom.util.time import now_epoch

logger = logging.getLogger(__name__)

# Column types match catalogs written by earlier releases; created_at stays TEXT.
SETUP_SQL = """
CREATE TABLE IF NOT EXISTS assets (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  tags TEXT NOT NULL,
  asset_rel_path TEXT NOT NULL,
  cover_rel_path TEXT NOT NULL,
  created_at TEXT NOT NULL
);
"""

JOURNAL_MODES = {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}

ASSET_COLUMNS = "id, name, tags, asset_rel_path, cover_rel_path, created_at"

# Numeric ordering; a plain TEXT sort breaks once timestamps change digit width.
LIST_SQL = f"""
SELECT {ASSET_COLUMNS}
FROM assets
ORDER BY CAST(created_at AS INTEGER) DESC, rowid DESC
"""


def _table_exists(conn: sqlite3.Connection, name: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
        (name,),
    ).fetchone()
    return row is not None


def _require_text(value: str, field: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgument(f"{field} must not be empty")
    return value


def _update_name_tags(conn: sqlite3.Connection, asset_id: str, name: str, tags: str) -> int:
    cur = conn.execute(
        "UPDATE assets SET name = ?, tags = ? WHERE id = ?",
        (name, tags, asset_id),
    )
    return cur.rowcount


def _update_cover(conn: sqlite3.Connection, asset_id: str, cover_rel_path: str) -> None:
    conn.execute(
        "UPDATE assets SET cover_rel_path = ? WHERE id = ?",
        (cover_rel_path, asset_id),
    )


def _to_record(row: sqlite3.Row, root: Path) -> AssetRecord:
    asset_rel = str(row["asset_rel_path"])
    cover_rel = str(row["cover_rel_path"])
    try:
        created_at = int(row["created_at"])
    except (TypeError, ValueError):
        created_at = 0
    return AssetRecord(
        id=str(row["id"]),
        name=str(row["name"]),
        tags=str(row["tags"]),
        asset_rel_path=asset_rel,
        cover_rel_path=cover_rel,
        created_at=created_at,
        asset_path=str(root / asset_rel),
        cover_path=str(root / cover_rel),
    )


@contextmanager
def _translate_errors(op: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.IntegrityError as exc:
        raise ConstraintViolation(f"{op}: {exc}") from exc
    except sqlite3.Error as exc:
        raise StorageIOError(f"{op}: {exc}") from exc


class AssetStore:
    """The catalog database: one SQLite file holding the ``assets`` table.

    A single connection is kept for the lifetime of an open catalog. It runs in
    autocommit mode, so each statement commits on its own and ``update`` is the
    only operation grouped under an explicit transaction.
    """

    def __init__(self, journal_mode: str = "WAL"):
        mode = journal_mode.upper()
        if mode not in JOURNAL_MODES:
            raise InvalidArgument(f"unsupported journal mode: {journal_mode}")
        self.journal_mode = mode
        self._conn: sqlite3.Connection | None = None
        self._path: Path | None = None

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise CatalogClosed("asset store is not open")
        return self._conn

    def open(self, path: Path | str) -> None:
        self.close()
        path = Path(path)
        with _translate_errors("open"):
            conn = sqlite3.connect(path, isolation_level=None)
            try:
                conn.row_factory = sqlite3.Row
                conn.execute(f"PRAGMA journal_mode = {self.journal_mode}")
                conn.executescript(SETUP_SQL)
            except sqlite3.Error:
                conn.close()
                raise
        self._conn = conn
        self._path = path
        logger.debug("opened asset store %s", path)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            logger.debug("closed asset store %s", self._path)
        self._conn = None
        self._path = None

    def has_schema(self) -> bool:
        return _table_exists(self._connection(), "assets")

    def insert(
        self,
        asset_id: str,
        name: str,
        tags: str,
        asset_rel_path: str,
        cover_rel_path: str,
        created_at: int | None = None,
    ) -> None:
        conn = self._connection()
        ts = now_epoch() if created_at is None else int(created_at)
        with _translate_errors("insert"):
            conn.execute(
                f"INSERT INTO assets ({ASSET_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                (asset_id, name, tags, asset_rel_path, cover_rel_path, str(ts)),
            )

    def get(self, asset_id: str, root: Path | str) -> AssetRecord | None:
        conn = self._connection()
        with _translate_errors("get"):
            row = conn.execute(
                f"SELECT {ASSET_COLUMNS} FROM assets WHERE id = ?",
                (asset_id,),
            ).fetchone()
        if row is None:
            return None
        return _to_record(row, Path(root))

    def list(self, root: Path | str) -> list[AssetRecord]:
        conn = self._connection()
        base = Path(root)
        with _translate_errors("list"):
            rows = conn.execute(LIST_SQL).fetchall()
        return [_to_record(r, base) for r in rows]

    def count(self) -> int:
        conn = self._connection()
        with _translate_errors("count"):
            row = conn.execute("SELECT COUNT(*) AS n FROM assets").fetchone()
        return int(row["n"])

    def update(self, asset_id: str, name: str, tags: str, cover_rel_path: str | None = None) -> None:
        _require_text(name, "name")
        _require_text(tags, "tags")
        conn = self._connection()

        with _translate_errors("update"):
            conn.execute("BEGIN IMMEDIATE")
            try:
                if _update_name_tags(conn, asset_id, name, tags) == 0:
                    raise NotFound(asset_id)
                if cover_rel_path is not None and cover_rel_path.strip():
                    _update_cover(conn, asset_id, cover_rel_path)
                conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

    def delete(self, asset_id: str) -> DeletedPaths:
        conn = self._connection()
        with _translate_errors("delete"):
            row = conn.execute(
                "SELECT asset_rel_path, cover_rel_path FROM assets WHERE id = ?",
                (asset_id,),
            ).fetchone()
            cur = conn.execute("DELETE FROM assets WHERE id = ?", (asset_id,))
        if cur.rowcount == 0:
            raise NotFound(asset_id)
        if row is None:
            return DeletedPaths(asset_rel_path=None, cover_rel_path=None)
        return DeletedPaths(
            asset_rel_path=str(row["asset_rel_path"]),
            cover_rel_path=str(row["cover_rel_path"]),
        )

    def referenced_paths(self) -> set[str]:
        conn = self._connection()
        with _translate_errors("referenced_paths"):
            rows = conn.execute("SELECT asset_rel_path, cover_rel_path FROM assets").fetchall()
        out: set[str] = set()
        for row in rows:
            out.add(str(row["asset_rel_path"]))
            out.add(str(row["cover_rel_path"]))
        return out
