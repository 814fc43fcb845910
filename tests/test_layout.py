from pathlib import Path

import pytest

from assetroom.errors import InvalidArgument, RootNotFound, StorageIOError
from assetroom.layout import (
    copy_asset,
    ensure_layout,
    import_cover,
    iter_catalog_files,
    normalize_cover_ext,
    remove_if_exists,
    resolve_rel_path,
    to_rel_path,
)


def _mk_file(path: Path, payload: bytes = b"payload") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    return path


def test_ensure_layout_creates_dirs_idempotently(tmp_path: Path) -> None:
    root = tmp_path / "library"
    root.mkdir()

    first = ensure_layout(root)
    second = ensure_layout(root)

    assert first == second
    assert first.db_dir.is_dir()
    assert first.assets_dir.is_dir()
    assert first.covers_dir.is_dir()
    assert first.db_path == root.resolve() / "asr-db" / "assetroom.sqlite"


def test_ensure_layout_missing_root(tmp_path: Path) -> None:
    with pytest.raises(RootNotFound):
        ensure_layout(tmp_path / "nope")


def test_copy_asset_keeps_lowercased_extension(tmp_path: Path) -> None:
    root = tmp_path / "library"
    root.mkdir()
    src = _mk_file(tmp_path / "in" / "Clip.MP4", b"video-bytes")

    copied = copy_asset(root, src)

    assert copied.rel_path == f"assets/asset_{copied.id}.mp4"
    assert Path(copied.abs_path).read_bytes() == b"video-bytes"
    assert Path(copied.abs_path) == root.resolve() / copied.rel_path


def test_copy_asset_without_extension(tmp_path: Path) -> None:
    root = tmp_path / "library"
    root.mkdir()
    src = _mk_file(tmp_path / "in" / "README")

    copied = copy_asset(root, src)

    assert copied.rel_path == f"assets/asset_{copied.id}"


def test_copy_asset_ids_are_unique(tmp_path: Path) -> None:
    root = tmp_path / "library"
    root.mkdir()
    src = _mk_file(tmp_path / "in" / "a.obj")

    ids = {copy_asset(root, src).id for _ in range(5)}
    assert len(ids) == 5


def test_copy_asset_missing_source(tmp_path: Path) -> None:
    root = tmp_path / "library"
    root.mkdir()
    with pytest.raises(StorageIOError):
        copy_asset(root, tmp_path / "missing.png")
    assert list((root / "assets").iterdir()) == []


def test_cover_extension_normalization(tmp_path: Path) -> None:
    assert normalize_cover_ext("a.PNG") == "png"
    assert normalize_cover_ext("a.webp") == "webp"
    assert normalize_cover_ext("a.jpeg") == "jpg"
    assert normalize_cover_ext("a.JPG") == "jpg"
    assert normalize_cover_ext("a.gif") == "jpg"
    assert normalize_cover_ext("cover") == "jpg"


def test_import_cover(tmp_path: Path) -> None:
    root = tmp_path / "library"
    root.mkdir()
    src = _mk_file(tmp_path / "in" / "shot.jpeg", b"img")

    cover = import_cover(root, src)

    assert cover.ext == "jpg"
    assert cover.rel_path.startswith("covers/cover_")
    assert cover.rel_path.endswith(".jpg")
    assert Path(cover.abs_path).read_bytes() == b"img"


def test_remove_if_exists_is_idempotent(tmp_path: Path) -> None:
    target = _mk_file(tmp_path / "x.bin")

    assert remove_if_exists(target) is True
    assert remove_if_exists(target) is False
    assert not target.exists()


def test_relative_path_helpers(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    assert resolve_rel_path(root, "assets/asset_1.png") == root / "assets" / "asset_1.png"
    assert to_rel_path(root, root / "covers" / "c.jpg") == "covers/c.jpg"

    for bad in ["", "/etc/passwd", "../outside.png", "assets/../../x"]:
        with pytest.raises(InvalidArgument):
            resolve_rel_path(root, bad)
    with pytest.raises(InvalidArgument):
        to_rel_path(root / "assets", root / "covers" / "c.jpg")


def test_catalog_files_keep_symlinks_unresolved(tmp_path: Path) -> None:
    root = tmp_path / "library"
    root.mkdir()
    layout = ensure_layout(root)
    outside = _mk_file(tmp_path / "outside.bin")
    _mk_file(layout.covers_dir / "cover_a.jpg")
    (layout.assets_dir / "asset_link.bin").symlink_to(outside)
    (layout.assets_dir / "asset_dangling.bin").symlink_to(tmp_path / "gone.bin")
    (layout.covers_dir / "nested").mkdir()

    rels = [to_rel_path(layout.root, p) for p in iter_catalog_files(layout)]
    assert rels == ["assets/asset_dangling.bin", "assets/asset_link.bin", "covers/cover_a.jpg"]

    assert remove_if_exists(layout.assets_dir / "asset_link.bin") is True
    assert outside.exists()
