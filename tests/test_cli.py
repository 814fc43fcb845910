import json
from pathlib import Path

from typer.testing import CliRunner

from assetroom.cli import app

runner = CliRunner()


def _cfg(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text("ui:\n  show_logo: false\n")
    return path


def _mk_file(path: Path, payload: bytes = b"bytes") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    return path


def _run(tmp_path: Path, *args: str):
    return runner.invoke(app, ["--config", str(_cfg(tmp_path)), *args])


def test_cli_catalog_roundtrip(tmp_path: Path) -> None:
    root = tmp_path / "library"
    root.mkdir()
    src = _mk_file(tmp_path / "in" / "trailer.mp4")
    cover = _mk_file(tmp_path / "in" / "poster.png")

    opened = _run(tmp_path, "open", str(root), "--json")
    assert opened.exit_code == 0, opened.output
    assert json.loads(opened.stdout)["assets"] == 0

    added = _run(tmp_path, "add", str(src), "--cover", str(cover), "--name", "Trailer", "--tags", "video,2026", "--json")
    assert added.exit_code == 0, added.output
    asset = json.loads(added.stdout)
    assert asset["name"] == "Trailer"
    assert asset["tags"] == ["video", "2026"]
    assert asset["file_type"] == "video"

    listed = _run(tmp_path, "ls", "--json", "-q", "2026")
    assert listed.exit_code == 0, listed.output
    assert [row["id"] for row in json.loads(listed.stdout)] == [asset["id"]]

    edited = _run(tmp_path, "edit", asset["id"], "--name", "Trailer v2", "--json")
    assert edited.exit_code == 0, edited.output
    assert json.loads(edited.stdout)["tags_raw"] == "video,2026"

    shown = _run(tmp_path, "show", asset["id"], "--json")
    assert shown.exit_code == 0, shown.output
    assert json.loads(shown.stdout)["name"] == "Trailer v2"

    removed = _run(tmp_path, "rm", asset["id"])
    assert removed.exit_code == 0, removed.output
    assert not Path(asset["path"]).exists()

    empty = _run(tmp_path, "ls", "--json")
    assert json.loads(empty.stdout) == []


def test_cli_without_root_fails_cleanly(tmp_path: Path) -> None:
    result = _run(tmp_path, "ls")
    assert result.exit_code == 1
    assert "assetroom open" in result.output


def test_cli_reports_missing_asset(tmp_path: Path) -> None:
    root = tmp_path / "library"
    root.mkdir()
    result = _run(tmp_path, "--root", str(root), "rm", "nope")
    assert result.exit_code == 1
    assert "no asset" in result.output


def test_cli_open_missing_root(tmp_path: Path) -> None:
    result = _run(tmp_path, "open", str(tmp_path / "missing"))
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_cli_sweep_and_status(tmp_path: Path) -> None:
    root = tmp_path / "library"
    _mk_file(root / "assets" / "asset_stray.bin")
    assert _run(tmp_path, "open", str(root)).exit_code == 0

    status = _run(tmp_path, "status", "--json")
    assert status.exit_code == 0, status.output
    assert json.loads(status.stdout)["orphan_files"] == 1

    swept = _run(tmp_path, "sweep", "--apply", "--json")
    assert swept.exit_code == 0, swept.output
    assert json.loads(swept.stdout)["removed"] == ["assets/asset_stray.bin"]
    assert not (root / "assets" / "asset_stray.bin").exists()


def test_cli_forget(tmp_path: Path) -> None:
    root = tmp_path / "library"
    root.mkdir()
    assert _run(tmp_path, "open", str(root)).exit_code == 0
    assert _run(tmp_path, "forget").exit_code == 0
    assert _run(tmp_path, "ls").exit_code == 1
