from pathlib import Path

from PIL import Image

from assetroom.media import probe_image


def test_probe_real_image(tmp_path: Path) -> None:
    path = tmp_path / "cover.png"
    Image.new("RGB", (32, 18), (10, 20, 30)).save(path)

    info = probe_image(path)
    assert info is not None
    assert (info.width, info.height, info.format) == (32, 18, "PNG")


def test_probe_non_image_and_missing(tmp_path: Path) -> None:
    junk = tmp_path / "cover.jpg"
    junk.write_bytes(b"fake-jpg-bytes")

    assert probe_image(junk) is None
    assert probe_image(tmp_path / "missing.jpg") is None
