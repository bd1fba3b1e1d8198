"""测试输入展开与图片加载逻辑。"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

from image_batcher.core.scanner import enumerate_paths
from image_batcher.processing.image_loader import load_images


def test_enumerate_directory_filters_by_extension(tmp_path: Path) -> None:
    Image.new("RGB", (8, 8), "red").save(tmp_path / "a.png")
    Image.new("RGB", (8, 8), "red").save(tmp_path / "b.JPG")
    (tmp_path / "notes.txt").write_text("hello")
    (tmp_path / "nested").mkdir()

    paths = enumerate_paths(str(tmp_path))

    assert sorted(p.name for p in paths) == ["a.png", "b.JPG"]


def test_enumerate_glob_pattern(tmp_path: Path) -> None:
    Image.new("RGB", (8, 8), "red").save(tmp_path / "a.png")
    Image.new("RGB", (8, 8), "red").save(tmp_path / "b.jpg")

    paths = enumerate_paths(str(tmp_path / "*.png"))

    assert [p.name for p in paths] == ["a.png"]


def test_enumerate_single_file(tmp_path: Path) -> None:
    target = tmp_path / "only.png"
    Image.new("RGB", (8, 8), "red").save(target)

    assert enumerate_paths(str(target)) == [target]


def test_enumerate_empty_match_logs_notice(tmp_path: Path, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="image_batcher.core.scanner"):
        paths = enumerate_paths(str(tmp_path / "*.png"))

    assert paths == []
    assert len(caplog.records) == 1


def test_load_images_skips_corrupt_files_without_gaps(tmp_path: Path, caplog) -> None:
    Image.new("RGB", (16, 16), "blue").save(tmp_path / "first.png")
    (tmp_path / "broken.png").write_text("not an image")
    Image.new("RGB", (16, 16), "green").save(tmp_path / "second.jpg")
    paths = [tmp_path / "first.png", tmp_path / "broken.png", tmp_path / "second.jpg"]
    failures: list[Path] = []

    with caplog.at_level(logging.WARNING):
        records = load_images(paths, failures=failures)

    assert [r.index for r in records] == [0, 1]
    assert [r.source_path.name for r in records] == ["first.png", "second.jpg"]
    assert failures == [tmp_path / "broken.png"]
    assert any("broken.png" in r.getMessage() for r in caplog.records)


def test_exif_orientation_is_applied_on_load(tmp_path: Path) -> None:
    image = Image.new("RGB", (80, 40), "red")
    exif = Image.Exif()
    exif[274] = 6  # 顺时针 90 度
    image.save(tmp_path / "rotated.jpg", exif=exif.tobytes())

    records = load_images([tmp_path / "rotated.jpg"])

    assert records[0].pixels.size == (40, 80)
