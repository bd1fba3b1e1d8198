"""测试输出命名、目录准备与两种变换。"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from image_batcher.core.config import FormatConvert, Grayscale
from image_batcher.core.exceptions import DirectoryProvisioningError, ImageConversionError, UnsupportedFormatError
from image_batcher.core.models import ImageRecord, WorkItem
from image_batcher.core.output_manager import ensure_output_dir, output_path_for, write_output
from image_batcher.processing.codec import to_grayscale
from image_batcher.processing.transforms import FormatConvertTransform, GrayscaleTransform, build_transform
from image_batcher.processing.worker import run_work_item


def test_grayscale_name_keeps_basename() -> None:
    out = output_path_for(Path("/in/photos/cat.JPG"), Path("/out"), Grayscale())
    assert out == Path("/out/cat.JPG")


def test_format_convert_name_replaces_extension() -> None:
    out = output_path_for(Path("/in/archive.tar.jpg"), Path("/out"), FormatConvert("png"))
    assert out == Path("/out/archive.tar.png")


def test_format_convert_strips_leading_dot() -> None:
    assert FormatConvert(".webp").target_extension == "webp"
    assert output_path_for(Path("a.jpg"), Path("o"), FormatConvert(".webp")).name == "a.webp"


def test_ensure_output_dir_is_idempotent(tmp_path: Path) -> None:
    target = tmp_path / "out" / "nested"
    ensure_output_dir(target)
    (target / "existing.png").write_bytes(b"x")

    assert ensure_output_dir(target) == target
    assert (target / "existing.png").exists()


def test_ensure_output_dir_fails_when_path_is_file(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file")

    with pytest.raises(DirectoryProvisioningError):
        ensure_output_dir(blocker)


def test_write_output_replaces_existing_file(tmp_path: Path) -> None:
    destination = tmp_path / "out.bin"
    write_output(b"first", destination)
    write_output(b"second", destination)

    assert destination.read_bytes() == b"second"
    assert [p.name for p in tmp_path.iterdir()] == ["out.bin"]


def test_grayscale_transform_encodes_in_source_format() -> None:
    image = Image.new("RGB", (10, 10), (200, 30, 30))

    data = GrayscaleTransform().apply(image, Path("photo.jpg"))

    with Image.open(BytesIO(data)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.mode == "L"


def test_grayscale_transform_flattens_alpha() -> None:
    image = Image.new("RGBA", (4, 4), (0, 0, 0, 0))

    data = GrayscaleTransform().apply(image, Path("clear.png"))

    with Image.open(BytesIO(data)) as decoded:
        assert decoded.mode == "L"
        assert decoded.getpixel((0, 0)) == 255


def test_format_convert_transform_keeps_pixels() -> None:
    image = Image.new("RGB", (6, 6), (10, 120, 240))

    data = FormatConvertTransform("png").apply(image, Path("source.jpg"))

    with Image.open(BytesIO(data)) as decoded:
        assert decoded.format == "PNG"
        assert decoded.convert("RGB").getpixel((3, 3)) == (10, 120, 240)


def test_format_convert_rgba_to_jpeg() -> None:
    image = Image.new("RGBA", (6, 6), (10, 120, 240, 255))

    data = build_transform(FormatConvert("jpg")).apply(image, Path("source.png"))

    with Image.open(BytesIO(data)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.mode == "RGB"


def test_unsupported_target_extension() -> None:
    with pytest.raises(UnsupportedFormatError):
        FormatConvertTransform("xyz").apply(Image.new("RGB", (2, 2)), Path("a.png"))


def test_mode_conversion_failure_is_transform_error(tmp_path: Path) -> None:
    image = Image.new("RGB", (4, 4))

    def broken_convert(*args, **kwargs):
        raise ValueError("conversion not supported")

    image.convert = broken_convert
    item = WorkItem(
        record=ImageRecord(index=0, source_path=tmp_path / "odd.png", pixels=image),
        output_path=tmp_path / "odd.png",
        mode=Grayscale(),
    )

    with pytest.raises(ImageConversionError):
        to_grayscale(image)

    outcome = run_work_item(item)

    assert outcome.status == "error-transform"
    assert not item.output_path.exists()
