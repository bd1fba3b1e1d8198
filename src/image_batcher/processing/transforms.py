"""两种图像变换：灰度转换与容器格式转换。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from PIL import Image

from image_batcher.core.config import FormatConvert, Grayscale, TransformMode
from image_batcher.core.exceptions import InvalidConfigurationError
from image_batcher.processing.codec import encode_image, format_for_extension, to_grayscale


class Transform(Protocol):
    def apply(self, image: Image.Image, source_path: Path) -> bytes:
        ...


@dataclass(frozen=True, slots=True)
class GrayscaleTransform:
    """转换为单通道亮度图，并按源文件扩展名对应的格式编码。"""

    def apply(self, image: Image.Image, source_path: Path) -> bytes:
        image_format = format_for_extension(source_path.suffix)
        gray = to_grayscale(image)
        try:
            return encode_image(gray, image_format)
        finally:
            gray.close()


@dataclass(frozen=True, slots=True)
class FormatConvertTransform:
    """像素不变，仅重新编码为目标格式。"""

    target_extension: str

    def apply(self, image: Image.Image, source_path: Path) -> bytes:
        return encode_image(image, format_for_extension(self.target_extension))


def build_transform(mode: TransformMode) -> Transform:
    """根据处理模式构造对应的变换。"""

    if isinstance(mode, Grayscale):
        return GrayscaleTransform()
    if isinstance(mode, FormatConvert):
        return FormatConvertTransform(mode.target_extension)
    raise InvalidConfigurationError(f"未知的处理模式: {mode!r}")
