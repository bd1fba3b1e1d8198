"""基于 Pillow 的图像编解码与灰度转换。"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from image_batcher.core.exceptions import (
    ImageConversionError,
    ImageLoadingError,
    ImageWriteError,
    UnsupportedFormatError,
)
from image_batcher.core.output_manager import SUPPORTED_FORMATS

LOGGER = logging.getLogger(__name__)

# 各容器可直接写入的像素模式，不在集合内的模式需要先转换。
_ENCODABLE_MODES = {
    "JPEG": {"L", "RGB", "CMYK"},
    "BMP": {"1", "L", "P", "RGB"},
    "PNG": {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"},
}


def format_for_extension(extension: str) -> str:
    """将扩展名（带或不带点）映射为 Pillow 格式名。"""

    suffix = "." + extension.lower().lstrip(".")
    image_format = SUPPORTED_FORMATS.get(suffix)
    if not image_format:
        raise UnsupportedFormatError(f"不支持的输出格式: {suffix}")
    return image_format


def decode_image(path: Path) -> Image.Image:
    """解码单张图片并执行 EXIF 旋转校正。

    返回值为新的 Image 对象，调用者负责关闭。
    """

    try:
        with Image.open(path) as img:
            img.load()
            return ImageOps.exif_transpose(img).copy()
    except (UnidentifiedImageError, OSError) as exc:
        LOGGER.debug("无法识别图像文件 %s: %s", path, exc)
        raise ImageLoadingError(f"无法加载图像: {path}") from exc


def to_grayscale(image: Image.Image) -> Image.Image:
    """转换为单通道亮度图（ITU-R 601-2）。"""

    if image.mode == "L":
        return image.copy()
    flattened = _flatten_alpha(image)
    try:
        return flattened.convert("L")
    except ValueError as exc:
        raise ImageConversionError(f"无法从 {flattened.mode} 转换为灰度: {exc}") from exc


def encode_image(image: Image.Image, image_format: str) -> bytes:
    """将图像编码为指定容器格式的字节串。"""

    allowed = _ENCODABLE_MODES.get(image_format)
    image_to_save = image
    if allowed is not None and image.mode not in allowed:
        image_to_save = _flatten_alpha(image)

    save_params: dict = {}
    if image_format == "JPEG":
        save_params.update(quality=95, subsampling=1, optimize=True)
    elif image_format == "PNG":
        save_params.update(optimize=True)

    buffer = BytesIO()
    try:
        image_to_save.save(buffer, format=image_format, **save_params)
    except (OSError, ValueError, KeyError) as exc:
        raise ImageWriteError(f"编码 {image_format} 失败: {exc}") from exc
    return buffer.getvalue()


def _flatten_alpha(img: Image.Image) -> Image.Image:
    """将任意模式图像转换为 RGB，Alpha 通道与白色背景混合。"""

    try:
        if img.mode in {"RGBA", "LA"} or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[-1])
            return background

        return img.convert("RGB")
    except (ValueError, OSError) as exc:
        raise ImageConversionError(f"无法将 {img.mode} 模式转换为 RGB: {exc}") from exc
