"""输出目录准备、输出命名与文件写入。"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from image_batcher.core.config import TransformMode
from image_batcher.core.exceptions import DirectoryProvisioningError, ImageWriteError

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".bmp": "BMP",
    ".gif": "GIF",
    ".tif": "TIFF",
    ".tiff": "TIFF",
    ".webp": "WEBP",
}


def ensure_output_dir(path: Path) -> Path:
    """创建输出目录；目录已存在视为成功。

    其他文件系统错误（权限不足、路径被普通文件占用等）转换为
    ``DirectoryProvisioningError``，调用方应中止整个任务。
    """

    existed = path.is_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryProvisioningError(f"无法创建输出目录 {path}: {exc}") from exc

    if existed:
        LOGGER.info("输出目录已存在：%s", path)
    else:
        LOGGER.info("已创建输出目录：%s", path)
    return path


def output_path_for(source_path: Path, output_dir: Path, mode: TransformMode) -> Path:
    """根据处理模式计算输出路径，不做任何 I/O。"""

    return output_dir / mode.output_filename(source_path)


def write_output(data: bytes, destination: Path) -> None:
    """原子地写入输出文件：先写临时文件再替换目标。

    同名冲突时后写入者覆盖先写入者，但目标文件始终是完整的。
    """

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent)
    except OSError as exc:
        raise ImageWriteError(f"无法在 {destination.parent} 创建临时文件") from exc

    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(tmp_name, destination)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise ImageWriteError(f"写入文件失败: {destination}") from exc
