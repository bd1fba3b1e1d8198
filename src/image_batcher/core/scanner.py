"""输入路径展开逻辑。"""

from __future__ import annotations

import glob
import logging
from pathlib import Path

from image_batcher.core.output_manager import SUPPORTED_FORMATS

LOGGER = logging.getLogger(__name__)


def _iter_directory(directory: Path) -> list[Path]:
    """列出目录下扩展名可识别的图片文件（不递归）。"""

    return [
        candidate
        for candidate in directory.iterdir()
        if candidate.is_file() and candidate.suffix.lower() in SUPPORTED_FORMATS
    ]


def enumerate_paths(pattern: str) -> list[Path]:
    """将输入模式展开为候选文件列表。

    ``pattern`` 可以是单个文件、目录或 glob 模式（支持 ``**``）。
    没有匹配时返回空列表并记录一条日志，而不是抛出异常。
    调用方不应依赖返回顺序。
    """

    path = Path(pattern).expanduser()

    if path.is_dir():
        candidates = _iter_directory(path)
    elif path.is_file():
        candidates = [path]
    else:
        candidates = [Path(match) for match in glob.glob(str(path), recursive=True)]
        candidates = [candidate for candidate in candidates if candidate.is_file()]

    if not candidates:
        LOGGER.info("输入模式没有匹配到任何文件：%s", pattern)
        return []

    candidates.sort(key=lambda x: str(x).lower())
    LOGGER.info("发现 %d 个候选文件", len(candidates))
    return candidates
