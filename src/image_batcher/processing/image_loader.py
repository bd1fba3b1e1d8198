"""图片批量加载。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from image_batcher.core.exceptions import ImageLoadingError
from image_batcher.core.models import ImageRecord
from image_batcher.processing.codec import decode_image

LOGGER = logging.getLogger(__name__)


def load_images(paths: Iterable[Path], failures: list[Path] | None = None) -> list[ImageRecord]:
    """逐个解码候选文件，返回成功加载的图片记录。

    解码失败的文件记录警告后跳过，不影响整个任务；
    返回记录的 ``index`` 从 0 开始且连续，被跳过的文件不留空位。
    传入 ``failures`` 时，失败的路径会追加到该列表中。
    """

    records: list[ImageRecord] = []
    for path in paths:
        try:
            pixels = decode_image(path)
        except ImageLoadingError as exc:
            LOGGER.warning("跳过无法解码的文件 %s: %s", path, exc)
            if failures is not None:
                failures.append(path)
            continue
        records.append(ImageRecord(index=len(records), source_path=path, pixels=pixels))

    LOGGER.info("成功加载 %d 张图片", len(records))
    return records
