"""并发处理的工作单元。"""

from __future__ import annotations

import logging

from image_batcher.core.exceptions import ImageBatcherError, ImageWriteError
from image_batcher.core.models import WorkerOutcome, WorkItem
from image_batcher.core.output_manager import write_output
from image_batcher.processing.transforms import build_transform

LOGGER = logging.getLogger(__name__)


def run_work_item(item: WorkItem) -> WorkerOutcome:
    """在工作线程中执行变换、编码与写入。

    失败只记录在返回的结果中，不会抛给调度器或其他工作线程。
    无论成功与否，都会释放该工作单元持有的像素缓冲区。
    """

    record = item.record
    try:
        try:
            data = build_transform(item.mode).apply(record.pixels, record.source_path)
        except ImageBatcherError as exc:
            LOGGER.error("变换失败 %s: %s", record.source_path, exc)
            return _failure(item, "error-transform", str(exc))

        try:
            write_output(data, item.output_path)
        except ImageWriteError as exc:
            LOGGER.error("写入失败 %s: %s", item.output_path, exc)
            return _failure(item, "error-write", str(exc))
    finally:
        record.pixels.close()

    LOGGER.debug("已写入 %s", item.output_path)
    return WorkerOutcome(
        index=record.index,
        source_path=record.source_path,
        output_path=item.output_path,
        status="processed",
    )


def _failure(item: WorkItem, status: str, message: str) -> WorkerOutcome:
    return WorkerOutcome(
        index=item.record.index,
        source_path=item.record.source_path,
        output_path=item.output_path,
        status=status,
        message=message,
    )
