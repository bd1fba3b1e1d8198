"""处理流水线：展开输入、加载、准备输出目录、分批并发处理。"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, Sequence

from image_batcher.core.config import FormatConvert, JobConfig, TransformMode
from image_batcher.core.exceptions import DirectoryProvisioningError, InvalidConfigurationError
from image_batcher.core.models import ImageRecord, RunReport, WorkItem
from image_batcher.core.output_manager import ensure_output_dir, output_path_for
from image_batcher.core.progress import ProgressUpdate
from image_batcher.core.report import write_csv_report
from image_batcher.core.scanner import enumerate_paths
from image_batcher.processing.codec import format_for_extension
from image_batcher.processing.image_loader import load_images
from image_batcher.processing.scheduler import ExecutorFactory, Worker, run_batches
from image_batcher.processing.worker import run_work_item

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def validate_job_config(config: JobConfig) -> None:
    """在任何 I/O 之前校验配置，不合法时抛出 ``InvalidConfigurationError``。"""

    if config.concurrency < 1:
        raise InvalidConfigurationError(f"并发数必须 >= 1，当前为 {config.concurrency}")
    if not config.input_pattern:
        raise InvalidConfigurationError("输入路径不能为空")
    if isinstance(config.mode, FormatConvert):
        if not config.mode.target_extension:
            raise InvalidConfigurationError("格式转换模式需要指定目标扩展名")
        format_for_extension(config.mode.target_extension)


def build_work_items(records: Sequence[ImageRecord], output_dir: Path, mode: TransformMode) -> list[WorkItem]:
    """为每条图片记录计算输出路径并构造工作单元。

    多个源文件映射到同一输出路径时只记录警告，后写入者覆盖先写入者。
    """

    items: list[WorkItem] = []
    claimed: dict[Path, Path] = {}
    for record in records:
        destination = output_path_for(record.source_path, output_dir, mode)
        previous = claimed.setdefault(destination, record.source_path)
        if previous != record.source_path:
            LOGGER.warning("输出文件名冲突：%s 与 %s 都将写入 %s", previous, record.source_path, destination)
        items.append(WorkItem(record=record, output_path=destination, mode=mode))
    return items


def process_batch(
    config: JobConfig,
    progress_callback: ProgressCallback = None,
    *,
    worker: Worker = run_work_item,
    executor_factory: ExecutorFactory = ThreadPoolExecutor,
) -> RunReport:
    """批量处理入口：展开输入、加载、准备输出目录并分批执行变换。"""

    validate_job_config(config)
    report = RunReport()

    LOGGER.info("开始展开输入路径：%s", config.input_pattern)
    paths = enumerate_paths(config.input_pattern)
    report.discovered = len(paths)

    records = load_images(paths, failures=report.load_failures)

    try:
        output_dir = ensure_output_dir(config.output_dir.expanduser().resolve())
    except DirectoryProvisioningError:
        for record in records:
            record.pixels.close()
        raise
    items = build_work_items(records, output_dir, config.mode)

    report.outcomes = run_batches(
        items,
        config.concurrency,
        worker=worker,
        executor_factory=executor_factory,
        progress_callback=progress_callback,
        batches=report.batches,
    )

    LOGGER.info(
        "处理完成：成功 %d 张，失败 %d 张，无法解码 %d 个",
        len(report.succeeded),
        len(report.failed),
        len(report.load_failures),
    )

    if config.report_filename:
        _write_report(config, output_dir, report)
    return report


def _write_report(config: JobConfig, output_dir: Path, report: RunReport) -> None:
    try:
        write_csv_report(report.outcomes, output_dir, config.report_filename)
    except OSError as exc:
        LOGGER.error("写入报告失败：%s", exc)
