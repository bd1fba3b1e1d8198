"""分批并发调度。

已加载的图片被切分为大小为 ``concurrency`` 的连续批次，每个批次内
为每张图片启动一个工作线程，并在批次末尾等待全部线程结束后才进入
下一批次。同时存活的工作线程数量因此不会超过 ``concurrency``。
批次之间严格串行，批次内部的完成顺序不做保证。
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence

from image_batcher.core.exceptions import InvalidConfigurationError
from image_batcher.core.models import BatchJob, WorkerOutcome, WorkItem
from image_batcher.core.progress import ProgressUpdate
from image_batcher.processing.worker import run_work_item

LOGGER = logging.getLogger(__name__)

Worker = Callable[[WorkItem], WorkerOutcome]
ExecutorFactory = Callable[..., Executor]
ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def partition_batches(total: int, concurrency: int) -> list[BatchJob]:
    """将 ``[0, total)`` 切分为按偏移升序、互不重叠的批次。"""

    if concurrency < 1:
        raise InvalidConfigurationError(f"并发数必须 >= 1，当前为 {concurrency}")

    return [BatchJob(offset=offset, size=min(concurrency, total - offset)) for offset in range(0, total, concurrency)]


def run_batches(
    items: Sequence[WorkItem],
    concurrency: int,
    *,
    worker: Worker = run_work_item,
    executor_factory: ExecutorFactory = ThreadPoolExecutor,
    progress_callback: ProgressCallback = None,
    batches: Optional[list[BatchJob]] = None,
) -> list[WorkerOutcome]:
    """逐批执行工作单元，返回按序号排列的处理结果。

    ``batches`` 传入列表时会把本次切分结果追加进去，便于汇总。
    """

    jobs = partition_batches(len(items), concurrency)
    if batches is not None:
        batches.extend(jobs)

    total = len(items)
    outcomes: list[WorkerOutcome] = []

    for number, job in enumerate(jobs, start=1):
        LOGGER.info("开始第 %d/%d 批（%d 项）", number, len(jobs), job.size)
        with executor_factory(max_workers=job.size, thread_name_prefix=f"batch{number}") as executor:
            future_map: dict[Future, WorkItem] = {}
            for item in items[job.offset : job.stop]:
                future: Future = Future()
                try:
                    executor.submit(_run_claimed, worker, item, future)
                except RuntimeError as exc:
                    # submit 可能已把任务放入队列后才在启动线程时失败，
                    # 取消成功说明任务尚未开始，之后也不会再执行
                    if not future.cancel():
                        LOGGER.warning("线程启动失败但任务已被其他线程接手：%s", item.record.source_path)
                        future_map[future] = item
                        continue
                    LOGGER.error("无法启动工作线程，跳过 %s: %s", item.record.source_path, exc)
                    item.record.pixels.close()
                    outcomes.append(_outcome(item, "error-spawn", str(exc)))
                    _emit_progress(progress_callback, len(outcomes), total, number, item)
                    continue
                future_map[future] = item

            # 屏障：本批次所有已启动的线程结束前不会进入下一批次
            for future in as_completed(future_map):
                item = future_map[future]
                try:
                    outcome = future.result()
                except Exception as exc:  # noqa: BLE001
                    LOGGER.exception("工作线程异常：%s", exc)
                    outcome = _outcome(item, "error-worker", str(exc))
                outcomes.append(outcome)
                _emit_progress(progress_callback, len(outcomes), total, number, item)

        LOGGER.info("第 %d/%d 批完成", number, len(jobs))

    outcomes.sort(key=lambda outcome: outcome.index)
    return outcomes


def _run_claimed(worker: Worker, item: WorkItem, future: Future) -> None:
    """在工作线程中认领并执行工作单元，已被调度器取消的任务直接返回。"""

    if not future.set_running_or_notify_cancel():
        return
    try:
        future.set_result(worker(item))
    except BaseException as exc:  # noqa: BLE001
        future.set_exception(exc)


def _outcome(item: WorkItem, status: str, message: str) -> WorkerOutcome:
    return WorkerOutcome(
        index=item.record.index,
        source_path=item.record.source_path,
        output_path=item.output_path,
        status=status,
        message=message,
    )


def _emit_progress(callback: ProgressCallback, completed: int, total: int, batch: int, item: WorkItem) -> None:
    if not callback:
        return
    callback(
        ProgressUpdate(
            total=total,
            completed=completed,
            batch=batch,
            message=f"完成 {item.record.source_path.name}",
        )
    )
