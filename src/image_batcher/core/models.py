"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from PIL import Image

from image_batcher.core.config import TransformMode


@dataclass(frozen=True, slots=True)
class ImageRecord:
    """成功解码的图片。

    ``index`` 是在成功加载的图片中的位置（从 0 开始、连续），
    解码失败的文件不占用序号。
    """

    index: int
    source_path: Path
    pixels: Image.Image


@dataclass(frozen=True, slots=True)
class BatchJob:
    """已加载序列中的一个连续切片 ``[offset, offset + size)``。"""

    offset: int
    size: int

    @property
    def stop(self) -> int:
        return self.offset + self.size


@dataclass(slots=True)
class WorkItem:
    """分派给单个工作线程的处理单元，只会被消费一次。"""

    record: ImageRecord
    output_path: Path
    mode: TransformMode


@dataclass(slots=True)
class WorkerOutcome:
    """记录单个工作单元的处理结果（用于报告/日志）。"""

    index: int
    source_path: Path
    output_path: Path
    status: str
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "processed"


@dataclass(slots=True)
class RunReport:
    """一次完整运行的汇总结果。"""

    discovered: int = 0
    load_failures: list[Path] = field(default_factory=list)
    batches: list[BatchJob] = field(default_factory=list)
    outcomes: list[WorkerOutcome] = field(default_factory=list)

    @property
    def loaded(self) -> int:
        return self.discovered - len(self.load_failures)

    @property
    def succeeded(self) -> list[WorkerOutcome]:
        return [outcome for outcome in self.outcomes if outcome.succeeded]

    @property
    def failed(self) -> list[WorkerOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]
