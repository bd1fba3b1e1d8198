"""处理任务的配置模型。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True, slots=True)
class Grayscale:
    """灰度模式：保留原文件名与扩展名。"""

    def output_filename(self, source_path: Path) -> str:
        return source_path.name


@dataclass(frozen=True, slots=True)
class FormatConvert:
    """格式转换模式：保留文件主名，扩展名替换为目标扩展名。"""

    target_extension: str

    def __post_init__(self) -> None:
        # frozen dataclass 需要通过 object.__setattr__ 归一化字段
        object.__setattr__(self, "target_extension", self.target_extension.strip().lstrip("."))

    def output_filename(self, source_path: Path) -> str:
        return f"{source_path.stem}.{self.target_extension}"


TransformMode = Union[Grayscale, FormatConvert]


@dataclass(slots=True)
class JobConfig:
    """单次批处理任务的配置集合。"""

    input_pattern: str
    output_dir: Path
    mode: TransformMode
    concurrency: int = 4
    report_filename: Optional[str] = None
