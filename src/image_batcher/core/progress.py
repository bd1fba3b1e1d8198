"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class ProgressUpdate:
    """批处理过程中的进度信息，``batch`` 为当前批次序号（从 1 开始）。"""

    total: int
    completed: int
    batch: Optional[int] = None
    message: Optional[str] = None
