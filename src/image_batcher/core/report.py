"""报告生成工具。"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from image_batcher.core.models import WorkerOutcome

HEADER = ["index", "source_path", "output_path", "status", "message"]


def write_csv_report(outcomes: Iterable[WorkerOutcome], output_dir: Path, filename: str) -> Path:
    """将处理结果写入 CSV 报告。"""

    report_path = output_dir / filename
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for record in outcomes:
            writer.writerow(
                [
                    record.index,
                    str(record.source_path),
                    str(record.output_path),
                    record.status,
                    record.message or "",
                ]
            )
    return report_path
