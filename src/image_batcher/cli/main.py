"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from image_batcher.core.config import FormatConvert, Grayscale, JobConfig, TransformMode
from image_batcher.core.exceptions import DirectoryProvisioningError, InvalidConfigurationError
from image_batcher.core.progress import ProgressUpdate
from image_batcher.processing.pipeline import process_batch, validate_job_config
from image_batcher.utils.logging import setup_logging

app = typer.Typer(help="批量图片灰度化与格式转换工具。")

EXIT_CONFIG_ERROR = 2
EXIT_PROVISIONING_ERROR = 1


def _resolve_mode(grayscale: bool, convert: bool, target_ext: Optional[str]) -> TransformMode:
    if grayscale and convert:
        raise typer.BadParameter("-g 与 -f 不能同时使用", param_hint="'-g' / '-f'")
    if not grayscale and not convert:
        raise typer.BadParameter("必须指定 -g 或 -f 其中之一", param_hint="'-g' / '-f'")
    if convert:
        if not target_ext:
            raise typer.BadParameter("使用 -f 时必须通过 -t 指定目标扩展名", param_hint="'-t'")
        return FormatConvert(target_ext)
    if target_ext:
        logging.getLogger(__name__).warning("-t 仅在 -f 模式下生效，已忽略：%s", target_ext)
    return Grayscale()


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("处理图片", total=update.total)
        progress.update(task_id, completed=update.completed, description=f"第 {update.batch} 批")
        if update.message:
            progress.log(update.message)

    return callback


@app.command("run")
def run_cli(  # noqa: PLR0913
    grayscale: bool = typer.Option(False, "--grayscale", "-g", help="灰度模式"),
    convert: bool = typer.Option(False, "--format", "-f", help="格式转换模式"),
    input_pattern: str = typer.Option(..., "--input", "-i", help="输入文件、目录或 glob 模式"),
    output: Path = typer.Option(..., "--output", "-o", help="输出目录"),
    concurrency: int = typer.Option(..., "--concurrency", "-n", min=1, help="每批并发工作线程数量"),
    target_ext: Optional[str] = typer.Option(None, "--target-ext", "-t", help="目标扩展名，仅用于 -f"),
    report: Optional[str] = typer.Option(None, "--report", help="在输出目录中写入 CSV 报告的文件名"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """执行批量处理。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)
    logger = logging.getLogger(__name__)

    mode = _resolve_mode(grayscale, convert, target_ext)
    job = JobConfig(
        input_pattern=input_pattern,
        output_dir=output.expanduser().resolve(),
        mode=mode,
        concurrency=concurrency,
        report_filename=report,
    )

    try:
        validate_job_config(job)
    except InvalidConfigurationError as exc:
        typer.echo(f"配置错误：{exc}", err=True)
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from exc

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
    )

    try:
        with progress:
            result = process_batch(job, progress_callback=_build_progress_callback(progress))
    except DirectoryProvisioningError as exc:
        logger.error("%s", exc)
        typer.echo(f"输出目录错误：{exc}", err=True)
        raise typer.Exit(code=EXIT_PROVISIONING_ERROR) from exc

    typer.echo(
        f"处理完成：成功 {len(result.succeeded)} 张，失败 {len(result.failed)} 张，"
        f"无法解码 {len(result.load_failures)} 个，共 {len(result.batches)} 批。"
    )
    if report:
        typer.echo(f"报告文件：{job.output_dir / report}")


if __name__ == "__main__":
    app()
