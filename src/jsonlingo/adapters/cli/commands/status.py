# src/jsonlingo/adapters/cli/commands/status.py
"""CLI 命令: `status`，查询任务状态与回调记录。"""

import asyncio
import json
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from jsonlingo.application.queries import JobStatusView
from jsonlingo.containers import ApplicationContainer

from .._utils import run_with_container

app = typer.Typer(help="查询任务状态。", no_args_is_help=True)
console = Console()

_STATUS_STYLES = {"pending": "yellow", "completed": "green", "failed": "red"}


def _render(view: JobStatusView) -> None:
    job = view.job
    style = _STATUS_STYLES.get(job.status.value, "white")

    summary = Table(show_header=False, box=None)
    summary.add_column(style="dim", justify="right")
    summary.add_column()
    summary.add_row("状态", f"[{style}]{job.status.value}[/{style}]")
    summary.add_row("语言", f"{job.source_lang or 'auto'} → {job.target_lang}")
    summary.add_row("句段", f"{job.total_segments}（缓存命中 {job.cache_hits}）")
    summary.add_row("回调地址", job.callback_url)
    summary.add_row("创建时间", str(job.created_at))
    summary.add_row("完成时间", str(job.finished_at or "-"))
    if job.error:
        summary.add_row("错误", f"[red]{job.error}[/red]")
    console.print(Panel(summary, title=f"任务 {job.id}", expand=False))

    if job.output_json is not None:
        console.print(
            Syntax(json.dumps(job.output_json, ensure_ascii=False, indent=2), "json")
        )

    if view.callback_attempts:
        attempts = Table(title="回调记录")
        attempts.add_column("#", justify="right")
        attempts.add_column("HTTP")
        attempts.add_column("时间")
        attempts.add_column("错误")
        for index, attempt in enumerate(view.callback_attempts, start=1):
            attempts.add_row(
                str(index),
                str(attempt.http_status),
                str(attempt.created_at),
                attempt.error or "",
            )
        console.print(attempts)


@app.command("job", help="显示一个任务的状态、结果与回调记录。")
def status_job(
    ctx: typer.Context,
    job_id: Annotated[str, typer.Argument(help="任务 ID。")],
    as_json: Annotated[bool, typer.Option("--json", help="以 JSON 输出。")] = False,
) -> None:
    async def _logic(container: ApplicationContainer) -> JobStatusView | None:
        return await container.services.job_query_service().get_job(job_id)

    view = asyncio.run(run_with_container(ctx.obj, _logic))
    if view is None:
        console.print(f"[bold red]任务 {job_id} 不存在。[/bold red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(view.model_dump_json())
    else:
        _render(view)
