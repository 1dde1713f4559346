# src/jsonlingo/adapters/cli/commands/worker.py
"""CLI 命令: `worker`，启动后台 Worker 池。"""

import asyncio

import structlog
import typer
from rich.console import Console

from jsonlingo.containers import ApplicationContainer
from jsonlingo.workers import WorkerPool, install_shutdown_handlers

from .._utils import run_with_container

console = Console()
logger = structlog.get_logger(__name__)

app = typer.Typer(help="运行后台 Worker 进程。", no_args_is_help=True)


async def _run_pools(
    container: ApplicationContainer, translator: bool, callbacks: bool
) -> None:
    shutdown_event = asyncio.Event()
    install_shutdown_handlers(shutdown_event)

    pools: list[WorkerPool] = []
    engine = None
    shortener = None
    if translator:
        engine = container.engines.active_engine()
        shortener = container.engines.shortener()
        await engine.initialize()
        pools.append(container.workers.translation_pool())
    if callbacks:
        pools.append(container.workers.callback_pool())

    try:
        await asyncio.gather(
            *(p.run_loop(shutdown_event, install_signal_handlers=False) for p in pools)
        )
    finally:
        if engine is not None:
            await engine.close()
        if shortener is not None:
            await shortener.close()


@app.command("run")
def run_workers_cli(
    ctx: typer.Context,
    all_in_one: bool = typer.Option(
        False, "--all", help="在一个进程中运行所有 Worker 池。"
    ),
    translator: bool = typer.Option(False, "--translator", help="启动翻译 Worker 池。"),
    callbacks: bool = typer.Option(False, "--callbacks", help="启动回调 Worker 池。"),
) -> None:
    """启动一个或多个 Worker 池，直到收到 SIGINT / SIGTERM。"""
    if not any([all_in_one, translator, callbacks]):
        console.print(
            "[bold red]错误: 必须至少指定一个 Worker 类型 "
            "(--all, --translator, 或 --callbacks)。[/bold red]"
        )
        raise typer.Exit(1)

    translator = translator or all_in_one
    callbacks = callbacks or all_in_one
    console.print(
        f"[cyan]🚀 正在启动 Worker 池: "
        f"{', '.join(n for n, on in (('translator', translator), ('callbacks', callbacks)) if on)}[/cyan]"
    )

    async def _logic(container: ApplicationContainer) -> None:
        await _run_pools(container, translator, callbacks)

    asyncio.run(run_with_container(ctx.obj, _logic))
    console.print("[bold green]✅ 所有 Worker 已安全关闭。[/bold green]")
