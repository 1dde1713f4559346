# src/jsonlingo/adapters/cli/main.py
"""jsonlingo 命令行入口。"""

from typing import Annotated, Literal

import typer
from rich.console import Console
from rich.traceback import install as install_rich_tracebacks

from jsonlingo.bootstrap import create_app_config, create_container
from jsonlingo_core.exceptions import ConfigurationError

from .commands import db, request, status, worker

install_rich_tracebacks(show_locals=False, word_wrap=True)

app = typer.Typer(
    name="jsonlingo",
    help="jsonlingo JSON 翻译服务命令行管理工具。",
    add_completion=False,
    no_args_is_help=True,
)

app.add_typer(db.app, name="db")
app.add_typer(request.app, name="request")
app.add_typer(status.app, name="status")
app.add_typer(worker.app, name="worker")

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    env: Annotated[
        str, typer.Option("--env", help="运行环境 (prod, test)")
    ] = "prod",
) -> None:
    """
    主回调函数，在任何子命令执行前运行，负责加载配置、初始化日志并创建 DI 容器。
    """
    if ctx.resilient_parsing:
        return

    env_mode: Literal["prod", "test"] = "test" if env.lower() == "test" else "prod"
    try:
        config = create_app_config(env_mode)
    except ConfigurationError as e:
        console.print(f"[bold red]配置错误: {e}[/bold red]")
        raise typer.Exit(2) from e

    ctx.obj = create_container(config, service_name="jsonlingo-cli")
