# src/jsonlingo/adapters/cli/commands/db.py
"""CLI 命令: `db`，数据库结构管理。"""

import asyncio

import typer
from rich.console import Console

from jsonlingo.containers import ApplicationContainer
from jsonlingo.infrastructure.db import create_schema
from jsonlingo.management.config_utils import mask_db_url

from .._utils import run_with_container

app = typer.Typer(help="数据库结构管理。", no_args_is_help=True)
console = Console()


async def _init_logic(container: ApplicationContainer) -> None:
    await create_schema(container.persistence.db_engine())


@app.command("init", help="创建所有数据表（已存在的表会被跳过）。")
def db_init(ctx: typer.Context) -> None:
    container: ApplicationContainer = ctx.obj
    url = container.pydantic_config().database.url
    console.print(f"[cyan]正在初始化数据库: {mask_db_url(url)}[/cyan]")
    asyncio.run(run_with_container(container, _init_logic))
    console.print("[bold green]✅ 数据库结构已就绪。[/bold green]")
