# src/jsonlingo/adapters/cli/commands/request.py
"""
CLI 命令: `request`，提交新的翻译任务。
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich import print_json
from rich.console import Console

from jsonlingo.containers import ApplicationContainer
from jsonlingo_core.exceptions import InvalidRequestError

from .._utils import run_with_container

app = typer.Typer(name="request", help="提交翻译任务。", no_args_is_help=True)
console = Console()


def _parse_json(raw: str, param_hint: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"不是一个有效的 JSON: {e}", param_hint=param_hint) from e


@app.command(name="submit", help="提交一个 JSON 文档进行翻译。", no_args_is_help=True)
def request_submit_cli(
    ctx: typer.Context,
    target_lang: Annotated[
        str, typer.Option("--target", "-t", help="目标语言代码。", show_default=False)
    ],
    callback_url: Annotated[
        str, typer.Option("--callback", "-c", help="结果回调地址。", show_default=False)
    ],
    json_text: Annotated[
        Optional[str], typer.Option("--json", "-j", help="待翻译的 JSON 字符串。")
    ] = None,
    json_file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="待翻译的 JSON 文件。", exists=True, dir_okay=False),
    ] = None,
    source_lang: Annotated[
        Optional[str], typer.Option("--source", "-s", help="源语言代码，缺省为自动检测。")
    ] = None,
    constraints: Annotated[
        Optional[str],
        typer.Option("--constraints", help='长度约束 JSON，例如 {"title": 50}。'),
    ] = None,
    glossary_id: Annotated[
        Optional[str], typer.Option("--glossary", help="术语表 ID。")
    ] = None,
    metadata: Annotated[
        Optional[str], typer.Option("--metadata", help="原样回传的元数据 JSON。")
    ] = None,
) -> None:
    if (json_text is None) == (json_file is None):
        raise typer.BadParameter("必须且只能提供 --json 或 --file 之一。")
    document = (
        _parse_json(json_text, "--json")
        if json_text is not None
        else _parse_json(json_file.read_text(encoding="utf-8"), "--file")
    )
    payload = {
        "json": document,
        "targetLang": target_lang,
        "sourceLang": source_lang,
        "callbackUrl": callback_url,
        "constraints": _parse_json(constraints, "--constraints") if constraints else {},
        "glossaryId": glossary_id,
        "metadata": _parse_json(metadata, "--metadata") if metadata else None,
    }

    async def _logic(container: ApplicationContainer) -> str:
        return await container.services.scheduler().submit(payload)

    try:
        job_id = asyncio.run(run_with_container(ctx.obj, _logic))
    except InvalidRequestError as e:
        console.print(f"[bold red]请求无效: {e}[/bold red]")
        raise typer.Exit(1) from e

    print_json(data={"status": "accepted", "job_id": job_id})
