# src/jsonlingo/config_loader.py
"""
配置装载器。

职责：
- 加载 .env / .env.test；
- 构造 JsonLingoConfig；
- 严格模式下拒绝任何 JL_* 遗留键。
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import ValidationError

from jsonlingo.config import JsonLingoConfig
from jsonlingo_core.exceptions import ConfigurationError

__all__ = ["load_config_from_env"]

LEGACY_PREFIX = "JL_"


def _load_env_files(mode: Literal["test", "prod"]) -> None:
    """
    加载 .env / .env.test：
    - test 模式：先加载 .env（override=False），再加载 .env.test（override=True）
    - prod 模式：仅加载 .env（override=False）
    """
    cwd = Path.cwd()
    env_path = cwd / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=False)

    if mode == "test":
        env_test_path = cwd / ".env.test"
        if env_test_path.exists():
            load_dotenv(env_test_path, override=True)


def _ensure_no_legacy_prefix(strict: bool) -> None:
    """权威前缀为 JSONLINGO_，严格模式下发现 JL_* 直接报错。"""
    if not strict:
        return
    legacy = sorted(k for k in os.environ if k.startswith(LEGACY_PREFIX))
    if legacy:
        raise ConfigurationError(
            f"检测到遗留环境变量前缀 {LEGACY_PREFIX}：{legacy}。"
            "请全部改为 JSONLINGO_ 前缀，并使用双下划线 '__' 表示嵌套，"
            "例如 JSONLINGO_DATABASE__URL。"
        )


def load_config_from_env(
    mode: Literal["test", "prod"] = "prod",
    strict: bool = True,
) -> JsonLingoConfig:
    """
    加载并构造配置对象。

    参数：
      - mode: "test" | "prod"；决定是否加载 .env.test 覆盖项
      - strict: True 时禁止 JL_* 前缀

    Raises:
        ConfigurationError: 遗留前缀或配置值非法（例如不受支持的数据库驱动）。
    """
    _load_env_files(mode)
    _ensure_no_legacy_prefix(strict=strict)
    try:
        return JsonLingoConfig()
    except ValidationError as e:
        raise ConfigurationError(f"配置校验失败：{e}") from e
