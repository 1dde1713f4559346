# src/jsonlingo/management/config_utils.py
"""配置相关的工具函数。"""

from __future__ import annotations

from typing import Union

from sqlalchemy.engine.url import URL, make_url


def mask_db_url(url: Union[str, URL, None]) -> str:
    """
    安全地脱敏一个数据库连接 URL，将其密码替换为 '***'。

    Args:
        url: 一个 SQLAlchemy URL 对象或 DSN 字符串，可以为 None。

    Returns:
        一个脱敏后的 DSN 字符串，适合在日志或控制台中显示。
    """
    if url is None:
        return "[未配置]"
    try:
        return make_url(url).render_as_string(hide_password=True)
    except Exception:
        return "[无法解析的数据库 URL]"


def mask_secret(value: str | None, visible: int = 4) -> str:
    """脱敏 API Key 一类的密钥，只保留末尾几位。"""
    if not value:
        return "[未配置]"
    if len(value) <= visible:
        return "***"
    return f"***{value[-visible:]}"
