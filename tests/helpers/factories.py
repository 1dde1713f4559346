# tests/helpers/factories.py
"""测试数据工厂。"""

from __future__ import annotations

from typing import Any

CALLBACK_URL = "https://client.example.com/hooks/translation"


def create_request_data(**overrides: Any) -> dict[str, Any]:
    """构造一个合法的线上格式翻译请求，可通过关键字参数覆盖任意字段。"""
    data: dict[str, Any] = {
        "json": {"title": "Hello", "body": "<p>World</p>", "count": 3},
        "targetLang": "de",
        "callbackUrl": CALLBACK_URL,
    }
    data.update(overrides)
    return data
