# src/jsonlingo/__init__.py
"""
jsonlingo：异步 JSON 文档翻译服务。

接收任意 JSON 文档，翻译其中所有字符串叶子（保留 HTML 结构），
并把结果通过 Webhook 回调给调用方。
"""

__version__ = "0.1.0"
