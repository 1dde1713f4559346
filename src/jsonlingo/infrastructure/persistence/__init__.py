# src/jsonlingo/infrastructure/persistence/__init__.py
"""持久化层：仓库实现。"""
