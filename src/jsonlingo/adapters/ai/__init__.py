# src/jsonlingo/adapters/ai/__init__.py
from .shortener import BaseShortener, OpenAIShortener, create_shortener

__all__ = ["BaseShortener", "OpenAIShortener", "create_shortener"]
