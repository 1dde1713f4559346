# src/jsonlingo/workers/__init__.py
from ._pool import MessageHandler, WorkerPool, install_shutdown_handlers

__all__ = ["WorkerPool", "MessageHandler", "install_shutdown_handlers"]
