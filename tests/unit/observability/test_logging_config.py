# tests/unit/observability/test_logging_config.py
"""
测试日志配置模块：HybridPanelRenderer 的渲染逻辑与 setup_logging 的配置行为。
"""

import logging
from unittest.mock import Mock

import pytest
import structlog
from rich.console import Console

from jsonlingo.config import JsonLingoConfig, LoggingSettings
from jsonlingo.observability.logging_config import (
    APP_LOGGER_NAME,
    HybridPanelRenderer,
    setup_logging,
    setup_logging_from_config,
)


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def _renderer(**kwargs) -> HybridPanelRenderer:
    return HybridPanelRenderer(console=Console(width=100, color_system=None), **kwargs)


class TestHybridPanelRenderer:
    def test_empty_event_renders_nothing(self):
        assert _renderer()(Mock(), "info", {"event": ""}) == ""
        assert _renderer()(Mock(), "info", {}) == ""

    def test_renders_message_level_and_context(self):
        output = _renderer()(
            Mock(),
            "info",
            {
                "event": "任务已完成，输出结果已写入数据库，回调已经进入投递队列",
                "level": "info",
                "logger": "jsonlingo.scheduler",
                "timestamp": "2024-01-01 00:00:00",
                "job_id": "job-1",
            },
        )
        assert output.startswith("\n")
        assert "任务已完成" in output
        assert "INFO" in output
        assert "jsonlingo.scheduler" in output
        assert "job_id" in output and "job-1" in output
        assert "2024-01-01 00:00:00" in output

    def test_only_first_render_gets_leading_newline(self):
        renderer = _renderer()
        first = renderer(Mock(), "info", {"event": "a"})
        second = renderer(Mock(), "info", {"event": "b"})
        assert first.startswith("\n")
        assert not second.startswith("\n")

    def test_logger_name_can_be_hidden(self):
        output = _renderer(show_logger_name=False)(
            Mock(), "warning", {"event": "x", "logger": "hidden.name"}
        )
        assert "hidden.name" not in output


class TestSetupLogging:
    @pytest.mark.parametrize("log_format", ["console", "json"])
    def test_configures_root_and_app_loggers(self, log_format):
        setup_logging(log_level="DEBUG", log_format=log_format, service="svc")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
        assert root.level == logging.WARNING
        assert logging.getLogger(APP_LOGGER_NAME).level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        assert structlog.contextvars.get_contextvars() == {"service": "svc"}

    def test_json_output_is_structured(self, capsys):
        setup_logging(log_level="INFO", log_format="json")
        structlog.get_logger("jsonlingo.test").info("hello", job_id="j-1")

        err = capsys.readouterr().err
        assert '"event": "hello"' in err
        assert '"job_id": "j-1"' in err

    def test_from_config(self):
        cfg = JsonLingoConfig(logging=LoggingSettings(level="WARNING", format="json"))
        setup_logging_from_config(cfg, service="worker")
        assert logging.getLogger(APP_LOGGER_NAME).level == logging.WARNING
        assert structlog.contextvars.get_contextvars()["service"] == "worker"
