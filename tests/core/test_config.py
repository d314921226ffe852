from __future__ import annotations

import logging

import pytest

from lazygraph.config import Settings, load_settings
from lazygraph.utils import configure_logging, get_logger


def test_load_settings_defaults() -> None:
    assert load_settings({}) == Settings(engine="numpy", log_level="WARNING")


def test_load_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LAZYGRAPH_ENGINE", "custom")
    monkeypatch.setenv("LAZYGRAPH_LOG_LEVEL", "debug")
    settings = load_settings()
    assert settings.engine == "custom"
    assert settings.log_level == "DEBUG"


def test_get_logger_namespaces_under_package() -> None:
    assert get_logger("runtime").name == "lazygraph.runtime"
    assert get_logger("lazygraph.graph.node").name == "lazygraph.graph.node"
    assert get_logger().name == "lazygraph"


def test_configure_logging_adds_handler_once() -> None:
    logger = configure_logging("DEBUG")
    configure_logging("INFO")
    ours = [h for h in logger.handlers if getattr(h, "_lazygraph", False)]
    assert len(ours) == 1
    assert logger.level == logging.INFO
