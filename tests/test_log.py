"""Tests for tabby.log — console logging setup."""

from __future__ import annotations

import logging

import pytest

from tabby.log import configure_logging, get_logger


class TestGetLogger:
    def test_hierarchy(self) -> None:
        assert get_logger().name == "tabby"
        assert get_logger("build").name == "tabby.build"


class TestConfigureLogging:
    def test_level_and_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging()
        get_logger("build").info("[Copied] path=%s", "a.png")
        get_logger("build").debug("hidden")

        out = capsys.readouterr().out
        assert out == "INFO\t[Copied] path=a.png\n"

    def test_debug_enables_debug_lines(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(debug=True)
        get_logger("watcher").debug("Watching.... path=%s", "/src")
        assert "DEBUG\tWatching.... path=/src" in capsys.readouterr().out

    def test_repeated_calls_keep_one_handler(self) -> None:
        configure_logging()
        logger = configure_logging()
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO
        assert logger.propagate is False
