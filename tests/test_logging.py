"""Tests for localctx.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from localctx.logging import configure_logging, get_logger


def test_get_logger_builds_child_names() -> None:
    assert get_logger().name == "localctx"
    assert get_logger("discovery.matcher").name == "localctx.discovery.matcher"


def test_log_file_records_debug_while_console_stays_at_info(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "localctx.log"
    logger = configure_logging(log_file=log_file)
    try:
        console, file_handler = logger.handlers
        assert console.level == logging.INFO
        assert file_handler.level == logging.DEBUG

        get_logger("discovery.matcher").debug("Could not read file %s", "blob.bin")
        file_handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "DEBUG localctx.discovery.matcher" in text
        assert "Could not read file blob.bin" in text
    finally:
        configure_logging()


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging(verbose=True)
    logger = configure_logging()

    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
    assert logger.propagate is False
