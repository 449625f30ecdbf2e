from __future__ import annotations

import logging

from erp_toolkit.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    log_summary,
    set_debug,
    setup_logging,
)


def _record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord(LOGGER_NAME, level, __file__, 1, msg, None, None)


def test_labels():
    fmt = LabeledFormatter()
    assert fmt.format(_record(logging.INFO, "hello")) == "INFO hello"
    assert fmt.format(_record(logging.WARNING, "careful")) == "WARN careful"
    assert fmt.format(_record(logging.ERROR, "boom")) == "ERROR boom"
    assert fmt.format(_record(SUMMARY_LEVEL, "rows=1")) == "SUMMARY rows=1"


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging()
    assert first is second
    assert len(first.handlers) == 1
    assert first.propagate is False


def test_child_loggers_reach_stdout(capsys):
    setup_logging()
    logging.getLogger(f"{LOGGER_NAME}.excel.rate_guide_parser").info("parsed rows=3")
    log_summary("file=a.csv status=ok")
    out = capsys.readouterr().out.splitlines()
    assert out == ["INFO parsed rows=3", "SUMMARY file=a.csv status=ok"]


def test_debug_hidden_until_enabled(capsys):
    logger = setup_logging()
    logger.debug("hidden")
    set_debug(logger)
    logger.debug("shown")
    assert capsys.readouterr().out.splitlines() == ["DEBUG shown"]
