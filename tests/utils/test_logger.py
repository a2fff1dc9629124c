import logging
import sys

import pytest

from swagclan.util.logger import (
    NOISY_LOGGERS,
    ColorFormatter,
    PromptToolkitHandler,
    configure_logging,
    get_log_filepath,
    get_logger,
    handle_exception,
    set_console_level,
    setup_logger,
    shared_handlers,
    should_use_color,
)


class DummyStream:
    def __init__(self):
        self.written = []

    def write(self, msg):
        self.written.append(msg)

    def isatty(self):
        return True


def test_get_logger_returns_logger():
    logger = get_logger("test_logger")
    assert isinstance(logger, logging.Logger)
    assert any(isinstance(h, PromptToolkitHandler) for h in logger.handlers)


def test_setup_logger_idempotent():
    logger1 = setup_logger("test_logger_idem")
    logger2 = setup_logger("test_logger_idem")
    assert logger1 is logger2
    assert len(logger1.handlers) == 2


def test_color_formatter_applies_color():
    formatter = ColorFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("test", logging.ERROR, "", 0, "error occurred", None, None)
    formatted = formatter.format(record)
    assert "\033[31m" in formatted and "error occurred" in formatted


def test_should_use_color_true(monkeypatch):
    monkeypatch.setattr("sys.stderr", DummyStream())
    assert should_use_color() is True


def test_get_log_filepath_is_stable():
    assert get_log_filepath() == get_log_filepath()
    assert get_log_filepath().parent.exists()


def test_loggers_share_one_console_and_file_handler():
    first = get_logger("test_logger_shared_a")
    second = get_logger("test_logger_shared_b")

    assert first.handlers == second.handlers == list(shared_handlers())


def test_set_console_level_accepts_names_and_rejects_unknown():
    console_handler, file_handler = shared_handlers()
    try:
        assert set_console_level("warning") == logging.WARNING
        assert console_handler.level == logging.WARNING
        assert file_handler.level == logging.DEBUG

        with pytest.raises(ValueError):
            set_console_level("LOUD")
    finally:
        set_console_level(logging.INFO)


def test_configure_logging_quiets_libraries_and_installs_hook(monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.__excepthook__)
    console_handler, _ = shared_handlers()
    try:
        configure_logging("NOT_A_LEVEL")

        assert console_handler.level == logging.INFO
        assert sys.excepthook is handle_exception
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.ERROR
    finally:
        set_console_level(logging.INFO)


def test_handle_exception_logs_error(caplog):
    class DummyException(Exception):
        pass

    logger = get_logger("uncaught")
    logger.propagate = True
    try:
        with caplog.at_level(logging.ERROR, logger="uncaught"):
            try:
                raise DummyException("fail")
            except DummyException as exc:
                handle_exception(DummyException, exc, exc.__traceback__)
    finally:
        logger.propagate = False

    assert any("Uncaught exception" in r.message for r in caplog.records)
