"""Tests for terminal-safe output and logging setup."""
import logging

from rich.logging import RichHandler

from calltrace.utils.terminal import SafeConsole, SafeFormatter, configure_logging, sanitize_for_terminal


def test_sanitize_replaces_glyphs_on_ascii_terminals():
    assert sanitize_for_terminal("App → Route ← x", utf8=False) == "App -> Route <- x"


def test_sanitize_keeps_glyphs_on_utf8_terminals():
    assert sanitize_for_terminal("App → Route", utf8=True) == "App → Route"


def test_configure_logging_replaces_its_handler():
    configure_logging("INFO")
    logger = configure_logging("debug")

    rich_handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
    assert len(rich_handlers) == 1
    assert logger.level == logging.DEBUG

    configure_logging("WARNING")


def test_log_messages_get_the_ascii_fallback():
    formatter = SafeFormatter(utf8=False)
    record = logging.LogRecord("calltrace", logging.WARNING, __file__, 1, "App → Route", None, None)

    assert formatter.format(record) == "App -> Route"


def test_configure_logging_uses_safe_console_and_formatter():
    logger = configure_logging("WARNING")

    handler = next(h for h in logger.handlers if isinstance(h, RichHandler))
    assert isinstance(handler.console, SafeConsole)
    assert isinstance(handler.formatter, SafeFormatter)
