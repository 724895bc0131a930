"""Terminal-safe console output and logging setup.

Wraps Rich's Console so the arrows and box glyphs used in calltrace tables
degrade to ASCII on terminals that cannot encode them.
"""
import locale
import logging
import sys
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


# Unicode to ASCII fallbacks for glyphs calltrace prints
ICON_MAP = {
    '→': '->',
    '←': '<-',
    '⇒': '=>',
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',
    '…': '...',
    '•': '*',
    '│': '|',
    '─': '-',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding capability.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    if getattr(sys.stdout, 'encoding', None):
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except Exception:
        return 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str, utf8: bool = None) -> str:
    """Replace Unicode glyphs with ASCII equivalents when the terminal needs it.

    Args:
        text: Text potentially containing Unicode glyphs
        utf8: Override terminal detection (mainly for tests)
    """
    if utf8 is None:
        utf8 = is_utf8_capable()
    if utf8:
        return text

    for unicode_char, ascii_replacement in ICON_MAP.items():
        text = text.replace(unicode_char, ascii_replacement)
    return text


class SafeConsole(Console):
    """Console that sanitizes string output on non-UTF-8 terminals."""

    def __init__(self, *args, **kwargs):
        self._needs_sanitization = not is_utf8_capable()
        if self._needs_sanitization and sys.platform == 'win32':
            kwargs['legacy_windows'] = True
        super().__init__(*args, **kwargs)

    @property
    def needs_sanitization(self) -> bool:
        return self._needs_sanitization

    def print(self, *objects: Any, **kwargs) -> None:
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj, utf8=False) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)


class SafeFormatter(logging.Formatter):
    """Formatter that applies the ASCII glyph fallback to log messages."""

    def __init__(self, fmt: str = "%(message)s", utf8: bool = None):
        super().__init__(fmt)
        self.utf8 = utf8

    def format(self, record: logging.LogRecord) -> str:
        return sanitize_for_terminal(super().format(record), utf8=self.utf8)


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Route the 'calltrace' logger through a RichHandler on stderr.

    Safe to call repeatedly: previous handlers installed here are replaced.
    """
    logger = logging.getLogger("calltrace")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    console = SafeConsole(stderr=True)
    handler = RichHandler(
        console=console,
        show_path=False,
        rich_tracebacks=True,
    )
    # RichHandler renders records as Text, which bypasses SafeConsole.print
    handler.setFormatter(SafeFormatter(utf8=not console.needs_sanitization))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger
