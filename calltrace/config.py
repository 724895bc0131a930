"""Configuration management for calltrace.

Loads environment variables (optionally from a .env file) and provides
centralized config access.
"""
import logging
import os
from pathlib import Path
from typing import Optional, Set, Union

from dotenv import load_dotenv

__version__ = "0.1.0"

DEFAULT_MAX_FILE_SIZE = 5_000_000  # bytes

DEFAULT_EXCLUDED_DIRS = frozenset({
    'node_modules', 'bower_components', 'jspm_packages',
    'dist', 'build', 'out', 'coverage',
    '.next', '.nuxt', '.svelte-kit', '.turbo', '.cache',
    'vendor', 'third_party',
    '.git', '.hg', '.svn',
})

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean environment variable.

    Raises:
        ValueError: If the value is not a recognised boolean spelling
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {raw!r}")


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_file: Optional[Union[str, Path]] = None):
        """Initialize config by loading a .env file.

        Args:
            env_file: Explicit .env path; defaults to ./.env in the working directory
        """
        env_path = Path(env_file) if env_file else Path.cwd() / ".env"
        # Existing environment variables take precedence over the file
        load_dotenv(env_path)

        self._validate()

    def _validate(self):
        """Fail fast on malformed settings.

        Raises:
            ValueError: If any variable cannot be interpreted
        """
        # Each property raises on malformed input; touch them all once
        self.permissive_markup
        self.lowercase_tag_attributes
        self.max_file_size
        self.log_level

    @property
    def permissive_markup(self) -> bool:
        """Whether markup tags may resolve to local symbols, not only imports."""
        return _env_flag("CALLTRACE_PERMISSIVE_MARKUP", False)

    @property
    def lowercase_tag_attributes(self) -> bool:
        """Whether attributes of intrinsic tags (<div onClick={...}>) are scanned."""
        return _env_flag("CALLTRACE_LOWERCASE_TAG_ATTRIBUTES", True)

    @property
    def max_file_size(self) -> int:
        """Largest source file (bytes) the builder will parse.

        Raises:
            ValueError: If CALLTRACE_MAX_FILE_SIZE is not a positive integer
        """
        raw = os.getenv("CALLTRACE_MAX_FILE_SIZE")
        if raw is None or not raw.strip():
            return DEFAULT_MAX_FILE_SIZE
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"CALLTRACE_MAX_FILE_SIZE must be an integer, got {raw!r}") from None
        if value <= 0:
            raise ValueError(f"CALLTRACE_MAX_FILE_SIZE must be positive, got {value}")
        return value

    @property
    def log_level(self) -> str:
        """Logging level name for the calltrace logger.

        Raises:
            ValueError: If CALLTRACE_LOG_LEVEL is not a standard level name
        """
        level = os.getenv("CALLTRACE_LOG_LEVEL", "WARNING").strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown CALLTRACE_LOG_LEVEL: {level}")
        return level

    @property
    def excluded_dirs(self) -> Set[str]:
        """Directory names skipped during project scans."""
        extra = os.getenv("CALLTRACE_EXCLUDED_DIRS", "")
        return set(DEFAULT_EXCLUDED_DIRS) | {part.strip() for part in extra.split(',') if part.strip()}


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config():
    """Drop the cached Config so the next get_config() re-reads the environment."""
    global _config
    _config = None
