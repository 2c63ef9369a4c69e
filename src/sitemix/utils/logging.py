"""Logging utilities for SiteMix.

Provides a small level-aware wrapper around :mod:`logging` with coloured
console output, a tqdm-backed progress tracker for multi-step runs and a set
of module-level convenience helpers.
"""

import logging
import os
import sys
from enum import Enum

from tqdm import tqdm


class LogLevel(Enum):
    """Verbosity levels understood by the CLI and API."""

    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class Colors:
    """ANSI colour codes."""

    GRAY = "\033[90m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


class Symbols:
    """Unicode symbols used in log messages."""

    CHECK = "✓"
    CROSS = "✗"
    ROCKET = "🚀"
    GEAR = "⚙"
    WARNING = "⚠"
    FACTORY = "🏭"
    TRUCK = "🚚"
    CHART = "📊"


_LEVEL_TO_LOGGING = {
    LogLevel.QUIET: logging.ERROR,
    LogLevel.NORMAL: logging.INFO,
    LogLevel.VERBOSE: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


class SimpleFormatter(logging.Formatter):
    """Formatter that colours the whole message by record level."""

    COLORS = {
        "DEBUG": Colors.GRAY,
        "INFO": Colors.CYAN,
        "WARNING": Colors.YELLOW,
        "ERROR": Colors.RED,
        "CRITICAL": Colors.RED + Colors.BOLD,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, Colors.RESET)
        return f"{color}{record.getMessage()}{Colors.RESET}"


class SitemixLogger:
    """Central registry of loggers sharing a single verbosity level."""

    _current_level: LogLevel = LogLevel.NORMAL
    _loggers: dict[str, logging.Logger] = {}

    @classmethod
    def set_level(cls, level: LogLevel) -> None:
        cls._current_level = level
        for logger in cls._loggers.values():
            cls._configure_logger_level(logger, level)

    @classmethod
    def get_level(cls) -> LogLevel:
        return cls._current_level

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if name not in cls._loggers:
            logger = logging.getLogger(name)
            cls._configure_logger_level(logger, cls._current_level)
            cls._loggers[name] = logger
        return cls._loggers[name]

    @classmethod
    def _configure_logger_level(cls, logger: logging.Logger, level: LogLevel) -> None:
        # The effective level exported by setup_logging wins so that loggers
        # created in worker processes follow the parent configuration.
        env_level = os.environ.get("SITEMIX_EFFECTIVE_LOG_LEVEL")
        if env_level:
            try:
                level = LogLevel[env_level.upper()]
            except KeyError:
                pass
        logger.setLevel(_LEVEL_TO_LOGGING.get(level, logging.INFO))

    @classmethod
    def progress(cls, message: str, symbol: str = Symbols.GEAR) -> None:
        if cls._current_level.value >= LogLevel.NORMAL.value:
            cls.get_logger("sitemix.progress").info(f"{symbol} {message}")

    @classmethod
    def success(cls, message: str, symbol: str = Symbols.CHECK) -> None:
        if cls._current_level.value >= LogLevel.NORMAL.value:
            cls.get_logger("sitemix.success").info(
                f"{Colors.GREEN}{symbol} {message}{Colors.RESET}"
            )

    @classmethod
    def detail(cls, message: str, indent: str = "  ") -> None:
        if cls._current_level.value >= LogLevel.VERBOSE.value:
            cls.get_logger("sitemix.detail").info(f"{indent} {message}")

    @classmethod
    def debug(cls, message: str, logger_name: str = "sitemix.debug") -> None:
        if cls._current_level.value >= LogLevel.DEBUG.value:
            cls.get_logger(logger_name).debug(message)

    @classmethod
    def info(cls, message: str) -> None:
        if cls._current_level.value >= LogLevel.NORMAL.value:
            cls.get_logger("sitemix.info").info(message)

    @classmethod
    def warning(cls, message: str, symbol: str = Symbols.WARNING) -> None:
        cls.get_logger("sitemix.warning").warning(f"{symbol} {message}")

    @classmethod
    def error(cls, message: str, symbol: str = Symbols.CROSS) -> None:
        cls.get_logger("sitemix.error").error(f"{symbol} {message}")


def suppress_third_party_logs() -> None:
    """Silence chatty third-party libraries."""
    for name in ("pulp", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging(level: LogLevel | None = None) -> None:
    """Configure the root handler and the shared SiteMix level.

    Without an explicit ``level`` the ``SITEMIX_LOG_LEVEL`` environment
    variable is consulted, falling back to ``NORMAL``.
    """
    if level is None:
        env_level = os.environ.get("SITEMIX_LOG_LEVEL", "normal").upper()
        level = LogLevel.__members__.get(env_level, LogLevel.NORMAL)

    os.environ["SITEMIX_EFFECTIVE_LOG_LEVEL"] = level.name
    SitemixLogger.set_level(level)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(SimpleFormatter())
    if level == LogLevel.QUIET:
        handler.setLevel(logging.ERROR)
    elif level == LogLevel.DEBUG:
        handler.setLevel(logging.DEBUG)
    else:
        handler.setLevel(logging.INFO)
    root.addHandler(handler)
    root.setLevel(_LEVEL_TO_LOGGING.get(level, logging.INFO))

    suppress_third_party_logs()


class ProgressTracker:
    """Step-wise progress bar; silent in QUIET mode."""

    def __init__(self, steps: list[str]):
        self.steps = steps
        self.current = 0
        self.show_progress = SitemixLogger.get_level() != LogLevel.QUIET
        self.pbar = None
        if self.show_progress:
            self.pbar = tqdm(
                total=len(steps),
                desc=f"{Colors.BLUE}{Symbols.ROCKET} Progress{Colors.RESET}",
                bar_format="{desc}: {percentage:3.0f}%|{bar:30}| {n_fmt}/{total_fmt}",
            )

    def advance(self, message: str | None = None, status: str = "success") -> None:
        if self.pbar is not None:
            if message:
                color = {
                    "success": Colors.GREEN,
                    "warning": Colors.YELLOW,
                    "error": Colors.RED,
                }.get(status, Colors.CYAN)
                self.pbar.write(f"{color}{Symbols.CHECK} {message}{Colors.RESET}")
            self.pbar.update(1)
        self.current += 1

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.write(
                f"{Colors.GREEN}{Symbols.CHECK} All steps completed{Colors.RESET}"
            )
            self.pbar.close()


def log_progress(message: str, symbol: str = Symbols.GEAR) -> None:
    SitemixLogger.progress(message, symbol)


def log_success(message: str, symbol: str = Symbols.CHECK) -> None:
    SitemixLogger.success(message, symbol)


def log_detail(message: str, indent: str = "  ") -> None:
    SitemixLogger.detail(message, indent)


def log_warning(message: str, symbol: str = Symbols.WARNING) -> None:
    SitemixLogger.warning(message, symbol)


def log_error(message: str, symbol: str = Symbols.CROSS) -> None:
    SitemixLogger.error(message, symbol)


def log_debug(message: str, logger_name: str = "sitemix.debug") -> None:
    SitemixLogger.debug(message, logger_name)


def log_info(message: str) -> None:
    SitemixLogger.info(message)
