"""
Rich-based logging system
"""
import logging
from typing import Optional
from pathlib import Path

from rich.logging import RichHandler
from rich.console import Console
from rich.traceback import install as install_traceback


# Global console instances; streams are looked up on every write
_stdout_console = Console()
_stderr_console = Console(stderr=True)

# Install rich traceback handler
install_traceback(show_locals=False, width=120)


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[Path] = None,
    console: bool = True,
    rich_tracebacks: bool = True,
) -> None:
    """
    Setup Rich logging system.

    The terminal UI owns the screen while it runs, so it calls this with
    console=False and relies on the file handler only.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        console: Attach the Rich handler on stderr
        rich_tracebacks: Enable rich tracebacks
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if console:
        rich_handler = RichHandler(
            console=_stderr_console,
            show_time=True,
            show_path=log_level <= logging.DEBUG,
            rich_tracebacks=rich_tracebacks,
            markup=False,
            show_level=True,
        )
        rich_handler.setLevel(log_level)
        root_logger.addHandler(rich_handler)

    if log_file:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def get_stdout_console() -> Console:
    """Get stdout console for user-facing output"""
    return _stdout_console


def get_stderr_console() -> Console:
    """Get stderr console for errors and logs"""
    return _stderr_console
