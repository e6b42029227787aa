"""
Core infrastructure layer
"""
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import Launcher, CommandRunner, ProcessResult
from .utils import file_exists, find_client, editor_candidates, resolve_editor

__all__ = [
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "Launcher",
    "CommandRunner",
    "ProcessResult",
    "file_exists",
    "find_client",
    "editor_candidates",
    "resolve_editor",
]
