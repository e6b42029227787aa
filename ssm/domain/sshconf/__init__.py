"""
SSH config domain module
"""
from .models import Host, Config, NO_HOST
from .parser import parse, parse_path, parse_default, resolve_default_path
from .store import ConfigStore, ReloadResult
from .watcher import ConfigWatcher

__all__ = [
    "Host",
    "Config",
    "NO_HOST",
    "parse",
    "parse_path",
    "parse_default",
    "resolve_default_path",
    "ConfigStore",
    "ReloadResult",
    "ConfigWatcher",
]
