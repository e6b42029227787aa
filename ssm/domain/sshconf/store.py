"""
Thread-safe holder of the live SSH config
"""
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from ...core.exceptions import ConfigError
from ...core.logging import get_logger
from .models import Config
from .parser import parse

logger = get_logger(__name__)


@dataclass
class ReloadResult:
    """Outcome of a reload; exactly one of config and error is set"""
    config: Optional[Config] = None
    error: Optional[ConfigError] = None

    @property
    def success(self) -> bool:
        return self.error is None


class ConfigStore:
    """
    Owns the live Config for one session.

    The watcher thread reloads through this store while the interface
    reads the path for its title, so path and config are only touched
    under the lock. A failed reload keeps the previous Config.
    """

    def __init__(self, config: Config, parser: Callable[[str], Config] = parse):
        self._lock = threading.Lock()
        self._config = config
        self._parser = parser

    @property
    def path(self) -> str:
        with self._lock:
            return self._config.path

    @property
    def config(self) -> Config:
        with self._lock:
            return self._config

    def reload(self) -> ReloadResult:
        """
        Re-parse the current path and swap in the new Config.

        Returns:
            ReloadResult carrying the new Config or the parse error
        """
        with self._lock:
            path = self._config.path
            try:
                config = self._parser(path)
            except ConfigError as e:
                logger.warning("reload of %s failed, keeping previous config: %s", path, e)
                return ReloadResult(error=e)
            self._config = config
            logger.info("reloaded %s: %d hosts", path, len(config.hosts))
            return ReloadResult(config=config)
