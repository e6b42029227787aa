"""
Settings loader with priority: CLI > env > TOML > defaults
"""
import os
import tomllib
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Dict, Any, Optional, Mapping

from ...core.constants import (
    CLIENT_SSH,
    DEFAULT_LOG_DIR,
    DEFAULT_LOG_LEVEL,
    DEFAULT_THEME,
    ENV_PREFIX,
    SETTINGS_PATH,
    SUPPORTED_CLIENTS,
)
from ...core.exceptions import SettingsError
from ...core.logging import get_logger

logger = get_logger(__name__)

THEMES = ("sky", "matrix")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """Application settings"""
    config: Optional[str] = None
    theme: str = DEFAULT_THEME
    client: str = CLIENT_SSH
    editor: Optional[str] = None
    exit_on_connect: bool = False
    show_config: bool = False
    debug: bool = False
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level

    def effective_log_file(self) -> Optional[Path]:
        """Log file to write; debug mode without one logs under the default directory"""
        if self.log_file:
            return Path(self.log_file).expanduser()
        if self.debug:
            return Path(DEFAULT_LOG_DIR).expanduser() / "ssm.log"
        return None


_SETTING_KEYS = {f.name for f in fields(Settings)}
_BOOL_KEYS = {"exit_on_connect", "show_config", "debug"}


class SettingsLoader:
    """Settings loader with priority support"""

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        self._env = os.environ if env is None else env
        self._env_prefix = ENV_PREFIX

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """
        Load settings from a TOML file.

        Raises:
            SettingsError: If the file is missing or is not valid TOML
        """
        path = Path(path).expanduser()
        if not path.exists():
            raise SettingsError(f"Settings file not found: {path}")

        try:
            data = tomllib.loads(path.read_text(encoding='utf-8'))
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
            raise SettingsError(f"Failed to parse TOML settings {path}: {e}") from e

        unknown = sorted(set(data) - _SETTING_KEYS)
        if unknown:
            logger.warning("ignoring unknown settings in %s: %s", path, ", ".join(unknown))
        return {key: value for key, value in data.items() if key in _SETTING_KEYS}

    def load_env(self) -> Dict[str, Any]:
        """Load settings from SSM_* environment variables"""
        env_mappings = {
            "CONFIG": "config",
            "THEME": "theme",
            "CLIENT": "client",
            "EDITOR": "editor",
            "EXIT": "exit_on_connect",
            "SHOW": "show_config",
            "DEBUG": "debug",
            "LOG_LEVEL": "log_level",
            "LOG_FILE": "log_file",
        }

        settings: Dict[str, Any] = {}
        for suffix, key in env_mappings.items():
            value = self._env.get(self._env_prefix + suffix)
            if value:
                settings[key] = self._convert_value(key, value)
        return settings

    def _convert_value(self, key: str, value: str) -> Any:
        """Convert an environment string to the setting's type"""
        if key not in _BOOL_KEYS:
            return value
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1", "on"):
            return True
        if lowered in ("false", "no", "0", "off", ""):
            return False
        raise SettingsError(f"invalid boolean for {self._env_prefix}{key.upper()}: {value!r}")

    def merge(self, *layers: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge settings layers.
        Later layers override earlier ones; None values never override.
        """
        result: Dict[str, Any] = {}
        for layer in layers:
            for key, value in layer.items():
                if value is not None:
                    result[key] = value
        return result

    def validate(self, settings: Settings) -> Settings:
        """
        Check enumerated settings.

        Raises:
            SettingsError: On an unknown theme, client or log level
        """
        if settings.theme not in THEMES:
            raise SettingsError(f"unknown theme {settings.theme!r}, expected one of {', '.join(THEMES)}")
        if settings.client not in SUPPORTED_CLIENTS:
            raise SettingsError(
                f"unknown client {settings.client!r}, expected one of {', '.join(SUPPORTED_CLIENTS)}"
            )
        settings.log_level = str(settings.log_level).upper()
        if settings.log_level not in LOG_LEVELS:
            raise SettingsError(f"unknown log level {settings.log_level!r}")
        for key in _BOOL_KEYS:
            if not isinstance(getattr(settings, key), bool):
                raise SettingsError(f"setting {key!r} must be a boolean")
        return settings

    def load(
        self,
        toml_path: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
    ) -> Settings:
        """
        Load settings with priority: CLI > env > TOML > defaults

        Args:
            toml_path: Settings file; the default location is optional, an
                explicit path must exist
            cli_overrides: CLI parameter overrides (None values are ignored)
            use_env: Whether to load from environment variables

        Returns:
            Validated Settings

        Raises:
            SettingsError: On unreadable or invalid settings
        """
        layers = []

        # 1. TOML file
        if toml_path is not None:
            layers.append(self.load_toml(toml_path))
        else:
            default = Path(SETTINGS_PATH).expanduser()
            if default.is_file():
                layers.append(self.load_toml(default))

        # 2. Environment variables
        if use_env:
            layers.append(self.load_env())

        # 3. CLI overrides (highest priority)
        if cli_overrides:
            layers.append(cli_overrides)

        merged = self.merge(*layers)
        logger.debug("settings: %s", merged)
        return self.validate(Settings(**merged))
