"""
Unified exception definitions
"""


class SSMError(Exception):
    """Base exception class"""
    pass


class ConfigError(SSMError):
    """SSH config error"""
    pass


class ConfigNotFoundError(ConfigError):
    """No SSH config found at any known location"""
    pass


class ConfigReadError(ConfigError):
    """SSH config file could not be opened or read"""
    pass


class ProcessError(SSMError):
    """External process error"""
    pass


class EditorNotFoundError(ProcessError):
    """No usable editor executable"""
    pass


class ClientNotFoundError(ProcessError):
    """ssh or mosh executable missing from PATH"""
    pass


class ProcessFailureError(ProcessError):
    """Child process failed to spawn or exited non-zero"""
    pass


class SelectionInvalidError(SSMError):
    """Selected row cannot be resolved to a host"""
    pass


class SettingsError(SSMError):
    """Application settings error"""
    pass
