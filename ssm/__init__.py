"""
ssm - Secure Shell Manager

Terminal browser for the hosts of an OpenSSH client config:
- Host list with live filtering and optional tags (`#tag:` comments)
- Connect with ssh or mosh, or exit and become the client
- Edit the config in place; changes to it and its includes reload automatically
- Run one-shot commands on the selected host
"""

__version__ = "0.1.0"

# Export core components
from .domain.sshconf import (
    Host,
    Config,
    NO_HOST,
    parse,
    parse_path,
    parse_default,
    ConfigStore,
    ConfigWatcher,
)
from .domain.session import Session

__all__ = [
    "__version__",
    "Host",
    "Config",
    "NO_HOST",
    "parse",
    "parse_path",
    "parse_default",
    "ConfigStore",
    "ConfigWatcher",
    "Session",
]
