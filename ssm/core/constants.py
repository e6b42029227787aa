"""
Project constants definitions
"""

# ============================================================
# SSH Config Locations
# ============================================================

USER_SSH_CONFIG_PATH = "~/.ssh/config"
SYSTEM_SSH_CONFIG_PATH = "/etc/ssh/ssh_config"

# ============================================================
# SSH Config Syntax
# ============================================================

COMMENT_PREFIX = "#"
TAG_PREFIX = "#tag:"
TAG_ORDER_DIRECTIVE = "#tagorder"

# Reserved option key holding a host's tag label
TAG_KEY = TAG_PREFIX

HOST_KEY = "host"
MATCH_KEY = "match"
INCLUDE_KEY = "include"

WILDCARD_CHARS = ("*", "?")

DEFAULT_SSH_PORT = "22"

# ============================================================
# Clients
# ============================================================

CLIENT_SSH = "ssh"
CLIENT_MOSH = "mosh"
SUPPORTED_CLIENTS = (CLIENT_SSH, CLIENT_MOSH)

# Tried in order after $EDITOR
FALLBACK_EDITORS = ("vim", "vi", "nano", "ed")

# ============================================================
# Interface
# ============================================================

APP_NAME = "ssm"
APP_TITLE = "SSM | Secure Shell Manager"

FILTER_CHAR_LIMIT = 64
COMMAND_CHAR_LIMIT = 256
DEBUG_HISTORY = 5

DEFAULT_THEME = "sky"

# ============================================================
# Watcher
# ============================================================

WATCH_DEBOUNCE_SECONDS = 0.2

# ============================================================
# Application Settings
# ============================================================

SETTINGS_PATH = "~/.ssm/settings.toml"
DEFAULT_LOG_DIR = "~/.ssm/logs"
DEFAULT_LOG_LEVEL = "WARNING"
ENV_PREFIX = "SSM_"
