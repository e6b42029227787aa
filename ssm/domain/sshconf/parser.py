"""
SSH config parser

Reads OpenSSH-style client config files into an ordered list of hosts.
Follows `Include` statements recursively and records every file it reads
so a watcher can reload on change.

ref: https://man.openbsd.org/ssh_config.5
"""
import glob
import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

from ...core.constants import (
    USER_SSH_CONFIG_PATH,
    SYSTEM_SSH_CONFIG_PATH,
    COMMENT_PREFIX,
    TAG_PREFIX,
    TAG_KEY,
    TAG_ORDER_DIRECTIVE,
    HOST_KEY,
    MATCH_KEY,
    INCLUDE_KEY,
    WILDCARD_CHARS,
)
from ...core.exceptions import ConfigNotFoundError, ConfigReadError
from ...core.logging import get_logger
from ...core.utils import file_exists
from .models import Host, Config

logger = get_logger(__name__)

# A "#" not escaped with a backslash starts a comment
_COMMENT_RE = re.compile(r"(?<!\\)#")
_ESCAPED_HASH = "\\#"

PathLike = Union[str, os.PathLike]


# ============================================================
# Default Location
# ============================================================

def resolve_default_path(home: Optional[Path] = None) -> Path:
    """
    Find the config file to use when none is given.

    Tries the user config (~/.ssh/config), then the system config
    (/etc/ssh/ssh_config).

    Args:
        home: Home directory override

    Returns:
        Absolute path of the first existing config

    Raises:
        ConfigNotFoundError: If neither file exists
    """
    if home is None:
        user_path = Path(USER_SSH_CONFIG_PATH).expanduser()
    else:
        user_path = Path(home) / ".ssh" / "config"
    system_path = Path(SYSTEM_SSH_CONFIG_PATH)

    for candidate in (user_path, system_path):
        if file_exists(candidate):
            return candidate.absolute()

    raise ConfigNotFoundError(
        f"unable to find config at {user_path} or {system_path}: "
        "are you sure ssh is installed?"
    )


# ============================================================
# Line Handling
# ============================================================

def strip_comment(text: str) -> str:
    """Remove an inline comment and surrounding whitespace; `\\#` becomes `#`"""
    match = _COMMENT_RE.search(text)
    if match:
        text = text[:match.start()]
    return text.replace(_ESCAPED_HASH, "#").strip()


def split_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Split a trimmed, non-blank config line into (key, value).

    Tag lines keep their value verbatim. Other lines lose inline comments
    first. Keys are lower-cased, values are whitespace-normalised.

    Returns:
        (key, value), or None for lines that carry no option
    """
    if line.startswith(TAG_PREFIX):
        label = " ".join(line[len(TAG_PREFIX):].split())
        if not label:
            return None
        return TAG_KEY, label

    if line.startswith(COMMENT_PREFIX):
        return None

    parts = strip_comment(line).split()
    if len(parts) < 2:
        return None
    return parts[0].lower(), " ".join(parts[1:])


def is_wildcard(value: str) -> bool:
    """Check if a Host value is a pattern rather than a concrete alias"""
    return any(char in value for char in WILDCARD_CHARS)


# ============================================================
# Parser
# ============================================================

class _HostCollector:
    """Accumulates committed hosts into primary and secondary groups"""

    def __init__(self, tag_order: bool):
        self.tag_order = tag_order
        self.primary: List[Host] = []
        self.secondary: List[Host] = []

    def commit(self, host: Host) -> None:
        if self.tag_order and not host.is_tagged:
            self.secondary.append(host)
        else:
            self.primary.append(host)

    def hosts(self) -> Tuple[Host, ...]:
        return tuple(self.primary + self.secondary)


class _Block:
    """Host block being read"""

    def __init__(self, name: str):
        self.name = name
        self.options: Dict[str, str] = {}

    def freeze(self) -> Host:
        return Host.build(self.name, self.options)


def _read_lines(path: Path) -> List[str]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigReadError(f"unable to read {path}: {e}") from e


def _resolve_include(pattern: str, base_dir: Path) -> List[Path]:
    """Expand one Include pattern relative to the including file's directory"""
    pattern = os.path.expanduser(pattern)
    if not os.path.isabs(pattern):
        pattern = str(base_dir / pattern)
    return [Path(match) for match in sorted(glob.glob(pattern))]


def _parse_file(
    path: Path,
    tag_order: bool,
    watch_set: Set[str],
    stack: Tuple[str, ...],
) -> Tuple[Host, ...]:
    """
    Parse one file and everything it includes.

    Every include is parsed into its own collector; only the resulting
    hosts are merged back.
    """
    lines = _read_lines(path)
    watch_set.add(str(path))
    stack = stack + (str(path),)

    collector = _HostCollector(tag_order)
    block: Optional[_Block] = None
    discarding = False

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue

        if line == TAG_ORDER_DIRECTIVE:
            collector.tag_order = True
            continue

        pair = split_line(line)
        if pair is None:
            if not line.startswith(COMMENT_PREFIX):
                logger.debug("%s:%d: skipping malformed line %r", path, lineno, line)
            continue
        key, value = pair

        if key == INCLUDE_KEY:
            for pattern in value.split():
                for included in _resolve_include(pattern, path.parent):
                    included = included.absolute()
                    if str(included) in stack:
                        logger.warning("%s:%d: include cycle on %s, skipping", path, lineno, included)
                        continue
                    for host in _parse_file(included, collector.tag_order, watch_set, stack):
                        collector.commit(host)
            continue

        if key in (HOST_KEY, MATCH_KEY):
            if block is not None:
                collector.commit(block.freeze())
                block = None
            discarding = key == MATCH_KEY or is_wildcard(value)
            if discarding:
                logger.debug("%s:%d: dropping pattern block %r", path, lineno, value)
            else:
                block = _Block(value)
            continue

        if block is not None:
            block.options[key] = value
        elif not discarding:
            logger.debug("%s:%d: option %r outside any host block", path, lineno, key)

    if block is not None:
        collector.commit(block.freeze())

    return collector.hosts()


def parse(path: PathLike, tag_order: bool = False) -> Config:
    """
    Parse a config file into a Config.

    Args:
        path: Config file path (made absolute against the working directory)
        tag_order: Start in tag-ordering mode, as if the file began with #tagorder

    Returns:
        Config with hosts, the top-level path and the watch set

    Raises:
        ConfigReadError: If the file or any included file cannot be read
    """
    top = Path(path).expanduser().absolute()
    watch_set: Set[str] = set()
    hosts = _parse_file(top, tag_order, watch_set, ())
    logger.debug("parsed %d hosts from %s (%d files)", len(hosts), top, len(watch_set))
    return Config(path=str(top), hosts=hosts, watch_set=frozenset(watch_set))


def parse_path(path: PathLike, cwd: Optional[PathLike] = None) -> Config:
    """
    Parse a config file from a custom location.

    Absolute paths are opened directly; relative paths are resolved against
    cwd, defaulting to the current working directory.
    """
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = Path(cwd if cwd is not None else os.getcwd()) / candidate
    return parse(candidate)


def parse_default(home: Optional[Path] = None) -> Config:
    """Parse the config found by resolve_default_path"""
    return parse(resolve_default_path(home))
