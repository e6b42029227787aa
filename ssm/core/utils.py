"""
Core utility functions
"""
import os
import shutil
from pathlib import Path
from typing import Optional, List, Mapping

from .constants import FALLBACK_EDITORS, SUPPORTED_CLIENTS
from .exceptions import ClientNotFoundError, EditorNotFoundError


# ============================================================
# Executable Lookup
# ============================================================

def file_exists(path: Path) -> bool:
    """Check if path is an existing regular file; stat errors count as absent"""
    try:
        return path.is_file()
    except OSError:
        return False


def find_client(name: str) -> str:
    """
    Resolve a remote-shell client executable on PATH.

    Args:
        name: Client name (ssh or mosh)

    Returns:
        Absolute path to the executable

    Raises:
        ClientNotFoundError: If the client is unknown or not on PATH
    """
    if name not in SUPPORTED_CLIENTS:
        raise ClientNotFoundError(f"unsupported client `{name}`")
    path = shutil.which(name)
    if path is None:
        raise ClientNotFoundError(f"can't find `{name}` cmd in your path")
    return path


def editor_candidates(
    preferred: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """
    Build the ordered list of editors to try.

    Args:
        preferred: Editor from application settings (tried first)
        env: Environment mapping (default: os.environ)

    Returns:
        Candidate editor names, duplicates and blanks removed
    """
    env = os.environ if env is None else env
    candidates: List[str] = []
    for name in (preferred, env.get("EDITOR"), *FALLBACK_EDITORS):
        if name and name.strip() and name.strip() not in candidates:
            candidates.append(name.strip())
    return candidates


def resolve_editor(
    preferred: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Locate the first editor executable that resolves on PATH.

    Args:
        preferred: Editor from application settings
        env: Environment mapping (default: os.environ)

    Returns:
        Absolute path to the editor

    Raises:
        EditorNotFoundError: If none of the candidates resolve
    """
    path_var = None if env is None else env.get("PATH")
    for candidate in editor_candidates(preferred, env):
        path = shutil.which(candidate, path=path_var)
        if path:
            return path
    raise EditorNotFoundError(
        f"env EDITOR not set, nor any of {list(FALLBACK_EDITORS)} found in PATH"
    )
