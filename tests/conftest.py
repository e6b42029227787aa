"""Shared fixtures for the ssm test suite."""

import textwrap
from pathlib import Path

import pytest

from ssm.domain.sshconf import parse


@pytest.fixture
def write_config(tmp_path):
    """Write dedented config text to a file under tmp_path and return its path."""

    def _write(text: str, name: str = "config") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def web_config(write_config):
    """Two-host config used by the session and CLI tests."""
    path = write_config(
        """
        Host web1
          HostName 10.0.0.1
          User ops
        Host web2
          HostName 10.0.0.2
        """
    )
    return parse(path)
