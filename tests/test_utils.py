"""Unit tests for executable lookup helpers."""

import os
import stat

import pytest

from ssm.core.exceptions import ClientNotFoundError, EditorNotFoundError
from ssm.core.utils import editor_candidates, find_client, resolve_editor


def _executable(directory, name):
    path = directory / name
    path.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


class TestEditorResolution:
    """Tests for editor candidates and lookup."""

    def test_candidate_order(self):
        candidates = editor_candidates("code", env={"EDITOR": "nano"})

        assert candidates == ["code", "nano", "vim", "vi", "ed"]

    def test_editor_from_environment(self, tmp_path):
        editor = _executable(tmp_path, "myedit")

        assert resolve_editor(env={"EDITOR": "myedit", "PATH": str(tmp_path)}) == str(editor)

    def test_fallback_editor(self, tmp_path):
        vi = _executable(tmp_path, "vi")

        assert resolve_editor(env={"PATH": str(tmp_path)}) == str(vi)

    def test_no_editor(self, tmp_path):
        with pytest.raises(EditorNotFoundError):
            resolve_editor(env={"EDITOR": "nothing-here", "PATH": str(tmp_path)})


class TestFindClient:
    """Tests for client lookup."""

    def test_unsupported_client(self):
        with pytest.raises(ClientNotFoundError):
            find_client("telnet")

    def test_client_missing_from_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PATH", str(tmp_path))

        with pytest.raises(ClientNotFoundError, match="can't find `mosh`"):
            find_client("mosh")

    def test_client_found(self, tmp_path, monkeypatch):
        ssh = _executable(tmp_path, "ssh")
        monkeypatch.setenv("PATH", str(tmp_path) + os.pathsep + os.environ.get("PATH", ""))

        assert find_client("ssh") == str(ssh)
