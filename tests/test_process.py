"""Tests for launching clients, editors and remote commands."""

import os
import stat
import threading
import time

import pytest

from ssm.core.exceptions import ClientNotFoundError, ProcessFailureError
from ssm.infrastructure.process import ProcessLauncher, RemoteCommandRunner, client_argv, remote_argv

pytestmark = pytest.mark.skipif(os.name != "posix", reason="uses shell script stand-ins")


def _script(directory, name, body):
    path = directory / name
    path.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


@pytest.fixture
def bin_dir(tmp_path, monkeypatch):
    directory = tmp_path / "bin"
    directory.mkdir()
    monkeypatch.setenv("PATH", str(directory) + os.pathsep + os.environ.get("PATH", ""))
    return directory


class TestArgv:
    """Tests for argument vectors."""

    def test_ssh(self):
        assert client_argv("ssh", "web1", "/cfg") == ["ssh", "-F", "/cfg", "web1"]

    def test_mosh(self):
        assert client_argv("mosh", "web1", "/cfg") == ["mosh", "--ssh=ssh -F /cfg", "web1"]

    def test_unknown_client(self):
        with pytest.raises(ClientNotFoundError):
            client_argv("telnet", "web1", "/cfg")

    def test_remote(self):
        assert remote_argv("web1", "uptime", "/cfg") == ["ssh", "-T", "-F", "/cfg", "web1", "uptime"]


class TestProcessLauncher:
    """Tests for attached children."""

    def test_connect_reports_exit_and_stderr(self, bin_dir):
        _script(bin_dir, "ssh", 'echo "refused $*" >&2\nexit 255')

        result = ProcessLauncher().connect("ssh", "web1", "/cfg")

        assert result.exit_code == 255
        assert "refused -F /cfg web1" in result.output

    def test_edit_runs_in_config_directory(self, bin_dir, tmp_path):
        editor = _script(bin_dir, "fake-editor", 'pwd -P > "$1.cwd"')
        config = tmp_path / "conf" / "config"
        config.parent.mkdir()
        config.write_text("Host a\n", encoding="utf-8")

        result = ProcessLauncher(editor=str(editor)).edit(str(config))

        assert result.success
        assert (tmp_path / "conf" / "config.cwd").read_text().strip() == os.path.realpath(config.parent)


class _Exec(Exception):
    """Raised by the execv stand-in so replace() stops where exec would"""


class TestReplace:
    """Tests for becoming the client after the interface exits."""

    def test_execs_client_argv(self, bin_dir, monkeypatch):
        ssh = _script(bin_dir, "ssh", "exit 0")
        calls = []

        def fake_execv(path, argv):
            calls.append((path, argv))
            raise _Exec()

        monkeypatch.setattr(os, "execv", fake_execv)

        with pytest.raises(_Exec):
            ProcessLauncher().replace("ssh", "web1", "/cfg")

        assert calls == [(str(ssh), client_argv("ssh", "web1", "/cfg"))]

    def test_exec_failure_is_process_failure(self, bin_dir, monkeypatch):
        _script(bin_dir, "ssh", "exit 0")

        def failing_execv(path, argv):
            raise OSError("exec format error")

        monkeypatch.setattr(os, "execv", failing_execv)

        with pytest.raises(ProcessFailureError):
            ProcessLauncher().replace("ssh", "web1", "/cfg")

    def test_without_exec_exits_with_child_status(self, bin_dir, monkeypatch):
        _script(bin_dir, "ssh", 'echo "$*" > "$(dirname "$0")/args"\nexit 7')
        monkeypatch.setattr("ssm.infrastructure.process.CAN_EXEC", False)

        with pytest.raises(SystemExit) as exc:
            ProcessLauncher().replace("ssh", "web1", "/cfg")

        assert exc.value.code == 7
        assert (bin_dir / "args").read_text().strip() == "-F /cfg web1"


class TestRemoteCommandRunner:
    """Tests for captured, cancellable commands."""

    def test_output_merged(self, bin_dir):
        _script(bin_dir, "ssh", 'echo "args: $*"\necho oops >&2\nexit 2')

        result = RemoteCommandRunner().run("web1", "uptime", "/cfg")

        assert result.exit_code == 2
        assert "args: -T -F /cfg web1 uptime" in result.output
        assert "oops" in result.output

    def test_cancel_kills_command(self, bin_dir):
        _script(bin_dir, "ssh", "exec sleep 30")
        runner = RemoteCommandRunner()
        results = []
        thread = threading.Thread(target=lambda: results.append(runner.run("web1", "x", "/cfg")))
        thread.start()

        deadline = time.monotonic() + 5
        while not runner.busy and time.monotonic() < deadline:
            time.sleep(0.01)

        assert runner.cancel()
        thread.join(timeout=5)
        assert not thread.is_alive()
        assert results[0].exit_code != 0

    def test_cancel_when_idle(self):
        assert not RemoteCommandRunner().cancel()

    def test_cancel_before_start_kills_on_start(self, bin_dir):
        _script(bin_dir, "ssh", "exec sleep 30")
        runner = RemoteCommandRunner()
        results = []

        assert not runner.cancel(3)
        thread = threading.Thread(target=lambda: results.append(runner.run("web1", "x", "/cfg", seq=3)))
        thread.start()
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert results[0].exit_code != 0
        assert not runner.busy

    def test_cancel_of_earlier_seq_leaves_later_command(self, bin_dir):
        _script(bin_dir, "ssh", "echo done")
        runner = RemoteCommandRunner()

        runner.cancel(1)
        result = runner.run("web1", "x", "/cfg", seq=2)

        assert result.exit_code == 0
        assert result.output == "done\n"

    def test_cancel_names_running_seq(self, bin_dir):
        _script(bin_dir, "ssh", "exec sleep 30")
        runner = RemoteCommandRunner()
        results = []
        thread = threading.Thread(target=lambda: results.append(runner.run("web1", "x", "/cfg", seq=5)))
        thread.start()

        deadline = time.monotonic() + 5
        while not runner.busy and time.monotonic() < deadline:
            time.sleep(0.01)

        assert runner.cancel(5)
        thread.join(timeout=5)
        assert not thread.is_alive()
        assert results[0].exit_code != 0
