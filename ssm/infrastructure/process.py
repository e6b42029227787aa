"""
External process execution

Connect and edit hand the terminal to a child and wait for it; the
remote-command runner captures output in the background and can be
cancelled from another thread.
"""
import os
import subprocess
import sys
import threading
from pathlib import Path
from typing import List, NoReturn, Optional, Set

from ..core.constants import CLIENT_MOSH, CLIENT_SSH
from ..core.exceptions import ProcessFailureError, ClientNotFoundError
from ..core.interfaces import CommandRunner, Launcher, ProcessResult
from ..core.logging import get_logger
from ..core.utils import find_client, resolve_editor

logger = get_logger(__name__)

# Windows has no exec that keeps the console attached
CAN_EXEC = os.name == "posix"


def client_argv(client: str, host: str, config_path: str) -> List[str]:
    """
    Build the argument vector that connects to host.

    Args:
        client: ssh or mosh
        host: Host alias from the config
        config_path: Config file the client must read

    Returns:
        argv with the bare client name first
    """
    if client == CLIENT_SSH:
        return [CLIENT_SSH, "-F", config_path, host]
    if client == CLIENT_MOSH:
        return [CLIENT_MOSH, f"--ssh=ssh -F {config_path}", host]
    raise ClientNotFoundError(f"unsupported client `{client}`")


def remote_argv(host: str, command: str, config_path: str) -> List[str]:
    """argv for a one-shot non-interactive remote command"""
    return [CLIENT_SSH, "-T", "-F", config_path, host, command]


class ProcessLauncher(Launcher):
    """Launcher that runs real child processes on the controlling terminal"""

    def __init__(self, editor: Optional[str] = None):
        """
        Args:
            editor: Preferred editor, tried before $EDITOR and the fallbacks
        """
        self.editor = editor

    def connect(self, client: str, host: str, config_path: str) -> ProcessResult:
        argv = client_argv(client, host, config_path)
        argv[0] = find_client(client)
        logger.info("connecting: %s", " ".join(argv))
        try:
            result = subprocess.run(argv, stderr=subprocess.PIPE, text=True)
        except OSError as e:
            raise ProcessFailureError(f"failed to start {client}: {e}") from e
        return ProcessResult(result.returncode, result.stderr or "")

    def edit(self, config_path: str, editor: Optional[str] = None) -> ProcessResult:
        """
        Run the editor on config_path.

        The editor starts in the config file's directory so relative
        includes open from where ssh would resolve them.

        Raises:
            EditorNotFoundError: If no editor resolves on PATH
            ProcessFailureError: If the editor cannot be started
        """
        path = resolve_editor(editor or self.editor)
        cwd = str(Path(config_path).parent)
        logger.info("editing %s with %s", config_path, path)
        try:
            result = subprocess.run([path, config_path], cwd=cwd, stderr=subprocess.PIPE, text=True)
        except OSError as e:
            raise ProcessFailureError(f"failed to start editor {path}: {e}") from e
        return ProcessResult(result.returncode, result.stderr or "")

    def replace(self, client: str, host: str, config_path: str) -> NoReturn:
        argv = client_argv(client, host, config_path)
        executable = find_client(client)
        logger.info("exec: %s", " ".join(argv))
        if CAN_EXEC:
            try:
                os.execv(executable, argv)
            except OSError as e:
                raise ProcessFailureError(f"failed to exec {client}: {e}") from e
        # No process replacement available: run to completion and exit with its status
        try:
            returncode = subprocess.call([executable] + argv[1:])
        except OSError as e:
            raise ProcessFailureError(f"failed to start {client}: {e}") from e
        sys.exit(returncode)


class RemoteCommandRunner(CommandRunner):
    """Runs `ssh -T` commands one at a time with stdout and stderr merged"""

    def __init__(self):
        self._lock = threading.Lock()
        self._proc: Optional[subprocess.Popen] = None
        self._seq: Optional[int] = None
        # Sequence numbers cancelled before their process was registered
        self._cancelled: Set[int] = set()

    def run(self, host: str, command: str, config_path: str, seq: Optional[int] = None) -> ProcessResult:
        """
        Run command on host and wait for it.

        Args:
            host: Host alias from the config
            command: Command line passed to the remote shell
            config_path: Config file ssh must read
            seq: Submission number that cancel() may name

        Raises:
            ClientNotFoundError: If ssh is not on PATH
            ProcessFailureError: If ssh cannot be started
        """
        argv = remote_argv(host, command, config_path)
        argv[0] = find_client(CLIENT_SSH)
        logger.debug("remote: %s", " ".join(argv))
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise ProcessFailureError(f"failed to start ssh: {e}") from e

        with self._lock:
            self._proc = proc
            self._seq = seq
            cancelled = seq is not None and seq in self._cancelled
            if seq is not None:
                self._cancelled = {s for s in self._cancelled if s > seq}
        if cancelled:
            logger.debug("command #%d cancelled before it started, killing pid %d", seq, proc.pid)
            proc.kill()
        try:
            output, _ = proc.communicate()
        finally:
            with self._lock:
                if self._proc is proc:
                    self._proc = None
                    self._seq = None
        return ProcessResult(proc.returncode, output or "")

    def cancel(self, seq: Optional[int] = None) -> bool:
        with self._lock:
            proc = self._proc
            if seq is not None and (proc is None or self._seq != seq):
                self._cancelled.add(seq)
                proc = None
        if proc is None or proc.poll() is not None:
            return False
        logger.debug("killing remote command pid %d", proc.pid)
        proc.kill()
        return True

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._proc is not None
