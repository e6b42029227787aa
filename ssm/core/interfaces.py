"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NoReturn, Optional


@dataclass
class ProcessResult:
    """Outcome of a finished child process"""
    exit_code: int
    output: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class Launcher(ABC):
    """Hands the terminal to external programs"""

    @abstractmethod
    def connect(self, client: str, host: str, config_path: str) -> ProcessResult:
        """Spawn the client attached to the terminal and wait; output holds stderr"""
        pass

    @abstractmethod
    def edit(self, config_path: str, editor: Optional[str] = None) -> ProcessResult:
        """Run an editor on the config file and wait; output holds stderr"""
        pass

    @abstractmethod
    def replace(self, client: str, host: str, config_path: str) -> NoReturn:
        """Terminate self and become the client pointed at host"""
        pass


class CommandRunner(ABC):
    """Runs one-shot remote commands with captured output"""

    @abstractmethod
    def run(self, host: str, command: str, config_path: str, seq: Optional[int] = None) -> ProcessResult:
        """Run command on host; blocks until the command exits or is cancelled"""
        pass

    @abstractmethod
    def cancel(self, seq: Optional[int] = None) -> bool:
        """
        Kill command seq, or whatever is running when seq is None.

        A seq that has not started yet is killed as soon as it does.
        Returns False when nothing was running to kill.
        """
        pass
