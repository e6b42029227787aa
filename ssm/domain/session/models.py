"""
Session domain models

Messages flow into the state machine one at a time; effects flow out and
are carried out by the interface, which reports back with more messages.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ...core.constants import CLIENT_SSH, CLIENT_MOSH
from ..sshconf.models import Config


class Mode(Enum):
    """Session mode; exactly one is active at a time"""
    BROWSING = "browsing"
    RUNNING_COMMAND = "running_command"
    EDITING_EXTERNALLY = "editing_externally"
    EXITING = "exiting"


class Client(str, Enum):
    """Remote-shell client used to connect"""
    SSH = CLIENT_SSH
    MOSH = CLIENT_MOSH

    def toggled(self) -> "Client":
        return Client.MOSH if self is Client.SSH else Client.SSH

    def __str__(self) -> str:
        return self.value


# ============================================================
# Messages
# ============================================================

@dataclass(frozen=True)
class KeyPressed:
    """
    A key event.

    key uses chord names such as "enter", "ctrl+e", "pageup" or "q";
    character is the printable text the key produced, if any.
    """
    key: str
    character: Optional[str] = None

    @property
    def printable(self) -> Optional[str]:
        if self.character and self.character.isprintable():
            return self.character
        return None


@dataclass(frozen=True)
class Resized:
    """Terminal size changed"""
    width: int
    height: int


@dataclass(frozen=True)
class ConfigReloaded:
    """A re-parse succeeded; config is the new snapshot"""
    config: Config


@dataclass(frozen=True)
class ReloadFailed:
    """A re-parse failed; the previous config stays live"""
    error: Exception


@dataclass(frozen=True)
class ClientExited:
    """Connect child finished"""
    host: str
    exit_code: int
    stderr: str = ""


@dataclass(frozen=True)
class EditorExited:
    """Editor child finished"""
    exit_code: int
    stderr: str = ""


@dataclass(frozen=True)
class CommandFinished:
    """Remote command finished; seq identifies the submission"""
    seq: int
    output: str
    exit_code: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class ProcessFailed:
    """An external process could not be started or handed the terminal"""
    error: Exception


@dataclass(frozen=True)
class Notice:
    """Free-form message for the status line"""
    text: str


Message = Union[
    KeyPressed,
    Resized,
    ConfigReloaded,
    ReloadFailed,
    ClientExited,
    EditorExited,
    CommandFinished,
    ProcessFailed,
    Notice,
]


# ============================================================
# Effects
# ============================================================

@dataclass(frozen=True)
class SpawnClient:
    """Suspend the interface and run the client attached to the terminal"""
    client: Client
    host: str
    config_path: str


@dataclass(frozen=True)
class LaunchEditor:
    """Suspend the interface and edit the config file"""
    config_path: str


@dataclass(frozen=True)
class RunRemote:
    """Run a one-shot command on host in the background"""
    seq: int
    host: str
    command: str
    config_path: str


@dataclass(frozen=True)
class CancelRemote:
    """Kill the in-flight remote command"""
    seq: int


@dataclass(frozen=True)
class ReloadConfig:
    """Re-parse the config and report back"""
    config_path: str


@dataclass(frozen=True)
class Quit:
    """Tear down the interface"""
    pass


Effect = Union[SpawnClient, LaunchEditor, RunRemote, CancelRemote, ReloadConfig, Quit]
