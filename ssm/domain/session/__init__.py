"""
Session domain: host-list presentation and the interaction state machine
"""
from .models import (
    Mode,
    Client,
    Message,
    Effect,
    KeyPressed,
    Resized,
    ConfigReloaded,
    ReloadFailed,
    ClientExited,
    EditorExited,
    CommandFinished,
    ProcessFailed,
    Notice,
    SpawnClient,
    LaunchEditor,
    RunRemote,
    CancelRemote,
    ReloadConfig,
    Quit,
)
from .presentation import HostRow, HostList, FilterState, describe, row_from, rows_from
from .runcmd import RunCommandState, NO_OUTPUT
from .log import StatusLog
from .machine import Session

__all__ = [
    "Mode",
    "Client",
    "Message",
    "Effect",
    "KeyPressed",
    "Resized",
    "ConfigReloaded",
    "ReloadFailed",
    "ClientExited",
    "EditorExited",
    "CommandFinished",
    "ProcessFailed",
    "Notice",
    "SpawnClient",
    "LaunchEditor",
    "RunRemote",
    "CancelRemote",
    "ReloadConfig",
    "Quit",
    "HostRow",
    "HostList",
    "FilterState",
    "describe",
    "row_from",
    "rows_from",
    "RunCommandState",
    "NO_OUTPUT",
    "StatusLog",
    "Session",
]
