"""
Interaction state machine

Session owns the live Config, the host list and the current mode. The
interface feeds it one message at a time through dispatch(); dispatch
updates the state and returns the effects the interface must carry out.
Nothing here touches the terminal or spawns processes.
"""
from typing import Callable, Dict, List, Optional, Tuple

from ...core.exceptions import SelectionInvalidError
from ...core.logging import get_logger
from ..sshconf.models import Config
from .log import StatusLog
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
from .presentation import HostList, HostRow, rows_from
from .runcmd import RunCommandState

logger = get_logger(__name__)

# Lines taken by title, filter, status bar and log around the host list
_LIST_CHROME = 8
_DEBUG_CHROME = 6
# Lines taken by the run-command bar and input
_RUN_CHROME = 5

_CURSOR_KEYS: Dict[str, Callable[[HostList], None]] = {
    "up": HostList.cursor_up,
    "ctrl+p": HostList.cursor_up,
    "down": HostList.cursor_down,
    "ctrl+n": HostList.cursor_down,
    "pageup": HostList.page_up,
    "ctrl+b": HostList.page_up,
    "pagedown": HostList.page_down,
    "ctrl+f": HostList.page_down,
    "ctrl+u": HostList.half_page_up,
    "ctrl+d": HostList.half_page_down,
    "home": HostList.go_to_start,
    "end": HostList.go_to_end,
}

# Vim-style movement, only when the filter box is not taking input
_LETTER_CURSOR_KEYS: Dict[str, Callable[[HostList], None]] = {
    "k": HostList.cursor_up,
    "j": HostList.cursor_down,
}


class Session:
    """
    Browsing session over one SSH config.

    Startup inputs (filter text, exit-on-connect, detail panel, debug)
    are applied in the constructor, before anything is rendered.
    """

    def __init__(
        self,
        config: Config,
        filter_text: str = "",
        exit_on_connect: bool = False,
        show_detail: bool = False,
        debug: bool = False,
        client: Client = Client.SSH,
    ):
        self.config = config
        self.hosts = HostList(rows_from(config))
        self.mode = Mode.BROWSING
        self.show_detail = show_detail
        self.exit_on_connect = exit_on_connect
        self.exit_host: Optional[str] = None
        self.client = Client(client)
        self.debug = debug
        self.log = StatusLog(debug=debug)
        self.run: Optional[RunCommandState] = None
        self.width = 80
        self.height = 24

        self.log.set_status(f"[{self.client}]")
        if filter_text:
            self.hosts.set_filter_text(filter_text)
            self.log.debug("filter %r", filter_text)
        if exit_on_connect:
            self.log.debug("exit on connect")

        self._handlers: Dict[type, Callable[[Message], List[Effect]]] = {
            KeyPressed: self._on_key,
            Resized: self._on_resize,
            ConfigReloaded: self._on_reloaded,
            ReloadFailed: self._on_reload_failed,
            ClientExited: self._on_client_exited,
            EditorExited: self._on_editor_exited,
            CommandFinished: self._on_command_finished,
            ProcessFailed: self._on_process_failed,
            Notice: self._on_notice,
        }

    # ============================================================
    # Queries
    # ============================================================

    @property
    def title(self) -> str:
        return f"SSH servers ({self.config.path})"

    def selected(self) -> Optional[HostRow]:
        return self.hosts.selected()

    def detail(self) -> List[Tuple[str, str]]:
        """Options of the selected host in file order"""
        row = self.hosts.selected()
        if row is None:
            return []
        return list(row.host.pairs)

    # ============================================================
    # Dispatch
    # ============================================================

    def dispatch(self, message: Message) -> List[Effect]:
        """
        Process one message to completion.

        Returns:
            Effects for the interface to perform, in order
        """
        handler = self._handlers.get(type(message))
        if handler is None:
            logger.warning("unhandled message %r", message)
            return []
        return handler(message)

    # ------------------------------------------------------------
    # Background messages
    # ------------------------------------------------------------

    def _on_resize(self, msg: Resized) -> List[Effect]:
        self.width, self.height = msg.width, msg.height
        chrome = _LIST_CHROME + (_DEBUG_CHROME if self.debug else 0)
        self.hosts.set_page_size((msg.height - chrome) // 2)
        if self.run is not None:
            self.run.page_size = max(1, msg.height - _RUN_CHROME)
        return []

    def _on_reloaded(self, msg: ConfigReloaded) -> List[Effect]:
        self.config = msg.config
        self.hosts.replace_rows(rows_from(msg.config))
        self.log.debug("reloaded config: %d hosts", len(msg.config.hosts))
        return []

    def _on_reload_failed(self, msg: ReloadFailed) -> List[Effect]:
        self.log.add_error(f"reload failed, keeping previous config: {msg.error}")
        return []

    def _on_client_exited(self, msg: ClientExited) -> List[Effect]:
        self.mode = Mode.BROWSING
        text = f"connection closed: {msg.host} (exit status {msg.exit_code})"
        if msg.stderr.strip():
            text += f"\n{msg.stderr.strip()}"
        self.log.add_error(text)
        return []

    def _on_editor_exited(self, msg: EditorExited) -> List[Effect]:
        self.mode = Mode.BROWSING
        self.log.debug("editor exited with status %d", msg.exit_code)
        if msg.exit_code != 0 or msg.stderr.strip():
            self.log.add_error(f"editor exited with status {msg.exit_code}\n{msg.stderr.strip()}")
        return [ReloadConfig(self.config.path)]

    def _on_command_finished(self, msg: CommandFinished) -> List[Effect]:
        if self.run is None:
            return []
        error = msg.error
        if error is None and msg.exit_code != 0:
            error = f"exit status {msg.exit_code}"
        if not self.run.finish(msg.seq, msg.output, error):
            self.log.debug("dropping stale result of command #%d", msg.seq)
        return []

    def _on_process_failed(self, msg: ProcessFailed) -> List[Effect]:
        if self.mode is Mode.EDITING_EXTERNALLY:
            self.mode = Mode.BROWSING
        self.log.add_error(str(msg.error))
        return []

    def _on_notice(self, msg: Notice) -> List[Effect]:
        self.log.add_error(msg.text)
        return []

    # ------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------

    def _on_key(self, msg: KeyPressed) -> List[Effect]:
        if self.mode is Mode.RUNNING_COMMAND:
            return self._on_run_key(msg)
        if self.mode is not Mode.BROWSING:
            return []
        return self._on_browse_key(msg)

    def _on_browse_key(self, msg: KeyPressed) -> List[Effect]:
        key = msg.key
        if key == "ctrl+c":
            return self._quit()
        if not key.startswith("ctrl+"):
            self.log.clear_error()

        if self.hosts.is_filtering:
            effects = self._on_filter_key(msg)
            if effects is not None:
                return effects

        if key == "enter":
            return self._connect()
        if key == "tab":
            self.client = self.client.toggled()
            self.log.set_status(f"[{self.client}]")
            return []
        if key in ("backspace", "escape"):
            if self.hosts.filter_active:
                self.hosts.reset_filter()
            return []
        if key in _CURSOR_KEYS:
            _CURSOR_KEYS[key](self.hosts)
            return []
        if not self.hosts.is_filtering and key in _LETTER_CURSOR_KEYS:
            _LETTER_CURSOR_KEYS[key](self.hosts)
            return []
        if key == "q":
            return self._quit()
        if key == "/":
            self.hosts.start_filtering()
            return []
        if key == "ctrl+e":
            return self._edit()
        if key == "ctrl+v":
            self.show_detail = not self.show_detail
            return []
        if key == "ctrl+r":
            return self._enter_run()
        if key.startswith("ctrl+"):
            self.log.add_error(f"that's an interesting key combo! {key}")
        return []

    def _on_filter_key(self, msg: KeyPressed) -> Optional[List[Effect]]:
        """Keys the focused filter box consumes; None lets the key through"""
        key = msg.key
        if key == "enter":
            self.hosts.apply_filter()
            return []
        if key == "escape":
            self.hosts.reset_filter()
            return []
        if key == "backspace":
            self.hosts.delete_char()
            return []
        text = msg.printable
        if text is not None and not key.startswith("ctrl+"):
            self.hosts.type_text(text)
            return []
        return None

    def _quit(self) -> List[Effect]:
        self.mode = Mode.EXITING
        return [Quit()]

    def _resolve_selection(self) -> Optional[HostRow]:
        row = self.hosts.selected()
        if row is None:
            self.log.add_error("no host selected")
            return None
        if self.config.get_host(row.title).is_empty:
            error = SelectionInvalidError(
                f"unable to find selected item {row.title!r}: open bug report"
            )
            logger.error("%s", error)
            self.log.add_error(str(error))
            return None
        return row

    def _connect(self) -> List[Effect]:
        row = self._resolve_selection()
        if row is None:
            return []
        if self.exit_on_connect:
            self.exit_host = row.title.strip()
            self.log.debug("exit and connect to %s", self.exit_host)
            return self._quit()
        self.log.debug("connecting to %s with %s", row.title, self.client)
        return [SpawnClient(self.client, row.title, self.config.path)]

    def _edit(self) -> List[Effect]:
        self.mode = Mode.EDITING_EXTERNALLY
        self.log.debug("editing %s", self.config.path)
        return [LaunchEditor(self.config.path)]

    # ------------------------------------------------------------
    # Run-command sub-mode
    # ------------------------------------------------------------

    def _enter_run(self) -> List[Effect]:
        row = self._resolve_selection()
        if row is None:
            return []
        self.run = RunCommandState(
            host=row.title,
            description=row.description,
            page_size=max(1, self.height - _RUN_CHROME),
        )
        self.mode = Mode.RUNNING_COMMAND
        return []

    def _leave_run(self) -> List[Effect]:
        effects: List[Effect] = []
        if self.run is not None and self.run.running:
            self.run.cancel()
            effects.append(CancelRemote(self.run.seq))
        self.run = None
        self.mode = Mode.BROWSING
        return effects

    def _on_run_key(self, msg: KeyPressed) -> List[Effect]:
        run = self.run
        if run is None:
            self.mode = Mode.BROWSING
            return []
        key = msg.key
        if key == "escape":
            return self._leave_run()
        if key == "enter":
            command = run.submit()
            if not command:
                return []
            self.log.debug("running %r on %s", command, run.host)
            return [RunRemote(run.seq, run.host, command, self.config.path)]
        if key == "ctrl+c":
            if run.cancel():
                return [CancelRemote(run.seq)]
            return []
        if key == "ctrl+l":
            run.clear()
            return []
        if key == "backspace":
            run.delete_char()
            return []
        if key == "up":
            run.scroll_up()
        elif key == "down":
            run.scroll_down()
        elif key == "pageup":
            run.scroll_up(run.page_size)
        elif key == "pagedown":
            run.scroll_down(run.page_size)
        elif key == "ctrl+u":
            run.scroll_up(max(1, run.page_size // 2))
        elif key == "ctrl+d":
            run.scroll_down(max(1, run.page_size // 2))
        elif msg.printable is not None and not key.startswith("ctrl+"):
            run.type_text(msg.printable)
        elif key.startswith("ctrl+"):
            self.log.add_error(f"that's an interesting key combo! {key}")
        return []
