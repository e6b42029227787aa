"""
Textual terminal UI

The app is a thin shell around the session state machine: keys and
background results become session messages, the effects the session
returns are carried out here, and every widget is redrawn from session
state afterwards.
"""
from typing import Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.screen import Screen
from textual.widgets import Static

from ...core.constants import APP_TITLE
from ...core.exceptions import SSMError, ProcessFailureError
from ...core.interfaces import CommandRunner, Launcher
from ...core.logging import get_logger
from ...domain.session import (
    Session,
    Mode,
    KeyPressed,
    Resized,
    ConfigReloaded,
    ReloadFailed,
    ClientExited,
    EditorExited,
    CommandFinished,
    ProcessFailed,
    SpawnClient,
    LaunchEditor,
    RunRemote,
    CancelRemote,
    ReloadConfig,
    Quit,
)
from ...domain.sshconf import ConfigStore, ConfigWatcher, ReloadResult
from .themes import Theme, get_theme

logger = get_logger(__name__)

SPINNER_FRAMES = "⣾⣽⣻⢿⡿⣟⣯⣷"

HELP_TEXT = (
    "enter connect • / filter • tab ssh/mosh • ctrl+e edit • "
    "ctrl+v details • ctrl+r run • q quit"
)
RUN_HELP_TEXT = "enter run • ctrl+c cancel • ctrl+l clear • ↑/↓ scroll • esc back"


def key_message(event: events.Key) -> KeyPressed:
    """Translate a textual key event into a session message"""
    if event.is_printable and event.character:
        return KeyPressed(key=event.character, character=event.character)
    return KeyPressed(key=event.key)


# ============================================================
# Rendering
# ============================================================

def render_title(session: Session, theme: Theme) -> Text:
    return Text(session.title, style=f"bold {theme.title}")


def render_filter(session: Session, theme: Theme) -> Text:
    hosts = session.hosts
    if hosts.is_filtering:
        return Text.assemble(("Filter: ", theme.selected_title), hosts.filter_text, ("▏", theme.selected_title))
    if hosts.filter_active:
        shown = len(hosts.visible)
        return Text.assemble(
            ("Filter: ", theme.muted),
            hosts.filter_text,
            (f"  ({shown} of {len(hosts.rows)})", theme.muted),
        )
    return Text(f"{len(hosts.rows)} hosts", style=theme.muted)


def render_hosts(session: Session, theme: Theme) -> Text:
    rows, cursor, number, count = session.hosts.page()
    if not rows:
        if session.hosts.filter_active:
            return Text("No matches.", style=theme.muted)
        return Text("No hosts.", style=theme.muted)

    out = Text()
    for index, row in enumerate(rows):
        if index == cursor:
            out.append("│ ", style=theme.selected_border)
            out.append(row.title, style=f"bold {theme.selected_title}")
            out.append("\n")
            out.append("│ ", style=theme.selected_border)
            out.append(row.description, style=theme.selected_description)
        else:
            out.append("  " + row.title)
            out.append("\n")
            out.append("  " + row.description, style=theme.description)
        out.append("\n\n")
    if count > 1:
        dots = " ".join("●" if page == number else "○" for page in range(count))
        out.append("  " + dots, style=theme.muted)
    return out


def render_detail(session: Session, theme: Theme) -> Text:
    out = Text()
    for key, value in session.detail():
        out.append(key, style=theme.title)
        out.append(f" {value}\n")
    return out


def render_status(session: Session, theme: Theme) -> Text:
    log = session.log
    out = Text()
    out.append(log.status, style=f"bold {theme.selected_title}")
    out.append("  " + HELP_TEXT, style=theme.muted)
    if log.error:
        out.append("\n")
        out.append(log.error, style=theme.error)
    for line in log.debug_lines:
        out.append("\n")
        out.append(line, style=theme.muted)
    return out


def render_run_bar(session: Session, theme: Theme) -> Text:
    run = session.run
    out = Text()
    if run is None:
        out.append(" No host selected ", style=f"{theme.bar_text} on {theme.selected_title}")
        return out
    out.append(" Run Command ", style=f"{theme.bar_text} on {theme.selected_title}")
    out.append(f" {run.host}: {run.description} ", style=f"{theme.input_text} on {theme.input_background}")
    out.append(f" {run.scroll_percent * 100:3.0f}% ", style=f"{theme.bar_text} on {theme.title}")
    out.append(" SSM ", style=f"{theme.bar_text} on {theme.selected_title}")
    return out


def render_run_input(session: Session, theme: Theme, frame: int = 0) -> Text:
    run = session.run
    out = Text()
    if run is None:
        return out
    if run.running:
        out.append(SPINNER_FRAMES[frame % len(SPINNER_FRAMES)] + " ", style=theme.selected_title)
        out.append("running...", style=theme.muted)
        return out
    out.append("> ", style=theme.selected_title)
    if run.input:
        out.append(run.input)
    else:
        out.append("Enter command...", style=theme.muted)
    return out


def render_run_output(session: Session, theme: Theme) -> Text:
    run = session.run
    if run is None:
        return Text()
    return Text("\n".join(run.window()))


# ============================================================
# Worker messages
# ============================================================

class ConfigChanged(Message):
    """The watcher reloaded the config"""

    def __init__(self, result: ReloadResult):
        super().__init__()
        self.result = result


# ============================================================
# Application
# ============================================================

class SessionScreen(Screen):
    """Single screen that forwards every key to the session"""

    def compose(self) -> ComposeResult:
        with Vertical(id="browse"):
            yield Static(id="title")
            yield Static(id="filter")
            with Horizontal(id="body"):
                yield Static(id="hosts")
                yield Static(id="detail")
            yield Static(id="status")
        with Vertical(id="run"):
            yield Static(id="run-bar")
            yield Static(id="run-input")
            yield Static(id="run-output")
            yield Static(RUN_HELP_TEXT, id="run-help")

    def on_mount(self) -> None:
        self.query_one("#detail").styles.border = ("round", self.app.ssm_theme.selected_border)
        self.app.ready = True
        self.app.post_session(Resized(self.size.width, self.size.height))

    def on_resize(self, event: events.Resize) -> None:
        self.app.post_session(Resized(event.size.width, event.size.height))

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.app.post_session(key_message(event))


class SSMApp(App, inherit_bindings=False):
    """Host browser over one SSH config"""

    TITLE = APP_TITLE
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    #browse {
        height: 1fr;
        padding: 1 2;
    }
    #title {
        height: auto;
        margin-bottom: 1;
    }
    #filter {
        height: 1;
        margin-bottom: 1;
    }
    #body {
        height: 1fr;
    }
    #hosts {
        width: 1fr;
    }
    #detail {
        width: 45%;
        border: round grey;
        padding: 0 1;
    }
    #status {
        height: auto;
    }
    #run {
        display: none;
        padding: 1 2;
    }
    #run-bar, #run-input {
        height: 1;
        margin-bottom: 1;
    }
    #run-output {
        height: 1fr;
    }
    #run-help {
        height: 1;
        color: grey;
    }
    """

    def __init__(
        self,
        store: ConfigStore,
        session: Session,
        launcher: Launcher,
        runner: CommandRunner,
        theme: str = "sky",
        watch: bool = True,
    ):
        super().__init__()
        self.store = store
        self.session = session
        self.launcher = launcher
        self.runner = runner
        self.ssm_theme = get_theme(theme)
        self._watch = watch
        self._watcher: Optional[ConfigWatcher] = None
        self._frame = 0
        # Set once the session screen has composed its widgets
        self.ready = False

    def get_default_screen(self) -> Screen:
        return SessionScreen()

    def on_mount(self) -> None:
        self.set_interval(0.1, self._tick)
        if self._watch:
            self._watcher = ConfigWatcher(self.store, self._on_watch_reload)
            self.run_worker(self._watcher.run, thread=True, group="watcher", exit_on_error=False)

    def on_unmount(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
        self.runner.cancel()

    # ------------------------------------------------------------
    # Message pump
    # ------------------------------------------------------------

    def post_session(self, message) -> None:
        """Dispatch a message, carry out the resulting effects, then redraw"""
        pending = [message]
        while pending:
            effects = self.session.dispatch(pending.pop(0))
            for effect in effects:
                follow_up = self._apply(effect)
                if follow_up is not None:
                    pending.append(follow_up)
        self.refresh_view()

    def _apply(self, effect):
        """Carry out one effect; returns the message reporting its outcome, if any"""
        if isinstance(effect, SpawnClient):
            return self._spawn_client(effect)
        if isinstance(effect, LaunchEditor):
            return self._launch_editor(effect)
        if isinstance(effect, RunRemote):
            self.run_worker(
                lambda: self._run_remote(effect),
                thread=True,
                group="remote",
                exit_on_error=False,
            )
            return None
        if isinstance(effect, CancelRemote):
            if not self.runner.cancel(effect.seq):
                logger.debug("command #%d not running, killed on start if pending", effect.seq)
            return None
        if isinstance(effect, ReloadConfig):
            return self._reload()
        if isinstance(effect, Quit):
            self.exit()
            return None
        logger.warning("unhandled effect %r", effect)
        return None

    def _spawn_client(self, effect: SpawnClient):
        try:
            with self.suspend():
                result = self.launcher.connect(str(effect.client), effect.host, effect.config_path)
        except SuspendNotSupported as e:
            return ProcessFailed(ProcessFailureError(f"cannot hand over the terminal: {e}"))
        except SSMError as e:
            return ProcessFailed(e)
        return ClientExited(effect.host, result.exit_code, result.output)

    def _launch_editor(self, effect: LaunchEditor):
        try:
            with self.suspend():
                result = self.launcher.edit(effect.config_path)
        except SuspendNotSupported as e:
            return ProcessFailed(ProcessFailureError(f"cannot hand over the terminal: {e}"))
        except SSMError as e:
            return ProcessFailed(e)
        return EditorExited(result.exit_code, result.output)

    def _reload(self):
        result = self.store.reload()
        if not result.success:
            return ReloadFailed(result.error)
        if self._watcher is not None:
            self._watcher.arm(result.config.watch_set)
        return ConfigReloaded(result.config)

    # ------------------------------------------------------------
    # Workers
    # ------------------------------------------------------------

    def _run_remote(self, effect: RunRemote) -> None:
        try:
            result = self.runner.run(effect.host, effect.command, effect.config_path, seq=effect.seq)
        except SSMError as e:
            message = CommandFinished(effect.seq, "", exit_code=-1, error=str(e))
        else:
            message = CommandFinished(effect.seq, result.output, exit_code=result.exit_code)
        self.call_from_thread(self.post_session, message)

    def _on_watch_reload(self, result: ReloadResult) -> None:
        # Runs on the watcher thread
        self.post_message(ConfigChanged(result))

    def on_config_changed(self, event: ConfigChanged) -> None:
        if event.result.success:
            self.post_session(ConfigReloaded(event.result.config))
        else:
            self.post_session(ReloadFailed(event.result.error))

    def _tick(self) -> None:
        run = self.session.run
        if run is not None and run.running:
            self._frame += 1
            self.screen.query_one("#run-input", Static).update(
                render_run_input(self.session, self.ssm_theme, self._frame)
            )

    # ------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------

    def refresh_view(self) -> None:
        if not self.ready or not isinstance(self.screen, SessionScreen):
            return
        session, theme, screen = self.session, self.ssm_theme, self.screen
        running = session.mode is Mode.RUNNING_COMMAND
        screen.query_one("#browse").display = not running
        screen.query_one("#run").display = running

        if running:
            screen.query_one("#run-bar", Static).update(render_run_bar(session, theme))
            screen.query_one("#run-input", Static).update(render_run_input(session, theme, self._frame))
            screen.query_one("#run-output", Static).update(render_run_output(session, theme))
            return

        screen.query_one("#title", Static).update(render_title(session, theme))
        screen.query_one("#filter", Static).update(render_filter(session, theme))
        screen.query_one("#hosts", Static).update(render_hosts(session, theme))
        detail = screen.query_one("#detail", Static)
        detail.display = session.show_detail
        if session.show_detail:
            detail.update(render_detail(session, theme))
        screen.query_one("#status", Static).update(render_status(session, theme))


def run_tui(
    store: ConfigStore,
    session: Session,
    launcher: Launcher,
    runner: CommandRunner,
    theme: str = "sky",
    watch: bool = True,
) -> Session:
    """
    Run the interface until the user quits.

    Returns:
        The session, so callers can read exit_host after exit-on-connect
    """
    app = SSMApp(store, session, launcher, runner, theme=theme, watch=watch)
    app.run()
    return session
