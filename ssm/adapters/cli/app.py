"""
Main CLI application
"""
import sys
import typer
from pathlib import Path
from typing import Optional

from rich.table import Table

from ... import __version__
from ...core.constants import APP_NAME, APP_TITLE
from ...core.exceptions import ConfigError, SettingsError, SSMError
from ...core.logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from ...domain.sshconf import Config, ConfigStore, ConfigWatcher, ReloadResult, parse_default, parse_path
from ...domain.session import Client, HostList, Session, rows_from
from ...infrastructure.process import ProcessLauncher, RemoteCommandRunner
from ..config.loader import Settings, SettingsLoader

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()

app = typer.Typer(
    name=APP_NAME,
    add_completion=False,
    help=APP_TITLE,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        stdout_console.print(f"{APP_NAME} {__version__}")
        raise typer.Exit()


def stdin_is_terminal() -> bool:
    return sys.stdin.isatty()


def load_config(settings: Settings) -> Config:
    """
    Parse the config named in settings, or the default location.

    Raises:
        ConfigError: If no config is found or it cannot be read
    """
    if settings.config:
        return parse_path(settings.config)
    return parse_default()


def hosts_table(config: Config, filter_text: str = "") -> Table:
    """Render the (optionally filtered) host list as a rich table"""
    hosts = HostList(rows_from(config))
    if filter_text:
        hosts.set_filter_text(filter_text)

    table = Table(title=f"SSH servers ({config.path})", title_justify="left")
    table.add_column("Host", style="cyan", no_wrap=True)
    table.add_column("User")
    table.add_column("Hostname")
    table.add_column("Port")
    table.add_column("Tag", style="magenta")
    for row in hosts.visible:
        host = row.host
        table.add_row(host.name, host.get("user"), host.get("hostname"), host.get("port"), host.tag)
    return table


def watch_hosts(config: Config, filter_text: str = "") -> None:
    """Print the host table now and after every change until interrupted"""
    store = ConfigStore(config)

    def on_reload(result: ReloadResult) -> None:
        if result.success:
            stdout_console.print(hosts_table(result.config, filter_text))
        else:
            stderr_console.print(f"[red]Reload Error:[/red] {result.error}")

    watcher = ConfigWatcher(store, on_reload)
    stdout_console.print(hosts_table(config, filter_text))
    stdout_console.print(f"[cyan]ℹ[/cyan] Watching {len(watcher.watch_set)} file(s), press Ctrl+C to stop")
    try:
        watcher.run()
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


@app.command()
def main(
    filter_text: Optional[str] = typer.Argument(
        None, metavar="FILTER", help="Start with the host list filtered by this text"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="SSH config file (default: ~/.ssh/config, then /etc/ssh/ssh_config)"
    ),
    tag: Optional[str] = typer.Option(
        None, "--tag", "-t", help="Show only hosts tagged with this one label (replaces FILTER)"
    ),
    show: Optional[bool] = typer.Option(
        None, "--show", "-s", help="Show the selected host's config options"
    ),
    exit_on_connect: Optional[bool] = typer.Option(
        None, "--exit", "-e", help="Exit and become the client when connecting"
    ),
    debug: Optional[bool] = typer.Option(
        None, "--debug", "-d", help="Show debug lines and write a debug log under ~/.ssm/logs"
    ),
    theme: Optional[str] = typer.Option(
        None, "--theme", help="Colour theme (sky, matrix)"
    ),
    client: Optional[str] = typer.Option(
        None, "--client", help="Client used to connect (ssh, mosh)"
    ),
    settings_path: Optional[Path] = typer.Option(
        None, "--settings", help="Settings file (default: ~/.ssm/settings.toml)"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Log file path"
    ),
    list_hosts: bool = typer.Option(
        False, "--list", "-l", help="Print the hosts as a table and exit"
    ),
    watch: bool = typer.Option(
        False, "--watch", "-w", help="Print the hosts table on every config change until interrupted"
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """
    SSM - browse the hosts of your SSH config and connect to one

    Examples:
        ssm
        ssm prod
        ssm --tag work --exit
        ssm --config ./ssh_config --list
    """
    try:
        settings = SettingsLoader().load(
            toml_path=settings_path,
            cli_overrides={
                "config": config,
                "theme": theme,
                "client": client,
                "exit_on_connect": exit_on_connect,
                "show_config": show,
                "debug": debug,
                "log_level": log_level,
                "log_file": str(log_file) if log_file else None,
            },
        )
    except SettingsError as e:
        stderr_console.print(f"[red]Settings Error:[/red] {e}")
        raise typer.Exit(1)

    interactive = not (list_hosts or watch)
    setup_logging(
        level=settings.effective_log_level,
        log_file=settings.effective_log_file(),
        console=not interactive,
    )

    try:
        ssh_config = load_config(settings)
    except ConfigError as e:
        stderr_console.print(f"[red]Config Error:[/red] {e}")
        raise typer.Exit(1)
    logger.info("loaded %s: %d hosts", ssh_config.path, len(ssh_config))

    if tag:
        if filter_text:
            stderr_console.print(f"[yellow]Warning:[/yellow] --tag replaces the filter {filter_text!r}")
        filter_text = f"#{tag}"
    filter_text = filter_text or ""

    if list_hosts:
        stdout_console.print(hosts_table(ssh_config, filter_text))
        return
    if watch:
        watch_hosts(ssh_config, filter_text)
        return

    if not stdin_is_terminal():
        stderr_console.print("[red]Error:[/red] ssm needs an interactive terminal (stdin is not a tty)")
        raise typer.Exit(1)

    # Imported here so --list and --watch work without starting textual
    from ..tui.app import run_tui

    store = ConfigStore(ssh_config)
    session = Session(
        ssh_config,
        filter_text=filter_text,
        exit_on_connect=settings.exit_on_connect,
        show_detail=settings.show_config,
        debug=settings.debug,
        client=Client(settings.client),
    )
    launcher = ProcessLauncher(editor=settings.editor)
    run_tui(store, session, launcher, RemoteCommandRunner(), theme=settings.theme)

    if session.exit_host:
        try:
            launcher.replace(str(session.client), session.exit_host, store.path)
        except SSMError as e:
            stderr_console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
