"""CLI commands for sshcfg."""

import json
import logging
import threading
from dataclasses import asdict, replace
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from sshcfg import __version__
from sshcfg.config import CONFIG_ENV_VAR, load_config, resolve_ssh_config_path, save_config
from sshcfg.connect import connect as do_connect
from sshcfg.errors import SSHConfigError
from sshcfg.options import to_command, to_config
from sshcfg.selector import select_config_file
from sshcfg.ssh_config import HostRecord, search_hosts
from sshcfg.store import ConfigStore
from sshcfg.validation import validate_host
from sshcfg.watch import ConfigWatcher

app = typer.Typer(
    name="sshcfg",
    help="Manage hosts in your OpenSSH client config, includes and all.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

# Every store built by this process shares one write lock
WRITE_LOCK = threading.RLock()

OUTPUT_FORMATS = ["table", "json", "simple"]


def version_callback(value: bool):
    if value:
        console.print(f"[bold cyan]sshcfg[/bold cyan] version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    config: Path = typer.Option(
        None,
        "--config",
        "-F",
        envvar=CONFIG_ENV_VAR,
        help="SSH config entry file (default: ~/.ssh/config).",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """Manage hosts in your OpenSSH client config, includes and all."""
    _configure_logging(verbose)
    ctx.obj = ConfigStore(resolve_ssh_config_path(config), lock=WRITE_LOCK)


def _fail(message: str) -> None:
    console.print(f"[bold red]✗[/bold red] {message}")
    raise typer.Exit(1)


def _load(store: ConfigStore) -> list[HostRecord]:
    try:
        return store.load()
    except SSHConfigError as e:
        _fail(f"Error reading SSH config: {e}")


def _options_from_flags(options: list[str]) -> str:
    """``--option Key=Value`` flags to config-format lines."""
    return to_config(" ".join(f"-o {option}" for option in options))


def _host_table(hosts: list[HostRecord], show_source: bool = True) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Hostname", style="green")
    table.add_column("User")
    table.add_column("Port", style="dim")
    table.add_column("Tags", style="magenta")
    if show_source:
        table.add_column("File", style="dim")

    for host in hosts:
        row = [
            host.name,
            host.hostname or "-",
            host.user or "-",
            host.port,
            ", ".join(host.tags),
        ]
        if show_source:
            row.append(host.source_file.name if host.source_file else "-")
        table.add_row(*row)
    return table


def _host_to_dict(host: HostRecord) -> dict:
    data = asdict(host)
    data["source_file"] = str(host.source_file) if host.source_file else None
    return data


# ============================================================================
# Read Commands
# ============================================================================


@app.command("list")
def list_hosts(
    ctx: typer.Context,
    tag: str = typer.Option(None, "--tag", "-t", help="Only hosts carrying this tag"),
):
    """List every host reachable from the config, includes resolved."""
    store: ConfigStore = ctx.obj
    hosts = _load(store)
    if tag:
        hosts = [host for host in hosts if tag in host.tags]

    if not hosts:
        console.print(
            Panel(
                f"[yellow]No SSH hosts found in {store.config_path}[/yellow]\n\n"
                "Add one with [bold cyan]sshcfg add <name> --hostname <host>[/bold cyan]",
                title="Hosts",
                border_style="yellow",
            )
        )
        return

    console.print(_host_table(hosts))


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument("", help="Case-insensitive text to look for"),
    tags_only: bool = typer.Option(False, "--tags", help="Search tags only"),
    names_only: bool = typer.Option(False, "--names", help="Search host names only"),
    output_format: str = typer.Option("table", "--format", "-f", help="table, json or simple"),
):
    """Search hosts by name, hostname or tags.

    Examples:
        sshcfg search web              # Hosts containing "web"
        sshcfg search --tags prod      # Only look in tags
        sshcfg search db --format json # Machine-readable output
    """
    if output_format not in OUTPUT_FORMATS:
        _fail(f"Invalid format: {output_format}. Valid formats: {', '.join(OUTPUT_FORMATS)}")

    hosts = search_hosts(_load(ctx.obj), query, tags_only=tags_only, names_only=names_only)

    if output_format == "json":
        typer.echo(json.dumps([_host_to_dict(host) for host in hosts], indent=2))
        return
    if output_format == "simple":
        for host in hosts:
            typer.echo(host.name)
        return

    if not hosts:
        console.print(f"[yellow]No hosts found matching '{query}'.[/yellow]")
        return
    console.print(_host_table(hosts))


@app.command()
def show(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Host name"),
):
    """Show the full configuration of one host."""
    store: ConfigStore = ctx.obj
    try:
        host = store.find_host(name)
        shared, names = store.is_multi_host(name, host.source_file)
    except SSHConfigError as e:
        _fail(str(e))

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Host", host.name)
    if host.hostname:
        table.add_row("Hostname", host.hostname)
    if host.user:
        table.add_row("User", host.user)
    table.add_row("Port", host.port)
    if host.identity:
        table.add_row("Identity", host.identity)
    if host.proxy_jump:
        table.add_row("ProxyJump", host.proxy_jump)
    if host.remote_command:
        table.add_row("RemoteCommand", host.remote_command)
    if host.request_tty:
        table.add_row("RequestTTY", host.request_tty)
    if host.options:
        table.add_row("Options", to_command(host.options))
    if host.tags:
        table.add_row("Tags", ", ".join(host.tags))
    if shared:
        table.add_row("Shared with", ", ".join(n for n in names if n != name))
    table.add_row("File", str(host.source_file))

    console.print(Panel(table, title=f"[bold green]{host.name}[/bold green]", border_style="green"))


@app.command()
def files(ctx: typer.Context):
    """List the config files reachable through Include directives."""
    store: ConfigStore = ctx.obj
    try:
        paths = store.list_config_files()
    except SSHConfigError as e:
        _fail(str(e))

    for path in paths:
        marker = "[bold cyan]*[/bold cyan]" if path == store.config_path else " "
        console.print(f"{marker} {path}")


@app.command()
def exists(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Host name"),
):
    """Exit 0 if the host is defined, 1 otherwise."""
    try:
        found = ctx.obj.quick_exists(name)
    except SSHConfigError as e:
        _fail(str(e))

    if not found:
        console.print(f"[yellow]Host '{name}' not found[/yellow]")
        raise typer.Exit(1)
    console.print(f"[bold green]✓[/bold green] Host [cyan]{name}[/cyan] exists")


# ============================================================================
# Write Commands
# ============================================================================


@app.command()
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Host alias"),
    hostname: str = typer.Option(..., "--hostname", "-H", help="HostName (DNS name or IP)"),
    user: str = typer.Option(None, "--user", "-u", help="Remote user"),
    port: str = typer.Option("22", "--port", "-p", help="Remote port"),
    identity: str = typer.Option(None, "--identity", "-i", help="IdentityFile path"),
    proxy_jump: str = typer.Option(None, "--proxy-jump", "-J", help="ProxyJump host"),
    remote_command: str = typer.Option(None, "--remote-command", help="RemoteCommand"),
    request_tty: str = typer.Option(None, "--request-tty", help="RequestTTY (yes, no, force, auto)"),
    option: list[str] = typer.Option([], "--option", "-o", help="Extra Key=Value option (repeatable)"),
    tag: list[str] = typer.Option([], "--tag", "-t", help="Tag (repeatable)"),
    file: Path = typer.Option(None, "--file", help="Config file to add to (default: entry file)"),
):
    """Add a new host."""
    store: ConfigStore = ctx.obj
    record = HostRecord(
        name=name,
        hostname=hostname,
        user=user,
        port=port,
        identity=identity,
        proxy_jump=proxy_jump,
        remote_command=remote_command,
        request_tty=request_tty,
        options=_options_from_flags(option),
        tags=list(tag),
    )

    try:
        validate_host(record)
        store.add(record, file)
    except SSHConfigError as e:
        _fail(str(e))

    target = file or store.config_path
    console.print(f"[bold green]✓[/bold green] Added [cyan]{name}[/cyan] to [dim]{target}[/dim]")


@app.command()
def edit(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Host to edit"),
    new_name: str = typer.Option(None, "--name", "-n", help="Rename the host"),
    hostname: str = typer.Option(None, "--hostname", "-H"),
    user: str = typer.Option(None, "--user", "-u"),
    port: str = typer.Option(None, "--port", "-p"),
    identity: str = typer.Option(None, "--identity", "-i"),
    proxy_jump: str = typer.Option(None, "--proxy-jump", "-J"),
    remote_command: str = typer.Option(None, "--remote-command"),
    request_tty: str = typer.Option(None, "--request-tty"),
    option: list[str] = typer.Option(None, "--option", "-o", help="Replace extra options (repeatable)"),
    tag: list[str] = typer.Option(None, "--tag", "-t", help="Replace tags (repeatable)"),
    clear_tags: bool = typer.Option(False, "--clear-tags", help="Remove all tags"),
):
    """Edit a host; options left out keep their current value.

    A host that shares its Host line with other aliases is split out into
    its own block, the other aliases stay as they are.
    """
    store: ConfigStore = ctx.obj
    try:
        current = store.find_host(name)
    except SSHConfigError as e:
        _fail(str(e))

    changes = {
        "name": new_name,
        "hostname": hostname,
        "user": user,
        "port": port,
        "identity": identity,
        "proxy_jump": proxy_jump,
        "remote_command": remote_command,
        "request_tty": request_tty,
    }
    record = replace(current, **{key: value for key, value in changes.items() if value is not None})
    if option:
        record.options = _options_from_flags(option)
    if clear_tags:
        record.tags = []
    elif tag:
        record.tags = list(tag)

    try:
        validate_host(record, check_identity=identity is not None)
        store.update(name, record, current.source_file)
    except SSHConfigError as e:
        _fail(str(e))

    console.print(f"[bold green]✓[/bold green] Updated [cyan]{record.name}[/cyan]")


@app.command("rm")
def remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Host to remove"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Remove a host. Other aliases on the same Host line are kept."""
    store: ConfigStore = ctx.obj
    try:
        host = store.find_host(name)
    except SSHConfigError as e:
        _fail(str(e))

    if not yes:
        typer.confirm(f"Remove {host.display_name} from {host.source_file}?", abort=True)

    try:
        store.delete(name, host.source_file)
    except SSHConfigError as e:
        _fail(str(e))

    console.print(f"[bold green]✓[/bold green] Removed [cyan]{name}[/cyan]")


@app.command("mv")
def move(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Host to move"),
    target: Path = typer.Argument(None, help="Destination config file (picked interactively if omitted)"),
):
    """Move a host into another config file."""
    store: ConfigStore = ctx.obj

    if target is None:
        try:
            candidates = store.other_config_files(name)
        except SSHConfigError as e:
            _fail(str(e))
        if not candidates:
            _fail("No other config files are included from the entry file")
        target = select_config_file(candidates, title=f"Move {name} to")
        if target is None:
            console.print("\n[yellow]Move cancelled[/yellow]")
            raise typer.Exit(1)

    try:
        store.move(name, target)
    except SSHConfigError as e:
        _fail(str(e))

    console.print(f"[bold green]✓[/bold green] Moved [cyan]{name}[/cyan] → [green]{target}[/green]")


# ============================================================================
# Session Commands
# ============================================================================


@app.command()
def connect(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Host to connect to"),
    option: list[str] = typer.Option([], "--option", "-o", help="Extra Key=Value option (repeatable)"),
):
    """Connect to a host with ssh."""
    result = do_connect(name, ctx.obj, _options_from_flags(option))
    if not result.success:
        console.print(f"[bold red]✗[/bold red] {result.message}")
        raise typer.Exit(result.return_code or 1)


@app.command()
def watch(
    ctx: typer.Context,
    interval: float = typer.Option(0.5, "--interval", "-i", help="Seconds between change checks"),
):
    """Show a host table that refreshes when any config file changes."""
    store: ConfigStore = ctx.obj

    def render() -> Panel:
        return Panel(
            _host_table(_load(store)),
            title=f"[bold cyan]{store.config_path}[/bold cyan]",
            subtitle="[dim]Ctrl+C to stop[/dim]",
            border_style="cyan",
        )

    with Live(render(), console=console, refresh_per_second=4) as live:
        watcher = ConfigWatcher(store, on_change=lambda: live.update(render()), debounce_seconds=interval)
        try:
            watcher.run()
        except KeyboardInterrupt:
            watcher.stop()

    console.print("[yellow]Watch stopped[/yellow]")


@app.command("config")
def app_config(
    ssh_config: str = typer.Option(None, "--ssh-config", help="Default SSH config entry file"),
    unset: bool = typer.Option(False, "--unset", help="Forget the default entry file"),
):
    """Show or change sshcfg preferences."""
    prefs = load_config()

    if unset:
        prefs.ssh_config = None
        save_config(prefs)
    elif ssh_config:
        prefs.ssh_config = ssh_config
        save_config(prefs)

    console.print(
        Panel(
            f"[bold]SSH config:[/bold] {prefs.ssh_config or '[dim]default (~/.ssh/config)[/dim]'}",
            title="Preferences",
            border_style="cyan",
        )
    )


if __name__ == "__main__":
    app()
