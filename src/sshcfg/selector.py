"""Arrow-key picker for choosing a destination config file."""

import sys
import termios
import tty
from pathlib import Path

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

UP_KEYS = ("\x1b[A", "k")
DOWN_KEYS = ("\x1b[B", "j")
ACCEPT_KEYS = ("\r", "\n")
CANCEL_KEYS = ("q", "\x1b", "\x03")

FOOTER = Text.assemble(
    ("↑/↓ j/k", "bold cyan"),
    (" move   ", "dim"),
    ("1-9", "bold cyan"),
    (" jump   ", "dim"),
    ("Enter", "bold cyan"),
    (" choose   ", "dim"),
    ("q/Esc", "bold cyan"),
    (" cancel", "dim"),
)


def get_key() -> str:
    """Read one keypress from a raw-mode terminal."""
    fd = sys.stdin.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        key = sys.stdin.read(1)
        if key == "\x1b":
            # Arrow keys send ESC [ A/B
            key += sys.stdin.read(2)
        return key
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def render_file_picker(files: list[Path], selected_idx: int, title: str) -> Panel:
    table = Table(show_header=True, header_style="bold cyan", box=None, expand=True)
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("File", no_wrap=True)
    table.add_column("Directory", style="dim")

    for number, path in enumerate(files, start=1):
        current = number - 1 == selected_idx
        table.add_row(
            "▸" if current else str(number),
            path.name,
            str(path.parent),
            style="bold black on cyan" if current else None,
        )

    return Panel(
        Group(table, Text(""), FOOTER),
        title=f"[bold]{title}[/bold]",
        subtitle=f"[dim]{selected_idx + 1}/{len(files)}[/dim]",
        border_style="cyan",
        padding=(1, 2),
    )


def next_index(key: str, selected_idx: int, count: int) -> int:
    """Selection after *key*; unknown keys leave it unchanged."""
    if key in UP_KEYS:
        return (selected_idx - 1) % count
    if key in DOWN_KEYS:
        return (selected_idx + 1) % count
    if key.isdigit() and 1 <= int(key) <= count:
        return int(key) - 1
    return selected_idx


def select_config_file(
    files: list[Path],
    title: str = "Select destination file",
    console: Console | None = None,
) -> Path | None:
    """Let the user pick one of *files*.

    Returns:
        The chosen path, or None if cancelled or there is nothing to pick.
    """
    if not files:
        return None

    selected_idx = 0
    with Live(
        render_file_picker(files, selected_idx, title),
        console=console or Console(),
        auto_refresh=False,
        transient=True,
    ) as live:
        while True:
            key = get_key()
            if key in ACCEPT_KEYS:
                return files[selected_idx]
            if key in CANCEL_KEYS:
                return None
            selected_idx = next_index(key, selected_idx, len(files))
            live.update(render_file_picker(files, selected_idx, title), refresh=True)
