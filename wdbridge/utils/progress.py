"""Progress display utilities for WD Bridge (wdbridge)."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    Progress,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich import box

from wdbridge.utils.helpers import truncate_path

console = Console()


def create_file_progress(label):
    """Create a percentage progress display for a single transfer."""
    return Progress(
        TextColumn(f"[cyan]{escape(label)}"),
        BarColumn(),
        TaskProgressColumn(),
        "•",
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


class ConsoleReporter:
    """Renders transfer events of tree transfers on the console."""

    def __init__(self):
        self._progress = None
        self._task = None

    def folder_created(self, name):
        console.print(f"[green]📁 Folder created: {escape(name)}[/green]")

    def file_started(self, name, action="upload"):
        verb = "Uploading" if action == "upload" else "Downloading"
        self._progress = create_file_progress(f"{verb} {truncate_path(name, 35)}")
        self._task = self._progress.add_task("", total=100)
        self._progress.start()

    def file_progress(self, name, progress):
        if self._progress is not None:
            self._progress.update(self._task, completed=progress.percentage)

    def file_done(self, name, path=None):
        self._stop()
        if path:
            console.print(f"[green]✅ {escape(name)} done, saved to: {escape(str(path))}[/green]")
        else:
            console.print(f"[green]✅ {escape(name)} done[/green]")

    def file_failed(self, name, error):
        self._stop()
        console.print(f"[red]❌ Failed to transfer {escape(name)}: {escape(str(error))}[/red]")

    def _stop(self):
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task = None


def auth_success():
    console.print("[green]✅ Authentication to the device successful[/green]")


def auth_failed():
    console.print("[red]❌ Failed to authenticate with the given credentials[/red]")


def path_not_found(path=""):
    console.print(f"[red]Failed to locate the following path: {escape(str(path))}[/red]")


def only_relative_path():
    console.print(
        "[red]Path must be relative (the specified path should not contain "
        "path separator characters)[/red]"
    )


def display_entries(entries):
    """Print directory entries, folders highlighted with a trailing slash."""
    for entry in entries:
        if entry.is_dir:
            console.print(f"[cyan]{escape(entry.name)}[/cyan]/", highlight=False)
        else:
            console.print(entry.name, highlight=False, markup=False)


def display_operation_summary(stats_obj):
    """Display a summary of the transfers made so far."""
    stats = stats_obj.get_stats()
    success_rate = stats_obj.get_success_rate()

    summary_table = Table(show_header=False, box=box.SIMPLE, pad_edge=False)
    summary_table.add_column("Metric", style="bold cyan", width=25, no_wrap=True)
    summary_table.add_column("Value", style="white", no_wrap=True)

    summary_table.add_row(
        "✅ Successful Uploads",
        f"[bold green]{stats['successful_uploads']}[/bold green]",
    )
    summary_table.add_row(
        "❌ Failed Uploads", f"[bold red]{stats['failed_uploads']}[/bold red]"
    )
    summary_table.add_row(
        "📤 Data Uploaded", f"{stats['uploaded_size'] / 1024 / 1024:.2f} MB"
    )
    summary_table.add_row(
        "✅ Successful Downloads",
        f"[bold green]{stats['successful_downloads']}[/bold green]",
    )
    summary_table.add_row(
        "❌ Failed Downloads", f"[bold red]{stats['failed_downloads']}[/bold red]"
    )
    summary_table.add_row(
        "📥 Data Downloaded", f"{stats['downloaded_size'] / 1024 / 1024:.2f} MB"
    )
    summary_table.add_row("📁 Folders Created", str(stats["folders_created"]))
    summary_table.add_row("📊 Success Rate", f"[bold]{success_rate:.1f}%[/bold]")
    summary_table.add_row(
        "⏱️  Duration", f"{str(stats_obj.get_duration()).split('.')[0]}"
    )

    if success_rate == 100:
        panel_style = "green"
    elif success_rate >= 80:
        panel_style = "yellow"
    else:
        panel_style = "red"

    console.print(
        Panel(
            summary_table,
            title="[bold]Operation Summary[/bold]",
            border_style=panel_style,
            padding=(1, 2),
        )
    )
