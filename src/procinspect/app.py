"""procinspect - Textual inspection view and command-line entry point."""

import argparse
import sys
from queue import Empty, Queue

from rich.markup import escape
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from procinspect.config import Settings
from procinspect.errors import InspectionError
from procinspect.inspector import ProcessInspector
from procinspect.logging_config import setup_logging
from procinspect.models import Process
from procinspect.monitor import ProcessWatcher, WatchUpdate


def record_fields(process: Process, include_env: bool = False) -> list[tuple[str, str]]:
    """Flatten a Process into (field, value) display pairs."""
    listeners = ", ".join(f"{s.address}:{s.port}" for s in process.listeners)
    git = process.git_repo
    if process.git_branch:
        git = f"{git} ({process.git_branch})"
    fields = [
        ("pid", str(process.pid)),
        ("ppid", str(process.ppid)),
        ("command", process.command),
        ("cmdline", process.cmdline),
        ("started", process.started_at.strftime("%Y-%m-%d %H:%M:%S %Z")),
        ("user", process.user),
        ("working dir", process.working_dir),
        ("git", git),
        ("container", process.container),
        ("service", process.service),
        ("listening", listeners),
        ("health", process.health.value),
        ("forked", process.forked.value),
    ]
    if include_env:
        fields.extend(("env", entry) for entry in process.env)
    return fields


class ProcessSummary(Static):
    """Header widget with a one-line summary of the process."""

    DEFAULT_CSS = """
    ProcessSummary {
        height: auto;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessSummary."""
        super().__init__("Inspecting...", *args, **kwargs)
        self._text: str = "Inspecting..."

    @property
    def summary_text(self) -> str:
        """Get the summary currently displayed."""
        return self._text

    def show_process(self, process: Process) -> None:
        """Summarize a freshly inspected process."""
        color = "green" if process.health.value == "healthy" else "red"
        self._text = (
            f"[b]{escape(process.command)}[/b] pid {process.pid} "
            f"user {escape(process.user)} [{color}]{process.health.value}[/{color}]"
        )
        self.update(self._text)

    def show_error(self, error: InspectionError) -> None:
        """Report that the process could not be inspected."""
        self._text = f"[red]{escape(str(error))}[/red]"
        self.update(self._text)


class DetailTable(Container):
    """Container for the field/value table."""

    DEFAULT_CSS = """
    DetailTable {
        height: 2fr;
        border: solid $primary;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the detail table."""
        yield DataTable(id="detail-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#detail-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Field", key="field", width=12)
        table.add_column("Value", key="value")

    def show_process(self, process: Process, include_env: bool = False) -> None:
        """Replace the rows with the fields of process."""
        table = self.query_one("#detail-table", DataTable)
        table.clear()
        for field, value in record_fields(process, include_env):
            table.add_row(field, Text(value))


class PortTable(Container):
    """Container for the listening sockets table."""

    DEFAULT_CSS = """
    PortTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the port table."""
        yield DataTable(id="port-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#port-table", DataTable)
        table.add_column("Address", key="address")
        table.add_column("Port", key="port", width=8)

    def show_process(self, process: Process) -> None:
        """Replace the rows with the sockets of process."""
        table = self.query_one("#port-table", DataTable)
        table.clear()
        for listener in process.listeners:
            table.add_row(Text(listener.address), str(listener.port))


class InspectorApp(App):
    """Main procinspect application."""

    TITLE = "procinspect"

    CSS = """
    Screen {
        layout: vertical;
    }

    #summary {
        dock: top;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
        ("e", "toggle_env", "Environment"),
    ]

    def __init__(
        self,
        pid: int,
        inspector: ProcessInspector | None = None,
        poll_rate: float = 2.0,
    ) -> None:
        """Initialize the InspectorApp."""
        super().__init__()
        self.sub_title = f"pid {pid}"
        self._update_queue: Queue[WatchUpdate] = Queue()
        self._watcher = ProcessWatcher(pid, self._update_queue, inspector, poll_rate=poll_rate)
        self._process: Process | None = None
        self._show_env = False

    @property
    def process(self) -> Process | None:
        """Get the most recently displayed record."""
        return self._process

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield ProcessSummary(id="summary")
        yield DetailTable()
        yield PortTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the watcher when the app is mounted."""
        self._watcher.start()
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Drain the queue and show the most recent update."""
        update = None
        while True:
            try:
                update = self._update_queue.get_nowait()
            except Empty:
                break

        if update is not None:
            self._show_update(update)

    def _show_update(self, update: WatchUpdate) -> None:
        """Update the UI with a record or an inspection error."""
        summary = self.query_one("#summary", ProcessSummary)
        if isinstance(update, InspectionError):
            summary.show_error(update)
            return

        self._process = update
        summary.show_process(update)
        self.query_one(DetailTable).show_process(update, self._show_env)
        self.query_one(PortTable).show_process(update)

    def action_refresh(self) -> None:
        """Handle refresh action - re-inspect immediately."""
        self._watcher.refresh()

    def action_toggle_env(self) -> None:
        """Handle environment action - show or hide environment rows."""
        self._show_env = not self._show_env
        if self._process is not None:
            self.query_one(DetailTable).show_process(self._process, self._show_env)
        self.notify(f"Environment: {'shown' if self._show_env else 'hidden'}")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._watcher.stop()
        self.exit()


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="procinspect",
        description="Explain where a running process came from and what it is doing.",
    )
    parser.add_argument("pid", type=int, help="process ID to inspect")
    parser.add_argument("--log-level", help="log level (default: PROCINSPECT_LOG_LEVEL or WARNING)")
    parser.add_argument(
        "--once",
        action="store_true",
        help="print the record once instead of opening the interactive view",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for procinspect application."""
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    setup_logging(args.log_level or settings.log_level)
    inspector = ProcessInspector(settings=settings)

    if args.once:
        try:
            process = inspector.inspect(args.pid)
        except InspectionError as exc:
            print(f"procinspect: {exc}", file=sys.stderr)
            return 1
        for field, value in record_fields(process, include_env=True):
            print(f"{field}: {value}")
        return 0

    app = InspectorApp(args.pid, inspector, poll_rate=settings.poll_rate)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
