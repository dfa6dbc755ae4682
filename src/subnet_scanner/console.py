"""Terminal front-end for scan events."""

from typing import Optional

import click

from .models.common import Severity
from .models.events import ScanListener
from .models.scan import Endpoint, ProgressSnapshot

_SEVERITY_COLORS = {
    Severity.INFO: None,
    Severity.PROGRESS: "yellow",
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}


class ConsoleListener(ScanListener):
    """
    Renders scan events on stderr: a single rewritten progress line, one line
    per newly found endpoint and coloured status messages.
    """

    def __init__(self, show_progress: bool = True):
        self.show_progress = show_progress
        self.results: list[Endpoint] = []
        self.last_status: Optional[tuple[str, Severity]] = None
        self.found_count: Optional[int] = None
        self.stopped = False
        self._announced: set[Endpoint] = set()
        self._last_percent: Optional[int] = None
        self._progress_line_open = False

    def on_progress(self, processed: int, total: int) -> None:
        if not self.show_progress:
            return
        snapshot = ProgressSnapshot(processed=processed, total=total)
        percent = int(snapshot.percent)
        if percent == self._last_percent and not snapshot.finished:
            return
        self._last_percent = percent
        line = f"Scanning: {snapshot.percent:.1f}% ({processed}/{total})"
        click.echo("\r" + click.style(line, fg="yellow"), nl=False, err=True)
        self._progress_line_open = True

    def on_results_changed(self, results: list[Endpoint]) -> None:
        self.results = results
        for endpoint in results:
            if endpoint not in self._announced:
                self._announced.add(endpoint)
                self._echo(f"Found {endpoint.name} ({endpoint.address})", fg="cyan")

    def on_status(self, message: str, severity: Severity) -> None:
        self.last_status = (message, severity)
        self._echo(message, fg=_SEVERITY_COLORS.get(severity))

    def on_complete(self, found_count: int) -> None:
        self.found_count = found_count

    def on_stopped(self) -> None:
        self.stopped = True

    def _echo(self, message: str, fg: Optional[str] = None) -> None:
        if self._progress_line_open:
            click.echo(err=True)
            self._progress_line_open = False
        click.echo(click.style(message, fg=fg), err=True)
