"""
Events carried from scan workers to the single update consumer, and the
listener interface a presentation layer implements to receive them.
"""
from dataclasses import dataclass, field

from .common import Severity
from .scan import Endpoint


class ScanListener:
    """
    Callback surface driven by the update consumer.

    Every callback runs on the consumer, one at a time and in the order the
    events were published. Subclasses override what they need; the defaults
    ignore the event.
    """

    def on_progress(self, processed: int, total: int) -> None:
        pass

    def on_results_changed(self, results: list[Endpoint]) -> None:
        pass

    def on_status(self, message: str, severity: Severity) -> None:
        pass

    def on_complete(self, found_count: int) -> None:
        pass

    def on_stopped(self) -> None:
        pass


class ScanEvent:
    """Base class for everything published on the update channel."""

    def apply(self, listener: ScanListener) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class ProgressEvent(ScanEvent):
    scan_id: int
    processed: int
    total: int

    def apply(self, listener: ScanListener) -> None:
        listener.on_progress(self.processed, self.total)


@dataclass(frozen=True)
class ResultsChangedEvent(ScanEvent):
    scan_id: int
    results: tuple[Endpoint, ...] = field(default_factory=tuple)

    def apply(self, listener: ScanListener) -> None:
        listener.on_results_changed(list(self.results))


@dataclass(frozen=True)
class StatusEvent(ScanEvent):
    message: str
    severity: Severity = Severity.INFO

    def apply(self, listener: ScanListener) -> None:
        listener.on_status(self.message, self.severity)


@dataclass(frozen=True)
class CompletedEvent(ScanEvent):
    scan_id: int
    found_count: int

    def apply(self, listener: ScanListener) -> None:
        listener.on_complete(self.found_count)


@dataclass(frozen=True)
class StoppedEvent(ScanEvent):
    scan_id: int

    def apply(self, listener: ScanListener) -> None:
        listener.on_stopped()
