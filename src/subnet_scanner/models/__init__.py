"""
Pydantic models and event types for Subnet Scanner.
"""
from .common import BasePydanticModel, ScanState, Severity
from .events import (
    CompletedEvent,
    ProgressEvent,
    ResultsChangedEvent,
    ScanEvent,
    ScanListener,
    StatusEvent,
    StoppedEvent,
)
from .scan import (
    DEFAULT_PREFIX,
    MAX_PREFIX,
    MIN_PREFIX,
    Endpoint,
    ProgressSnapshot,
    ScanRequest,
    clamp_prefix,
    parse_prefix,
)

__all__ = [
    "BasePydanticModel",
    "CompletedEvent",
    "DEFAULT_PREFIX",
    "Endpoint",
    "MAX_PREFIX",
    "MIN_PREFIX",
    "ProgressEvent",
    "ProgressSnapshot",
    "ResultsChangedEvent",
    "ScanEvent",
    "ScanListener",
    "ScanRequest",
    "ScanState",
    "Severity",
    "StatusEvent",
    "StoppedEvent",
    "clamp_prefix",
    "parse_prefix",
]
