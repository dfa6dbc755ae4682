"""Deduplicated, insertion-ordered collection of discovered endpoints."""

import threading
from collections.abc import Iterator

from ..models.scan import Endpoint


class ResultSet:
    """
    Endpoints keyed by (host, port) in the order they were first found.

    Safe for concurrent use: any worker may add, and the coordinator removes
    entries once the presentation layer has acted on them.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._endpoints: dict[tuple[str, int], Endpoint] = {}

    def add(self, endpoint: Endpoint) -> bool:
        """Insert `endpoint`. Returns False if it was already present."""
        key = (endpoint.host, endpoint.port)
        with self._lock:
            if key in self._endpoints:
                return False
            self._endpoints[key] = endpoint
            return True

    def remove(self, endpoint: Endpoint) -> bool:
        """Remove `endpoint`. Returns False if it was not present."""
        with self._lock:
            return self._endpoints.pop((endpoint.host, endpoint.port), None) is not None

    def snapshot(self) -> list[Endpoint]:
        with self._lock:
            return list(self._endpoints.values())

    def __contains__(self, endpoint: object) -> bool:
        if not isinstance(endpoint, Endpoint):
            return False
        with self._lock:
            return (endpoint.host, endpoint.port) in self._endpoints

    def __len__(self) -> int:
        with self._lock:
            return len(self._endpoints)

    def __iter__(self) -> Iterator[Endpoint]:
        return iter(self.snapshot())
