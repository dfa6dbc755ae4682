"""
Bounded pool of asyncio workers that run one job per item.
"""
import asyncio
from collections.abc import Awaitable, Callable, Iterable, Iterator
from typing import Any, Optional

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_MAX_WORKERS = 50


class WorkerPool:
    """
    Runs `func(item)` for every item with at most `max_workers` jobs in flight.

    Workers pull items lazily from a shared iterator, so jobs start in item
    order and a large range is never materialised up front. Completion order
    is whatever the network gives us.

    A pool runs one batch. After `cancel_all()` it cannot be reused; create a
    new pool instead.
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS, name: Optional[str] = None):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1.")
        self.max_workers = max_workers
        self.name = name or f"pool-{id(self)}"
        self.logger = logger.bind(pool=self.name)

        self.submitted = 0
        self.completed = 0
        self.failed = 0

        self._func: Optional[Callable[[Any], Awaitable[Any]]] = None
        self._items: Optional[Iterator[Any]] = None
        self._workers: list[asyncio.Task] = []
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._workers)

    def map(self, func: Callable[[Any], Awaitable[Any]], items: Iterable[Any]) -> None:
        """Schedule `func` over `items`. Must be called from a running event loop."""
        if self._cancelled:
            raise RuntimeError(f"WorkerPool '{self.name}' was cancelled and cannot be reused.")
        if self._workers:
            raise RuntimeError(f"WorkerPool '{self.name}' is already running a batch.")

        self._func = func
        self._items = iter(items)
        worker_count = self.max_workers
        if hasattr(items, "__len__"):
            worker_count = max(1, min(worker_count, len(items)))  # type: ignore[arg-type]

        self._workers = [
            asyncio.create_task(self._worker(), name=f"{self.name}-worker-{i}")
            for i in range(worker_count)
        ]
        self.logger.debug("Workers started.", workers=worker_count)

    async def _worker(self) -> None:
        if self._func is None or self._items is None:
            raise RuntimeError(f"WorkerPool '{self.name}' has no batch; call map() first.")
        while not self._cancelled:
            try:
                item = next(self._items)
            except StopIteration:
                return
            self.submitted += 1
            try:
                await self._func(item)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.failed += 1
                self.logger.exception("Job failed", item=item, error=str(e))
            else:
                self.completed += 1

    async def join(self) -> None:
        """Wait until every job has finished or the pool has been cancelled."""
        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)

    async def cancel_all(self) -> None:
        """Stop handing out items and abandon the jobs in flight."""
        if self._cancelled:
            return
        self._cancelled = True
        pending = [task for task in self._workers if not task.done()]
        self.logger.debug("Cancelling workers.", pending=len(pending), submitted=self.submitted)
        for task in pending:
            task.cancel()
        results = await asyncio.gather(*pending, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                self.logger.error("Exception in worker during cancel", error=str(result))
