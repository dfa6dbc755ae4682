"""
Ordered hand-off of scan events from many producers to one consumer.
"""
import asyncio
import queue
from typing import Optional

import structlog

from ..models.events import ScanEvent, ScanListener

logger = structlog.get_logger(__name__)

DEFAULT_DRAIN_INTERVAL = 0.05


class UpdateChannel:
    """
    Unbounded FIFO of `ScanEvent`s with a single periodic consumer.

    Any task or thread may `publish`. The consumer wakes every
    `drain_interval` seconds, takes everything queued and applies it to the
    listener in publish order before sleeping again, so listener callbacks
    never run concurrently with each other.
    """

    def __init__(self, drain_interval: float = DEFAULT_DRAIN_INTERVAL):
        if drain_interval <= 0:
            raise ValueError("drain_interval must be positive.")
        self.drain_interval = drain_interval
        self._queue: queue.SimpleQueue[ScanEvent] = queue.SimpleQueue()
        self._consumer: Optional[asyncio.Task] = None
        self._listener: Optional[ScanListener] = None
        self.logger = logger.bind(component="UpdateChannel")

    def publish(self, event: ScanEvent) -> None:
        self._queue.put_nowait(event)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def consumer_running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    def drain(self) -> list[ScanEvent]:
        """Remove and return every queued event without waiting."""
        events: list[ScanEvent] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def apply_pending(self, listener: ScanListener) -> int:
        """Run one drain cycle against `listener`. Returns the number of events applied."""
        events = self.drain()
        for event in events:
            try:
                event.apply(listener)
            except Exception as e:
                self.logger.exception("Listener failed to apply event", scan_event=repr(event), error=str(e))
        return len(events)

    async def _consume(self, listener: ScanListener) -> None:
        while True:
            self.apply_pending(listener)
            await asyncio.sleep(self.drain_interval)

    def start_consumer(self, listener: ScanListener) -> None:
        """Start the periodic consumer. Must be called from a running event loop."""
        if self.consumer_running:
            raise RuntimeError("UpdateChannel already has a consumer.")
        self._listener = listener
        self._consumer = asyncio.create_task(self._consume(listener), name="update-channel-consumer")
        self.logger.debug("Consumer started.", interval=self.drain_interval)

    async def stop_consumer(self) -> None:
        """Stop the consumer after one final drain so terminal events are delivered."""
        if self._consumer is None:
            return
        self._consumer.cancel()
        try:
            await self._consumer
        except asyncio.CancelledError:
            pass
        self._consumer = None
        if self._listener is not None:
            self.apply_pending(self._listener)
        self.logger.debug("Consumer stopped.")
