"""
ScanCoordinator: owns the lifecycle of a subnet scan and publishes its
progress, results and status on an UpdateChannel.
"""
import asyncio
from typing import Optional

import structlog

from ..config import Config, ScanConfig
from ..models.common import ScanState, Severity
from ..models.events import (
    CompletedEvent,
    ProgressEvent,
    ResultsChangedEvent,
    StatusEvent,
    StoppedEvent,
)
from ..models.scan import Endpoint, ProgressSnapshot, ScanRequest
from .address_range import AddressRange
from .exceptions import InvalidAddressError, NoUsableHostsError
from .probe import PortProbe
from .progress import ProgressTracker
from .result_set import ResultSet
from .update_channel import UpdateChannel
from .worker_pool import WorkerPool

logger = structlog.get_logger(__name__)


class ScanCoordinator:
    """
    Drives one scan at a time.

    `start` computes the address range and runs one probe job per host on a
    fresh WorkerPool. Jobs publish through the UpdateChannel only while their
    scan is the current running one, so anything that lands after `stop` is
    dropped. Calling `start` while a scan is running stops it instead.
    """

    def __init__(
        self,
        app_config: Config,
        channel: UpdateChannel,
        probe: Optional[PortProbe] = None,
    ):
        self.app_config = app_config
        self.scan_config: ScanConfig = app_config.scan
        self.channel = channel
        self.probe = probe or PortProbe(timeout=self.scan_config.probe_timeout_seconds)
        self.logger = logger.bind(component="ScanCoordinator")

        self._state = ScanState.IDLE
        self._scan_id = 0
        self._results = ResultSet()
        self._progress: Optional[ProgressTracker] = None
        self._pool: Optional[WorkerPool] = None
        self._address_range: Optional[AddressRange] = None
        self._scan_task: Optional[asyncio.Task] = None
        self._scan_finished: Optional[asyncio.Event] = None

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def scan_id(self) -> int:
        return self._scan_id

    @property
    def results(self) -> list[Endpoint]:
        return self._results.snapshot()

    @property
    def progress(self) -> Optional[ProgressSnapshot]:
        return self._progress.snapshot() if self._progress else None

    @property
    def address_range(self) -> Optional[AddressRange]:
        return self._address_range

    @property
    def port(self) -> int:
        return self.scan_config.port

    async def start(self, address: str, prefix: int | str | None = None) -> ScanState:
        """
        Start scanning the subnet around `address`, or stop the running scan.

        Invalid input is reported as an error status and leaves the
        coordinator untouched. Returns the state after the call.
        """
        if self._state is ScanState.RUNNING:
            self.logger.info("Start requested while running, stopping instead.", scan_id=self._scan_id)
            await self.stop()
            return self._state
        if self._state is ScanState.STOPPING:
            self.logger.info("Start requested while stopping, ignored.", scan_id=self._scan_id)
            return self._state

        request = ScanRequest.from_input(address, prefix, self.scan_config.default_prefix)
        try:
            address_range = AddressRange.compute(request.base_address, request.prefix_length)
        except InvalidAddressError as e:
            self.logger.warning("Rejected scan request.", address=e.address, reason="invalid_address")
            self._publish_status("Invalid IP address format", Severity.ERROR)
            return self._state
        except NoUsableHostsError as e:
            self.logger.warning("Rejected scan request.", prefix=e.prefix_length, reason="no_usable_hosts")
            self._publish_status("Prefix too large (no usable hosts)", Severity.ERROR)
            return self._state

        self._scan_id += 1
        scan_id = self._scan_id
        self._address_range = address_range
        self._results = ResultSet()
        self._progress = ProgressTracker(total=address_range.host_count)
        self._pool = WorkerPool(max_workers=self.scan_config.max_workers, name=f"scan-{scan_id}")
        self._scan_finished = asyncio.Event()
        self._state = ScanState.RUNNING

        log = self.logger.bind(scan_id=scan_id, cidr=address_range.cidr)
        log.info("Scan started.", hosts=address_range.host_count, port=self.port)
        self.channel.publish(ResultsChangedEvent(scan_id=scan_id, results=()))
        self._publish_status(f"Scanning {address_range.cidr} on port {self.port}", Severity.INFO)

        results, progress, pool = self._results, self._progress, self._pool

        async def probe_host(host: str) -> None:
            await self._probe_host(scan_id, host, results, progress)

        pool.map(probe_host, address_range)
        self._scan_task = asyncio.create_task(self._run(scan_id, pool, results), name=f"scan-{scan_id}")
        return self._state

    async def _probe_host(self, scan_id: int, host: str, results: ResultSet, progress: ProgressTracker) -> None:
        endpoint = Endpoint(host=host, port=self.port)
        is_open = await self.probe.probe(host, self.port)
        if not self._is_current(scan_id):
            return
        if is_open and results.add(endpoint):
            self.logger.info("Found server.", scan_id=scan_id, endpoint=endpoint.address)
            self.channel.publish(ResultsChangedEvent(scan_id=scan_id, results=tuple(results.snapshot())))
        processed = progress.increment()
        self.channel.publish(ProgressEvent(scan_id=scan_id, processed=processed, total=progress.total))

    async def _run(self, scan_id: int, pool: WorkerPool, results: ResultSet) -> None:
        await pool.join()
        if not self._is_current(scan_id) or pool.cancelled:
            return
        found = len(results)
        self._state = ScanState.COMPLETED
        self.logger.info("Scan complete.", scan_id=scan_id, found=found, failed_jobs=pool.failed)
        self.channel.publish(CompletedEvent(scan_id=scan_id, found_count=found))
        self.channel.publish(ResultsChangedEvent(scan_id=scan_id, results=tuple(results.snapshot())))
        self._publish_status(f"Scan complete! Found {found} servers", Severity.SUCCESS)
        self._finish()

    def _is_current(self, scan_id: int) -> bool:
        return scan_id == self._scan_id and self._state is ScanState.RUNNING

    async def stop(self) -> None:
        """Cancel the running scan. Does nothing unless a scan is running."""
        if self._state is not ScanState.RUNNING:
            return
        scan_id = self._scan_id
        self._state = ScanState.STOPPING
        try:
            if self._pool is not None:
                await self._pool.cancel_all()
            if self._scan_task is not None:
                await self._scan_task
        finally:
            # Also runs when the caller is cancelled mid-stop; STOPPING must not stick.
            self._state = ScanState.IDLE
            processed = self._progress.processed if self._progress else 0
            self.logger.info("Scan stopped.", scan_id=scan_id, processed=processed, found=len(self._results))
            self.channel.publish(StoppedEvent(scan_id=scan_id))
            self._publish_status("Scanning stopped", Severity.WARNING)
            self._finish()

    def _finish(self) -> None:
        if self._scan_finished is not None:
            self._scan_finished.set()

    async def wait(self) -> ScanState:
        """Wait for the current scan to complete or be stopped."""
        if self._scan_finished is not None:
            await self._scan_finished.wait()
        return self._state

    def consume_result(self, endpoint: Endpoint) -> bool:
        """Drop `endpoint` from the result set once the caller has acted on it."""
        removed = self._results.remove(endpoint)
        if removed:
            self.logger.debug("Result consumed.", endpoint=endpoint.address)
            self.channel.publish(ResultsChangedEvent(scan_id=self._scan_id, results=tuple(self._results.snapshot())))
        return removed

    async def close(self) -> None:
        await self.stop()

    def _publish_status(self, message: str, severity: Severity) -> None:
        self.channel.publish(StatusEvent(message=message, severity=severity))
