"""
Single TCP connectivity check against one host/port pair.
"""
import asyncio

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_PROBE_TIMEOUT = 0.2


class PortProbe:
    """
    Checks whether a TCP port accepts connections within a fixed timeout.

    A refused connection, an unreachable host and a timeout all collapse to
    False. There are no retries. Task cancellation is the only thing that
    propagates out of `probe`, so an in-flight attempt can be abandoned.
    """

    def __init__(self, timeout: float = DEFAULT_PROBE_TIMEOUT):
        if timeout <= 0:
            raise ValueError("Probe timeout must be positive.")
        self.timeout = timeout

    async def probe(self, host: str, port: int) -> bool:
        try:
            _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=self.timeout)
        except (OSError, asyncio.TimeoutError) as e:
            logger.debug("Probe negative", host=host, port=port, reason=type(e).__name__)
            return False
        except Exception as e:
            logger.debug("Probe failed unexpectedly", host=host, port=port, error=str(e))
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass  # peer reset during close; the connect already succeeded
        return True

    async def __call__(self, host: str, port: int) -> bool:
        return await self.probe(host, port)
