"""StatusPoller: keeps GatewayController in sync with the real process."""

import asyncio
from typing import Protocol

from ..config import DEFAULT_POLL_INTERVAL
from ..logging_config import get_logger
from .controller import GatewayController
from .process import IGatewayProcess

logger = get_logger(__name__)


class IStatusPoller(Protocol):
    """Background status loop."""

    async def start(self) -> None:
        """Begin polling."""
        ...

    async def stop(self) -> None:
        """Stop polling; no task outlives this call."""
        ...

    async def poll_once(self) -> None:
        """Run a single poll cycle."""
        ...


class StatusPoller:
    """Queries gateway status every `interval` seconds, fire-and-forget."""

    def __init__(
        self,
        controller: GatewayController,
        process: IGatewayProcess,
        interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self._controller = controller
        self._process = process
        self._interval = interval
        self._cancelled = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return

        self._cancelled = False
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Status poller started ({self._interval:g}s interval)")

    async def stop(self) -> None:
        self._cancelled = True

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Status poller stopped")

    async def poll_once(self) -> None:
        try:
            observed = await self._process.status()
        except Exception as e:
            # Unknown this cycle
            logger.debug(f"Status query failed: {e}")
            return

        self._controller.apply_status(observed)

    async def _loop(self) -> None:
        while not self._cancelled:
            await self.poll_once()
            await asyncio.sleep(self._interval)
