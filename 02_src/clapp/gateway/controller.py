"""GatewayController: observed lifecycle state of the gateway process.

Transitions::

    stopped --start()--> starting --ok--> running
                                  --fail--> error
    error   --start()--> starting
    running --stop()--> stopped        (failure: phase kept, error raised)
    any     --poll "running"--> running
    any     --poll other--> stopped    (ignored while starting or in error)

start()/stop() are expected to be serialized by the caller. Concurrent calls
are not locked out; the last writer wins and the next poll re-syncs with the
real process.

A failed start stays in error even when polls report the process gone: the
failure detail is the user-visible outcome of start() and is only replaced by
the next successful start, an explicit stop(), or a poll that sees the
gateway running.
"""

from typing import Callable, Protocol

from ..errors import ProcessError
from ..logging_config import get_logger
from ..models import GatewayPhase, GatewayState
from .process import RUNNING, IGatewayProcess

logger = get_logger(__name__)

StateListener = Callable[[GatewayState, GatewayState], None]


class IGatewayController(Protocol):
    """Owner of GatewayState."""

    @property
    def state(self) -> GatewayState:
        ...

    async def start(self) -> GatewayState:
        """Start the gateway; failures land in the error phase."""
        ...

    async def stop(self) -> GatewayState:
        """Stop the gateway; raises ProcessError if it may still be alive."""
        ...

    def apply_status(self, observed: str) -> GatewayState:
        """Feed one externally observed status into the state machine."""
        ...

    async def refresh(self) -> GatewayState:
        """Query the process status once and apply it."""
        ...


class GatewayController:
    """Supervises the gateway process through its start/stop/status primitives."""

    def __init__(self, process: IGatewayProcess):
        self._process = process
        self._state = GatewayState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> GatewayState:
        return self._state

    @property
    def phase(self) -> GatewayPhase:
        return self._state.phase

    @property
    def is_running(self) -> bool:
        return self._state.phase is GatewayPhase.RUNNING

    def add_listener(self, listener: StateListener) -> None:
        """Call listener(old, new) on every phase change."""
        self._listeners.append(listener)

    def _set(self, new: GatewayState) -> GatewayState:
        old = self._state
        self._state = new
        if old != new:
            logger.info(f"Gateway {old.phase.value} -> {new.phase.value}")
            for listener in self._listeners:
                try:
                    listener(old, new)
                except Exception as e:
                    logger.error(f"Gateway state listener failed: {e}", exc_info=True)
        return new

    async def start(self) -> GatewayState:
        if self.phase in (GatewayPhase.RUNNING, GatewayPhase.STARTING):
            return self._state

        self._set(GatewayState(GatewayPhase.STARTING))
        try:
            await self._process.start()
        except Exception as e:
            detail = str(e) or type(e).__name__
            logger.error(f"Gateway failed to start: {detail}")
            return self._set(GatewayState.failed(detail))

        return self._set(GatewayState(GatewayPhase.RUNNING))

    async def stop(self) -> GatewayState:
        already_stopped = self.phase is GatewayPhase.STOPPED
        try:
            await self._process.stop()
        except Exception as e:
            if already_stopped:
                logger.warning(f"Ignoring stop failure while stopped: {e}")
                return self._state
            if isinstance(e, ProcessError):
                raise
            raise ProcessError("Failed to stop gateway", str(e)) from e

        return self._set(GatewayState(GatewayPhase.STOPPED))

    def apply_status(self, observed: str) -> GatewayState:
        if observed == RUNNING:
            return self._set(GatewayState(GatewayPhase.RUNNING))
        if self.phase is GatewayPhase.STARTING:
            # Boot in progress; the start primitive decides the outcome
            return self._state
        if self.phase is GatewayPhase.ERROR:
            # Sticky until the next successful start
            return self._state
        return self._set(GatewayState(GatewayPhase.STOPPED))

    async def refresh(self) -> GatewayState:
        return self.apply_status(await self._process.status())
