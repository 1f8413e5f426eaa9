"""Bounded wait that couples a call request to its inbound callback."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from callbridge.bridge.matching import CallbackMatcher
from callbridge.bridge.registry import CallbackRegistry, PendingAttempt
from callbridge.schemas import InboundCallEvent

logger = logging.getLogger(__name__)


class RendezvousState(str, Enum):
    IDLE = "IDLE"
    AWAITING_CALLBACK = "AWAITING_CALLBACK"
    MATCHED = "MATCHED"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"


class CallRendezvous:
    """One attempt's wait for its callback.

    ``arm()`` registers the matcher before the call request goes out so a
    callback racing the HTTP response is still caught. ``wait()`` then
    blocks for at most ``deadline`` seconds and wakes as soon as the
    registry hands over a matching event. Match and timeout are exclusive:
    if the deadline fires after the registry already claimed an event, the
    claim wins.
    """

    def __init__(
        self,
        registry: CallbackRegistry,
        matcher: CallbackMatcher,
        deadline: float = 30.0,
        log: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._matcher = matcher
        self._deadline = deadline
        self._log = log or logger
        self._attempt: PendingAttempt | None = None
        self.state = RendezvousState.IDLE
        self.event: InboundCallEvent | None = None

    @property
    def attempt_id(self) -> str | None:
        return self._attempt.attempt_id if self._attempt else None

    def arm(self) -> str:
        if self.state != RendezvousState.IDLE:
            raise RuntimeError(f"Rendezvous cannot be armed from state {self.state.value}")
        self._attempt = self._registry.register(self._matcher.expected_owner, self._matcher)
        self.state = RendezvousState.AWAITING_CALLBACK
        return self._attempt.attempt_id

    def cancel(self) -> None:
        """Withdraw the matcher without waiting (the call request failed)."""
        if self.state != RendezvousState.AWAITING_CALLBACK or self._attempt is None:
            return
        self._registry.deregister(self._attempt.attempt_id)
        self._attempt.future.cancel()
        self.state = RendezvousState.CANCELLED

    async def wait(self) -> InboundCallEvent | None:
        """Return the claimed inbound call, or ``None`` if the deadline passed."""
        if self.state != RendezvousState.AWAITING_CALLBACK or self._attempt is None:
            raise RuntimeError(f"Rendezvous is not awaiting a callback (state {self.state.value})")

        attempt = self._attempt
        extra = {"attempt_id": attempt.attempt_id, "owner": attempt.owner}
        try:
            event = await asyncio.wait_for(asyncio.shield(attempt.future), timeout=self._deadline)
        except asyncio.TimeoutError:
            if self._registry.deregister(attempt.attempt_id):
                attempt.future.cancel()
                self.state = RendezvousState.TIMED_OUT
                self._log.info(
                    "Timed out after %ss waiting for callback", self._deadline, extra=extra
                )
                return None
            # Claimed between the deadline and deregistration.
            event = await attempt.future
        except asyncio.CancelledError:
            self._registry.deregister(attempt.attempt_id)
            self.state = RendezvousState.CANCELLED
            raise

        self.event = event
        self.state = RendezvousState.MATCHED
        self._log.info("Callback %s received", event.call_id, extra=extra)
        return event
