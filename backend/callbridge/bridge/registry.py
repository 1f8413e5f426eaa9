"""Process-wide registry of call attempts waiting for their inbound callback.

The signalling layer calls :meth:`CallbackRegistry.offer` once for every
inbound call. Pending attempts are bucketed by owner identity and scanned in
registration order; the first matcher that accepts the event claims it.

All bookkeeping, including the predicate scan, happens under one
``threading.Lock`` so the registry can be driven from a signalling thread
while attempts wait on the asyncio loop. Nothing inside the lock does I/O.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from callbridge.schemas import InboundCallEvent

logger = logging.getLogger(__name__)

MatchPredicate = Callable[[InboundCallEvent], bool]


@dataclass
class PendingAttempt:
    """One registered matcher and the future its claimed event lands in."""

    owner: str
    predicate: MatchPredicate
    loop: asyncio.AbstractEventLoop
    future: asyncio.Future[InboundCallEvent]
    attempt_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    def _resolve(self, event: InboundCallEvent) -> None:
        # Runs on the attempt's loop.
        if not self.future.done():
            self.future.set_result(event)

    def signal(self, event: InboundCallEvent) -> None:
        self.loop.call_soon_threadsafe(self._resolve, event)


class CallbackRegistry:
    def __init__(self, log: logging.Logger | None = None) -> None:
        self._by_owner: dict[str, dict[str, PendingAttempt]] = {}
        self._owner_of: dict[str, str] = {}
        self._lock = threading.Lock()
        self._log = log or logger

    def register(
        self,
        owner: str,
        predicate: MatchPredicate,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> PendingAttempt:
        """Register *predicate* for inbound calls owned by *owner*.

        Must be called from the loop that will await the attempt's future
        unless *loop* is given.
        """
        loop = loop or asyncio.get_running_loop()
        attempt = PendingAttempt(
            owner=owner,
            predicate=predicate,
            loop=loop,
            future=loop.create_future(),
        )
        with self._lock:
            self._by_owner.setdefault(owner, {})[attempt.attempt_id] = attempt
            self._owner_of[attempt.attempt_id] = owner
        self._log.debug(
            "Registered pending attempt %s", attempt.attempt_id,
            extra={"attempt_id": attempt.attempt_id, "owner": owner},
        )
        return attempt

    def deregister(self, attempt_id: str) -> bool:
        """Remove a pending attempt.

        Returns ``False`` if it was already claimed (or never registered).
        """
        with self._lock:
            return self._remove(attempt_id) is not None

    def offer(self, event: InboundCallEvent) -> str | None:
        """Hand an inbound call to the first pending attempt that accepts it.

        Returns the claiming attempt's id, or ``None`` if no matcher wanted
        the event. A matcher that raises counts as a non-match.
        """
        with self._lock:
            claimed = None
            for attempt in list(self._by_owner.get(event.owner, {}).values()):
                try:
                    accepted = attempt.predicate(event)
                except Exception:
                    self._log.exception(
                        "Matcher for attempt %s failed on call %s",
                        attempt.attempt_id, event.call_id,
                        extra={"attempt_id": attempt.attempt_id, "call_id": event.call_id},
                    )
                    continue
                if accepted:
                    claimed = self._remove(attempt.attempt_id)
                    break

        if claimed is None:
            self._log.debug(
                "No pending attempt matched call %s", event.call_id,
                extra={"call_id": event.call_id, "owner": event.owner},
            )
            return None

        claimed.signal(event)
        self._log.info(
            "Call %s claimed by attempt %s", event.call_id, claimed.attempt_id,
            extra={"attempt_id": claimed.attempt_id, "call_id": event.call_id},
        )
        return claimed.attempt_id

    def pending(self) -> list[str]:
        with self._lock:
            return list(self._owner_of)

    def clear(self) -> None:
        with self._lock:
            self._by_owner.clear()
            self._owner_of.clear()

    def __contains__(self, attempt_id: object) -> bool:
        with self._lock:
            return attempt_id in self._owner_of

    def __len__(self) -> int:
        with self._lock:
            return len(self._owner_of)

    def _remove(self, attempt_id: str) -> PendingAttempt | None:
        owner = self._owner_of.pop(attempt_id, None)
        if owner is None:
            return None
        bucket = self._by_owner[owner]
        attempt = bucket.pop(attempt_id)
        if not bucket:
            del self._by_owner[owner]
        return attempt


# Module-level singleton
registry = CallbackRegistry()
