"""Port to the call-signalling stack that accepts inbound calls."""

from __future__ import annotations

import logging
from typing import Protocol

from callbridge.schemas import Dialogue, InboundCallEvent

logger = logging.getLogger(__name__)


class SignalingPort(Protocol):
    def set_owner(self, event: InboundCallEvent, owner: str, admin_member_id: str) -> None: ...

    async def answer(
        self, event: InboundCallEvent, content_type: str, body: str
    ) -> Dialogue: ...


class SimulatedSignaling:
    """In-memory signalling stack: answers by building the dialogue locally.

    Used when no real SIP stack is wired in (demo / testing).
    """

    def __init__(self) -> None:
        self.owners: dict[str, tuple[str, str]] = {}
        self.answered: list[Dialogue] = []

    def set_owner(self, event: InboundCallEvent, owner: str, admin_member_id: str) -> None:
        self.owners[event.call_id] = (owner, admin_member_id)

    async def answer(
        self, event: InboundCallEvent, content_type: str, body: str
    ) -> Dialogue:
        owner, admin_member_id = self.owners.get(event.call_id, (event.owner, ""))
        dialogue = Dialogue(
            call_id=event.call_id,
            owner=owner,
            admin_member_id=admin_member_id,
            local_user=event.to_user,
            remote_user=event.from_user,
            content_type=content_type,
            body=body,
        )
        self.answered.append(dialogue)
        logger.info(
            "Simulated answer of %s from %s", event.call_id, event.from_user,
            extra={"call_id": event.call_id, "owner": owner},
        )
        return dialogue
