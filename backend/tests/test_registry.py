"""Tests for the pending-callback registry."""

from __future__ import annotations

import asyncio

import pytest

from callbridge.bridge.matching import CallbackMatcher
from callbridge.bridge.registry import CallbackRegistry
from callbridge.schemas import InboundCallEvent


def _marker_event(owner: str, to_user: str = "5551234567") -> InboundCallEvent:
    return InboundCallEvent(owner=owner, to_user=to_user, headers={"X-GoogleVoice": "true"})


@pytest.mark.anyio
async def test_event_claimed_once_by_owner_matcher_only(callback_registry: CallbackRegistry) -> None:
    p1 = callback_registry.register("A", CallbackMatcher("A", "15551234567"))
    p2 = callback_registry.register("B", CallbackMatcher("B", "15551234567"))
    event = _marker_event("A")

    assert callback_registry.offer(event) == p1.attempt_id
    assert callback_registry.offer(event) is None

    assert await asyncio.wait_for(p1.future, 1) is event
    assert not p2.future.done()
    assert p1.attempt_id not in callback_registry
    assert p2.attempt_id in callback_registry


@pytest.mark.anyio
async def test_first_registered_matcher_wins(callback_registry: CallbackRegistry) -> None:
    first = callback_registry.register("A", lambda event: True)
    second = callback_registry.register("A", lambda event: True)

    assert callback_registry.offer(_marker_event("A")) == first.attempt_id
    await asyncio.sleep(0)
    assert first.future.done()
    assert not second.future.done()
    assert callback_registry.pending() == [second.attempt_id]


@pytest.mark.anyio
async def test_unmatched_event_is_not_consumed(callback_registry: CallbackRegistry) -> None:
    attempt = callback_registry.register("A", CallbackMatcher("A", "15551234567"))

    assert callback_registry.offer(_marker_event("A", to_user="5550000000")) is None
    assert callback_registry.offer(_marker_event("nobody")) is None
    assert attempt.attempt_id in callback_registry


@pytest.mark.anyio
async def test_faulty_matcher_is_a_non_match(callback_registry: CallbackRegistry) -> None:
    def broken(event: InboundCallEvent) -> bool:
        raise KeyError("To")

    faulty = callback_registry.register("A", broken)
    healthy = callback_registry.register("A", CallbackMatcher("A", "15551234567"))

    assert callback_registry.offer(_marker_event("A")) == healthy.attempt_id
    assert faulty.attempt_id in callback_registry


@pytest.mark.anyio
async def test_deregistered_matcher_is_never_evaluated(callback_registry: CallbackRegistry) -> None:
    calls: list[InboundCallEvent] = []

    def spy(event: InboundCallEvent) -> bool:
        calls.append(event)
        return True

    attempt = callback_registry.register("A", spy)
    assert callback_registry.deregister(attempt.attempt_id) is True
    assert callback_registry.deregister(attempt.attempt_id) is False

    assert callback_registry.offer(_marker_event("A")) is None
    assert calls == []
    assert len(callback_registry) == 0


@pytest.mark.anyio
async def test_offer_from_signalling_thread_wakes_waiter(callback_registry: CallbackRegistry) -> None:
    attempt = callback_registry.register("A", CallbackMatcher("A", "15551234567"))
    event = _marker_event("A")

    claimed_by = await asyncio.to_thread(callback_registry.offer, event)

    assert claimed_by == attempt.attempt_id
    assert await asyncio.wait_for(attempt.future, 1) is event


@pytest.mark.anyio
async def test_deregister_after_claim_reports_false(callback_registry: CallbackRegistry) -> None:
    attempt = callback_registry.register("A", lambda event: True)
    callback_registry.offer(_marker_event("A"))

    assert callback_registry.deregister(attempt.attempt_id) is False
