"""CallBridge FastAPI application: inbound-call dispatch for click-to-call bridging."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from callbridge.bridge.registry import registry
from callbridge.config import get_settings
from callbridge.logging_utils import setup_logging
from callbridge.schemas import InboundCallEvent, OfferResponse, PendingCallsResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[no-untyped-def]
    setup_logging(get_settings().log_level)
    logger.info("CallBridge dispatcher starting up")
    yield
    logger.info("CallBridge dispatcher shutting down")


# ---------------------------------------------------------------------------
# App creation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="CallBridge",
    description="Click-to-call bridging: inbound callback dispatch",
    version="0.1.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


# ---------------------------------------------------------------------------
# Inbound dispatch
# ---------------------------------------------------------------------------


@app.post("/inbound-calls", response_model=OfferResponse)
async def offer_inbound_call(event: InboundCallEvent) -> OfferResponse:
    """Called by the signalling layer once for every inbound call."""
    attempt_id = registry.offer(event)
    logger.info(
        "Inbound call %s for %s: %s",
        event.call_id, event.owner, attempt_id or "unmatched",
        extra={"call_id": event.call_id, "owner": event.owner},
    )
    return OfferResponse(call_id=event.call_id, matched_attempt_id=attempt_id)


@app.get("/pending-calls", response_model=PendingCallsResponse)
async def pending_calls() -> PendingCallsResponse:
    return PendingCallsResponse(pending=registry.pending())
