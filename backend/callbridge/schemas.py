"""Pydantic models shared across the application."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretStr


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Outbound leg
# ---------------------------------------------------------------------------


class Credentials(BaseModel):
    """Google account login, supplied once per attempt and never stored."""

    identity: str
    secret: SecretStr


class CallRequestParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    forwarding_number: str
    destination_number: str
    call_auth_token: str


# ---------------------------------------------------------------------------
# Inbound leg
# ---------------------------------------------------------------------------


class InboundCallEvent(BaseModel):
    """An inbound call as seen by the signalling layer.

    ``headers`` holds the non-standard headers of the INVITE, keyed by
    header name.
    """

    call_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    owner: str
    from_user: str = ""
    to_user: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    received_at: datetime = Field(default_factory=_utcnow)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def has_header(self, name: str, value: str | None = None) -> bool:
        found = self.header(name)
        if found is None:
            return False
        return value is None or found.strip() == value


class Dialogue(BaseModel):
    """An answered inbound call bridged to the original caller."""

    dialogue_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    call_id: str
    owner: str
    admin_member_id: str = ""
    local_user: str = ""
    remote_user: str = ""
    content_type: str = ""
    body: str = ""
    established_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Progress notifications
# ---------------------------------------------------------------------------


class ProgressStatus(str, Enum):
    ringing = "ringing"
    logged_in = "logged_in"
    call_requested = "call_requested"
    callback_received = "callback_received"
    timed_out = "timed_out"
    failed = "failed"


class CallProgress(BaseModel):
    status: ProgressStatus
    message: str = ""


# ---------------------------------------------------------------------------
# Dispatch API
# ---------------------------------------------------------------------------


class OfferResponse(BaseModel):
    call_id: str
    matched_attempt_id: str | None = None


class PendingCallsResponse(BaseModel):
    pending: list[str]
