"""Google Voice call-connect request."""

from __future__ import annotations

import logging

from callbridge.config import Settings
from callbridge.errors import CallRequestRejected
from callbridge.schemas import CallRequestParams
from callbridge.telephony.http_session import SessionHTTPClient

logger = logging.getLogger(__name__)


class CallTrigger:
    def __init__(self, settings: Settings, log: logging.Logger | None = None) -> None:
        self._settings = settings
        self._log = log or logger

    async def trigger(self, session: SessionHTTPClient, params: CallRequestParams) -> None:
        """Ask Google Voice to ring ``forwarding_number`` and then dial out.

        Returning normally only means the request was accepted; it says
        nothing about whether the callback will ever arrive.
        """
        resp = await session.post_form(
            self._settings.voice_call_url,
            {
                "outgoingNumber": params.destination_number,
                "forwardingNumber": params.forwarding_number,
                "subscriberNumber": "undefined",
                "remember": "0",
                "_rnr_se": params.call_auth_token,
            },
        )
        if resp.status_code != 200:
            raise CallRequestRejected(resp.status_code)

        self._log.info(
            "Call to %s forwarding to %s successfully initiated",
            params.destination_number,
            params.forwarding_number,
        )
