"""Bridge manager: orchestrates one click-to-call attempt end to end."""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

from callbridge.bridge.matching import CallbackMatcher
from callbridge.bridge.registry import CallbackRegistry, registry as default_registry
from callbridge.bridge.rendezvous import CallRendezvous
from callbridge.config import Settings, get_settings
from callbridge.errors import BridgeError
from callbridge.schemas import (
    CallProgress,
    CallRequestParams,
    Credentials,
    Dialogue,
    ProgressStatus,
)
from callbridge.telephony.call_trigger import CallTrigger
from callbridge.telephony.http_session import SessionHTTPClient
from callbridge.telephony.login import LoginFlow
from callbridge.telephony.signaling import SignalingPort

logger = logging.getLogger(__name__)

ProgressHook = Callable[[CallProgress], None]


class BridgeManager:
    """Places a Google Voice callback and bridges it to the waiting caller.

    *owner* is the account on whose behalf inbound calls arrive; the
    callback is only recognised when its owner matches. Every attempt gets
    its own HTTP session and its own rendezvous, so one manager can serve
    concurrent callers.
    """

    def __init__(
        self,
        signaling: SignalingPort,
        owner: str | None = None,
        admin_member_id: str | None = None,
        settings: Settings | None = None,
        registry: CallbackRegistry | None = None,
        on_progress: ProgressHook | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._signaling = signaling
        self._owner = owner if owner is not None else self._settings.account_owner
        self._admin_member_id = (
            admin_member_id if admin_member_id is not None else self._settings.admin_member_id
        )
        self._registry = registry if registry is not None else default_registry
        self._on_progress = on_progress
        self._transport = transport
        self._log = log or logger
        self._login = LoginFlow(self._settings, log=self._log)
        self._trigger = CallTrigger(self._settings, log=self._log)

    def _progress(self, status: ProgressStatus, message: str) -> None:
        if self._on_progress is not None:
            self._on_progress(CallProgress(status=status, message=message))

    def build_matcher(self, forwarding_number: str, from_user_pattern: str | None) -> CallbackMatcher:
        return CallbackMatcher(
            expected_owner=self._owner,
            forwarding_number=forwarding_number,
            from_user_pattern=from_user_pattern or None,
            prefix_length=self._settings.forwarding_prefix_length,
            marker_header=self._settings.callback_marker_header,
            marker_value=self._settings.callback_marker_value,
        )

    async def initiate_bridged_call(
        self,
        credentials: Credentials,
        forwarding_number: str,
        destination_number: str,
        from_user_pattern: str | None = None,
        content_type: str = "",
        body: str = "",
    ) -> Dialogue | None:
        """Run login → call request → rendezvous → answer.

        Returns the bridged :class:`Dialogue`, or ``None`` when Google
        accepted the request but the callback never arrived in time. Every
        other failure raises a :class:`BridgeError`.
        """
        extra = {"owner": self._owner}
        self._progress(ProgressStatus.ringing, "Initiating Google Voice call")
        matcher = self.build_matcher(forwarding_number, from_user_pattern)

        rendezvous = CallRendezvous(
            self._registry,
            matcher,
            deadline=self._settings.rendezvous_deadline,
            log=self._log,
        )
        try:
            async with SessionHTTPClient(
                timeout=self._settings.http_step_timeout,
                transport=self._transport,
                log=self._log,
            ) as session:
                rnr = await self._login.login(session, credentials)
                self._progress(
                    ProgressStatus.logged_in,
                    f"Call key successfully retrieved for {credentials.identity}",
                )

                rendezvous.arm()
                await self._trigger.trigger(
                    session,
                    CallRequestParams(
                        forwarding_number=forwarding_number,
                        destination_number=destination_number,
                        call_auth_token=rnr,
                    ),
                )

            # The session is closed here; nothing below needs it.
            self._progress(
                ProgressStatus.call_requested,
                f"Call to {destination_number} forwarding to {forwarding_number} initiated",
            )
            event = await rendezvous.wait()
        except BridgeError as exc:
            self._log.error("Bridged call attempt failed: %s", exc, extra=extra)
            self._progress(ProgressStatus.failed, str(exc))
            raise
        finally:
            # No-op once matched or timed out; withdraws the matcher on any
            # other way out so it cannot claim a later callback.
            rendezvous.cancel()

        if event is None:
            self._progress(ProgressStatus.timed_out, "Timed out waiting for callback")
            return None

        self._signaling.set_owner(event, self._owner, self._admin_member_id)
        self._progress(ProgressStatus.callback_received, "Google Voice callback received")
        return await self._signaling.answer(event, content_type, body)
