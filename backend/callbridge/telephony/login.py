"""Google Voice session acquisition.

The sequence is fixed and order-sensitive:

1. GET the pre-login page and pull the ``GALX`` anti-forgery token.
2. POST the credentials plus ``GALX`` to the login endpoint.
3. GET the Voice home page with the now-authenticated cookie jar and pull
   the ``_rnr_se`` call-authorization token.

Tokens are single-use and short-lived, so nothing here retries. A failed
attempt must start again from step 1 with a fresh session.
"""

from __future__ import annotations

import logging

from callbridge.config import Settings
from callbridge.errors import AuthenticationRejected, PageLoadFailed
from callbridge.schemas import Credentials
from callbridge.telephony.http_session import SessionHTTPClient
from callbridge.telephony.tokens import extract_galx, extract_rnr

logger = logging.getLogger(__name__)


class LoginFlow:
    def __init__(self, settings: Settings, log: logging.Logger | None = None) -> None:
        self._settings = settings
        self._log = log or logger

    async def login(self, session: SessionHTTPClient, credentials: Credentials) -> str:
        """Authenticate *session* and return the call-authorization token."""
        identity = credentials.identity
        self._log.info("Logging into google.com for %s", identity, extra={"owner": identity})

        # Step 1: pre-login page
        resp = await session.get(self._settings.pre_login_url)
        if resp.status_code != 200:
            raise PageLoadFailed(self._settings.pre_login_url, resp.status_code)
        galx = extract_galx(resp.text)
        self._log.debug("GALX key retrieved for %s", identity)

        # Step 2: credentials
        resp = await session.post_form(
            self._settings.login_url,
            {
                "Email": identity,
                "Passwd": credentials.secret.get_secret_value(),
                "GALX": galx,
            },
        )
        if resp.status_code != 200:
            raise AuthenticationRejected(identity, resp.status_code)

        # Step 3: Voice home page
        resp = await session.get(self._settings.voice_home_url)
        if resp.status_code != 200:
            raise PageLoadFailed(self._settings.voice_home_url, resp.status_code)
        self._log.info("Google Voice home page loaded for %s", identity)

        return extract_rnr(resp.text)
