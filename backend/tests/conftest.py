"""Shared fixtures: a fake Google Voice site served through httpx.MockTransport."""

from __future__ import annotations

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from callbridge.bridge.registry import CallbackRegistry
from callbridge.config import Settings
from callbridge.schemas import Credentials, InboundCallEvent

PRE_LOGIN_HTML = """
<form id="gaia_loginform">
  <input type="hidden"
         name="GALX"
         value="GALX1">
</form>
"""

HOME_HTML = '<form><input name="_rnr_se" type="hidden" value="RNR1"/></form>'


class FakeGoogleVoice:
    """Routes the four Google endpoints and records every request."""

    def __init__(
        self,
        pre_login_status: int = 200,
        login_status: int = 200,
        home_status: int = 200,
        call_status: int = 200,
        pre_login_html: str = PRE_LOGIN_HTML,
        home_html: str = HOME_HTML,
        fail_path: str | None = None,
        login_redirect: bool = False,
    ) -> None:
        self.login_redirect = login_redirect
        self.pre_login_status = pre_login_status
        self.login_status = login_status
        self.home_status = home_status
        self.call_status = call_status
        self.pre_login_html = pre_login_html
        self.home_html = home_html
        self.fail_path = fail_path
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == self.fail_path:
            raise httpx.ConnectError("connection refused", request=request)

        if path == "/accounts/ServiceLogin":
            return httpx.Response(self.pre_login_status, text=self.pre_login_html)
        if path == "/accounts/ServiceLoginAuth" and self.login_redirect:
            return httpx.Response(
                302,
                headers={
                    "Location": "https://www.google.com/accounts/CheckCookie",
                    "Set-Cookie": "SID=redirected456; Path=/",
                },
            )
        if path == "/accounts/CheckCookie":
            return httpx.Response(200, text="<html>signed in</html>")
        if path == "/accounts/ServiceLoginAuth":
            return httpx.Response(
                self.login_status,
                headers={"Set-Cookie": "SID=session123; Path=/"},
                text="<html>signed in</html>",
            )
        if path == "/voice":
            return httpx.Response(self.home_status, text=self.home_html)
        if path == "/voice/call/connect":
            return httpx.Response(self.call_status, json={"ok": self.call_status == 200})
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def form(self, path: str) -> dict[str, str]:
        """Decoded form body of the last request to *path*."""
        request = [r for r in self.requests if r.url.path == path][-1]
        return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


async def deliver_when_pending(
    registry: CallbackRegistry,
    event: InboundCallEvent,
    delay: float,
) -> str | None:
    """Wait for an attempt to register, then offer *event* after *delay* seconds."""
    while not len(registry):
        await asyncio.sleep(0.01)
    await asyncio.sleep(delay)
    return registry.offer(event)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, account_owner="alice", admin_member_id="admin-1")


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(identity="alice@example.com", secret="hunter2")


@pytest.fixture
def callback_registry() -> CallbackRegistry:
    return CallbackRegistry()
