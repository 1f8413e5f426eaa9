"""Cookie-carrying HTTP session used for one call attempt."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from callbridge.errors import TransportError

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=utf-8"


class SessionHTTPClient:
    """Issues sequential requests that share one cookie jar.

    Every request gets its own ``timeout`` and follows redirects. Connection
    failures and timeouts surface as :class:`TransportError`; status codes are
    left for the caller to judge.

    Use as an async context manager so the session is discarded when the
    attempt ends::

        async with SessionHTTPClient(timeout=5.0) as session:
            resp = await session.get(url)
    """

    def __init__(
        self,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._timeout = timeout
        self._log = log or logger
        self._client = httpx.AsyncClient(
            transport=transport,
            follow_redirects=True,
            timeout=timeout,
        )

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    async def get(self, url: str) -> httpx.Response:
        return await self._send("GET", url)

    async def post_form(self, url: str, data: dict[str, str]) -> httpx.Response:
        return await self._send(
            "POST",
            url,
            data=data,
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, timeout=self._timeout, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(f"{method} {url} timed out after {self._timeout}s", url) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}", url) from exc

        self._log.debug(
            "%s %s -> %s", method, url, resp.status_code,
            extra={"status_code": resp.status_code},
        )
        return resp

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> SessionHTTPClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
