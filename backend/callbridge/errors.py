"""Failure kinds raised by the click-to-call workflow.

A rendezvous that never sees its callback is not an error: the bridge
manager reports it as an empty (``None``) result instead.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for every failure that aborts a bridged call attempt."""


# ---------------------------------------------------------------------------
# HTTP transport
# ---------------------------------------------------------------------------


class TransportError(BridgeError):
    """Connection failure or timeout on one of the HTTP steps."""

    def __init__(self, detail: str, url: str = "") -> None:
        super().__init__(detail)
        self.detail = detail
        self.url = url


class PageLoadFailed(TransportError):
    """A page load returned something other than 200 OK."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Load of {url} failed with response {status_code}.", url)
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


class LoginError(BridgeError):
    """The session-acquisition sequence did not produce a call token."""


class TokenNotFound(LoginError):
    """An expected hidden input was missing from a page."""

    def __init__(self, token_name: str, page: str = "") -> None:
        where = f" on the {page} page" if page else ""
        super().__init__(f"Could not find the {token_name} key{where}.")
        self.token_name = token_name
        self.page = page


class CallAuthTokenNotFound(TokenNotFound):
    """The home page loaded but carried no call-authorization token."""


class AuthenticationRejected(LoginError):
    def __init__(self, identity: str, status_code: int) -> None:
        super().__init__(f"Login failed for {identity} with response {status_code}.")
        self.identity = identity
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Call request
# ---------------------------------------------------------------------------


class CallRequestError(BridgeError):
    """The call-connect request could not be placed."""


class CallRequestRejected(CallRequestError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"The call request failed with a {status_code} response.")
        self.status_code = status_code
