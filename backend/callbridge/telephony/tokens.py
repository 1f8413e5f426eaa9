"""Hidden-input token extraction from Google login/Voice pages."""

from __future__ import annotations

import re

from callbridge.errors import CallAuthTokenNotFound, TokenNotFound

GALX_PATTERN = re.compile(r'name="GALX"\s+?value="(?P<value>.*?)"')
RNR_PATTERN = re.compile(r'name="_rnr_se".*?value="(?P<value>.*?)"')


def extract_token(html: str, pattern: re.Pattern[str], token_name: str, page: str = "") -> str:
    """Return the ``value`` group of the first match of *pattern* in *html*.

    Raises :class:`TokenNotFound` when the page does not carry the token.
    """
    match = pattern.search(html)
    if match is None:
        raise TokenNotFound(token_name, page)
    return match.group("value")


def extract_galx(html: str) -> str:
    """Anti-forgery token from the pre-login page."""
    return extract_token(html, GALX_PATTERN, "GALX", "pre-login")


def extract_rnr(html: str) -> str:
    """Call-authorization token from the Voice home page."""
    match = RNR_PATTERN.search(html)
    if match is None:
        raise CallAuthTokenNotFound("_rnr_se", "account")
    return match.group("value")
