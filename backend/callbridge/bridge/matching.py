"""Predicates that recognise the Google Voice callback among inbound calls."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from callbridge.schemas import InboundCallEvent


@dataclass(frozen=True)
class CallbackMatcher:
    """Match the inbound leg of one call attempt.

    Two modes, selected by ``from_user_pattern``:

    - pattern given: the owner must match and the From user must match the
      regex (searched, not anchored).
    - no pattern: the owner must match, the marker header must be present and
      the To user must equal the forwarding number minus its dial prefix.
    """

    expected_owner: str
    forwarding_number: str
    from_user_pattern: str | None = None
    prefix_length: int = 1
    marker_header: str = "X-GoogleVoice"
    marker_value: str = "true"
    _compiled: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.forwarding_number) <= self.prefix_length:
            raise ValueError(
                f"Forwarding number {self.forwarding_number!r} is not longer than "
                f"its {self.prefix_length}-character dial prefix"
            )
        if self.from_user_pattern:
            try:
                compiled = re.compile(self.from_user_pattern)
            except re.error as exc:
                raise ValueError(f"Invalid from-user pattern {self.from_user_pattern!r}: {exc}") from exc
            object.__setattr__(self, "_compiled", compiled)

    @property
    def expected_to_user(self) -> str:
        return self.forwarding_number[self.prefix_length:]

    def __call__(self, event: InboundCallEvent) -> bool:
        if event.owner != self.expected_owner:
            return False

        if self._compiled is not None:
            return self._compiled.search(event.from_user) is not None

        return (
            event.has_header(self.marker_header, self.marker_value)
            and event.to_user == self.expected_to_user
        )
