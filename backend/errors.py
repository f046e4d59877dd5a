"""
Decode errors for RIS-Live stream messages.

Every failure while decoding one message resolves to exactly one of:
- TransportError: the text is not a well-formed stream message
- SemanticError: a present field violates its grammar
- EndOfRib: the peer finished its initial table dump (not corruption)
"""

from __future__ import annotations

from enum import Enum


class SemanticErrorKind(str, Enum):
    UNKNOWN_ORIGIN = "unknown_origin"
    INCORRECT_AGGREGATOR = "incorrect_aggregator"
    INCORRECT_PREFIX = "incorrect_prefix"
    INCORRECT_COMMUNITY = "incorrect_community"


class RisLiveError(Exception):
    """Base class for everything the decoder raises."""


class TransportError(RisLiveError):
    """Malformed JSON or a mandatory scalar that does not parse."""

    def __init__(self, original_text: str, reason: str = "incorrect json"):
        self.original_text = original_text
        self.reason = reason
        super().__init__(f"{reason}: {original_text[:200]!r}")


class SemanticError(RisLiveError):
    def __init__(self, kind: SemanticErrorKind, offending_value: object):
        self.kind = kind
        self.offending_value = offending_value
        super().__init__(f"{kind.value}: {offending_value!r}")


class EndOfRib(RisLiveError):
    """Sentinel prefix 'eor' seen; the peer finished sending its table."""

    def __init__(self):
        super().__init__("end of rib")
