"""
Attribute Normalizers: convert RIS-Live wire encodings into normalized values.

Wire encodings handled:
- path:       [58299, [49981, 397666]]  → hop 58299, AS_SET {49981,397666}
- community:  [[58299, 100], ...]       → Community(58299, 100)
- origin:     "igp" / "EGP" / ...       → Origin (case-insensitive)
- aggregator: "65000:8.42.232.1"        → (65000, IPv4Address('8.42.232.1'))

Malformed attribute content raises SemanticError. The scalar parsers
(parse_ip, parse_asn) raise ValueError and leave it to the caller to decide
how severe a bad value is.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Union

from errors import EndOfRib, SemanticError, SemanticErrorKind
from models import MAX_U32, AsPath, AsSet, Community, Origin

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

# Prefix literal a collector sends once a peer finished its initial table dump
END_OF_RIB_PREFIX = "eor"

ORIGIN_TOKENS: dict[str, Origin] = {
    "igp": Origin.IGP,
    "egp": Origin.EGP,
    "incomplete": Origin.INCOMPLETE,
}

_ASN_RE = re.compile(r'[0-9]+')


# --- Scalars ---

def parse_ip(text: str) -> IPAddress:
    """Parse an IPv4 or IPv6 address. IPv6 zone ids (fe80::1%eth0) are rejected."""
    if "%" in text:
        raise ValueError(f"zone id not allowed in address: {text!r}")
    return ipaddress.ip_address(text)


def parse_asn(text: str) -> int:
    """Parse decimal ASN text as an unsigned 32-bit integer."""
    if not _ASN_RE.fullmatch(text):
        raise ValueError(f"ASN is not a decimal number: {text!r}")
    asn = int(text)
    if asn > MAX_U32:
        raise ValueError(f"ASN out of 32-bit range: {text!r}")
    return asn


def parse_prefix(literal: str) -> IPNetwork:
    """
    Parse an 'address/length' literal.

    Host bits are allowed and masked off. The end-of-RIB sentinel raises
    EndOfRib before any parsing is attempted.
    """
    if literal == END_OF_RIB_PREFIX:
        raise EndOfRib()
    if "/" not in literal:
        raise SemanticError(SemanticErrorKind.INCORRECT_PREFIX, literal)
    try:
        return ipaddress.ip_network(literal, strict=False)
    except ValueError:
        raise SemanticError(SemanticErrorKind.INCORRECT_PREFIX, literal) from None


# --- Attributes ---

def normalize_as_path(path: list[Union[int, list[int]]]) -> AsPath:
    return AsPath(segments=tuple(
        AsSet(asns=tuple(seg)) if isinstance(seg, list) else seg
        for seg in path
    ))


def normalize_communities(pairs: list[list[int]]) -> tuple[Community, ...]:
    communities = []
    for pair in pairs:
        if len(pair) != 2:
            raise SemanticError(SemanticErrorKind.INCORRECT_COMMUNITY, pair)
        communities.append(Community(asn=pair[0], value=pair[1]))
    return tuple(communities)


def normalize_origin(token: str) -> Origin:
    try:
        return ORIGIN_TOKENS[token.lower()]
    except KeyError:
        raise SemanticError(SemanticErrorKind.UNKNOWN_ORIGIN, token) from None


def normalize_aggregator(raw: str) -> tuple[int, IPAddress]:
    """Split 'ASN:IP' into its parts. Any other shape is a SemanticError."""
    parts = raw.split(":")
    if len(parts) != 2:
        raise SemanticError(SemanticErrorKind.INCORRECT_AGGREGATOR, raw)
    try:
        return parse_asn(parts[0]), parse_ip(parts[1])
    except ValueError:
        raise SemanticError(SemanticErrorKind.INCORRECT_AGGREGATOR, raw) from None
