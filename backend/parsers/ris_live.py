"""
Decode RIS-Live stream messages into routing elements.

One input text goes through:
  decode_envelope → decode_update_body → decode_peer → decode_shared_attributes
  → expand_elements
and comes out as a list of RoutingElement. Decoding is all-or-nothing: the
first error aborts the message and no partial list is ever returned.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from errors import TransportError
from models import (
    ElemType,
    Envelope,
    MessageKind,
    PayloadType,
    RisMessageHeader,
    RoutingElement,
    SharedAttributes,
    UpdateBody,
)
from normalizers import (
    IPAddress,
    normalize_aggregator,
    normalize_as_path,
    normalize_communities,
    normalize_origin,
    parse_asn,
    parse_ip,
    parse_prefix,
)

logger = logging.getLogger(__name__)

# Kinds that are understood but never carry routing elements
_METADATA_KINDS = frozenset(MessageKind) - {MessageKind.RIS_MESSAGE}

WireModelT = TypeVar("WireModelT", bound=BaseModel)


def parse_ris_live_message(text: str) -> list[RoutingElement]:
    """
    Parse one stream message into routing elements.

    Raises TransportError, SemanticError or EndOfRib (all RisLiveError).
    Messages that are not BGP updates decode to an empty list.
    """
    body = decode_update_body(decode_envelope(text), text)
    if body is None:
        return []
    peer_ip, peer_asn = decode_peer(body, text)
    attributes = decode_shared_attributes(body)
    return list(expand_elements(body, peer_ip, peer_asn, attributes, text))


def decode_envelope(text: str) -> Envelope:
    try:
        return Envelope.model_validate_json(text)
    except ValidationError:
        raise TransportError(text) from None


def decode_update_body(envelope: Envelope, text: str) -> Optional[UpdateBody]:
    """Return the update payload, or None for every message that carries none."""
    kind = envelope.kind
    if kind is MessageKind.RIS_MESSAGE:
        header = _validate(RisMessageHeader, envelope.data, text)
    elif kind in _METADATA_KINDS:
        return None
    else:
        # Unrecognized kinds are ignored like metadata kinds, deliberately.
        logger.debug("Ignoring unrecognized message kind %r", envelope.type)
        return None

    if header.type is None:
        return None
    payload_type = header.payload_type
    if payload_type is PayloadType.UPDATE:
        return _validate(UpdateBody, envelope.data, text)
    if payload_type is None:
        logger.debug("Ignoring unrecognized payload type %r", header.type)
    return None


def decode_peer(body: UpdateBody, text: str) -> tuple[IPAddress, int]:
    try:
        return parse_ip(body.peer_ip), parse_asn(body.peer_asn)
    except ValueError as exc:
        raise TransportError(text, f"invalid peer ({exc})") from None


def decode_shared_attributes(body: UpdateBody) -> SharedAttributes:
    as_path = origin = communities = None
    aggregator_asn = aggregator_ip = None
    if body.as_path_raw is not None:
        as_path = normalize_as_path(body.as_path_raw)
    if body.communities_raw is not None:
        communities = normalize_communities(body.communities_raw)
    if body.origin_raw is not None:
        origin = normalize_origin(body.origin_raw)
    if body.aggregator_raw is not None:
        aggregator_asn, aggregator_ip = normalize_aggregator(body.aggregator_raw)

    return SharedAttributes(
        as_path=as_path,
        origin=origin,
        med=body.med,
        communities=communities,
        aggregator_asn=aggregator_asn,
        aggregator_ip=aggregator_ip,
    )


def expand_elements(
    body: UpdateBody,
    peer_ip: IPAddress,
    peer_asn: int,
    attributes: SharedAttributes,
    text: str,
) -> Iterator[RoutingElement]:
    """
    Yield one element per (block, prefix): per block, announcements in prefix
    order, then withdrawals in withdrawal order.
    """
    shared = dict(attributes)

    for block in body.announcements or []:
        try:
            next_hop = parse_ip(block.next_hop)
        except ValueError:
            raise TransportError(text, f"invalid next hop {block.next_hop!r}") from None

        for literal in block.prefixes:
            yield RoutingElement(
                timestamp=body.timestamp,
                elem_type=ElemType.ANNOUNCE,
                peer_ip=peer_ip,
                peer_asn=peer_asn,
                prefix=parse_prefix(literal),
                next_hop=next_hop,
                **shared,
            )

        for literal in block.withdrawn_prefixes or []:
            yield RoutingElement(
                timestamp=body.timestamp,
                elem_type=ElemType.WITHDRAW,
                peer_ip=peer_ip,
                peer_asn=peer_asn,
                prefix=parse_prefix(literal),
            )


def _validate(model: type[WireModelT], data: object, text: str) -> WireModelT:
    try:
        return model.model_validate(data)
    except ValidationError:
        raise TransportError(text) from None
