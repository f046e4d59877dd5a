"""
Data models for the RIS-Live decoder.

Three groups of models live here:
- Wire models: the JSON shapes the stream delivers (Envelope, RisMessageHeader,
  UpdateBody, AnnouncementBlock). Field types are strict so a stream sending
  the wrong JSON type is rejected instead of coerced.
- Normalized attribute values: AsPath/AsSet, Community, Origin.
- Output: RoutingElement, one per announced or withdrawn prefix.

The subscription request sent upstream (RisSubscribe) is also modeled here.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    IPvAnyAddress,
    IPvAnyNetwork,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_serializer,
    model_validator,
)

MAX_U32 = 2**32 - 1

U32 = Annotated[StrictInt, Field(ge=0, le=MAX_U32)]


# --- Message kinds ---

class MessageKind(str, Enum):
    """Top-level `type` of a server message."""
    RIS_MESSAGE = "ris_message"          # Only kind that can carry an UPDATE
    RIS_ERROR = "ris_error"
    RIS_RRC_LIST = "ris_rrc_list"
    RIS_SUBSCRIBE_OK = "ris_subscribe_ok"
    PONG = "pong"

    @classmethod
    def from_wire(cls, value: str) -> Optional[MessageKind]:
        try:
            return cls(value)
        except ValueError:
            return None


class PayloadType(str, Enum):
    """`data.type` of a ris_message: the BGP message or RIS event it reports."""
    UPDATE = "UPDATE"
    OPEN = "OPEN"
    NOTIFICATION = "NOTIFICATION"
    KEEPALIVE = "KEEPALIVE"
    RIS_PEER_STATE = "RIS_PEER_STATE"

    @classmethod
    def from_wire(cls, value: str) -> Optional[PayloadType]:
        try:
            return cls(value)
        except ValueError:
            return None


# --- Wire Models ---

class WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)


class Envelope(WireModel):
    type: StrictStr
    data: Optional[Any] = None

    @property
    def kind(self) -> Optional[MessageKind]:
        return MessageKind.from_wire(self.type)


class RisMessageHeader(WireModel):
    """Fields every ris_message carries, whatever its payload type."""
    timestamp: StrictFloat               # Unix seconds
    peer_ip: StrictStr = Field(alias="peer")
    peer_asn: StrictStr                  # Decimal text on the wire
    id: Optional[StrictStr] = None
    host: Optional[StrictStr] = None     # Collector, e.g. "rrc21"
    type: Optional[StrictStr] = None     # Absent on pure metadata notifications

    @property
    def payload_type(self) -> Optional[PayloadType]:
        if self.type is None:
            return None
        return PayloadType.from_wire(self.type)


class AnnouncementBlock(WireModel):
    next_hop: StrictStr
    prefixes: list[StrictStr]
    withdrawn_prefixes: Optional[list[StrictStr]] = Field(default=None, alias="withdrawals")


class UpdateBody(RisMessageHeader):
    as_path_raw: Optional[list[Union[U32, list[U32]]]] = Field(default=None, alias="path")
    communities_raw: Optional[list[list[U32]]] = Field(default=None, alias="community")
    origin_raw: Optional[StrictStr] = Field(default=None, alias="origin")
    med: Optional[U32] = None
    aggregator_raw: Optional[StrictStr] = Field(default=None, alias="aggregator")
    announcements: Optional[list[AnnouncementBlock]] = None


# --- Normalized Attribute Values ---

class AsSet(BaseModel):
    """AS_SET / confederation segment. Member order is display-only."""
    model_config = ConfigDict(frozen=True)

    asns: tuple[U32, ...]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AsSet):
            return NotImplemented
        return frozenset(self.asns) == frozenset(other.asns)

    def __hash__(self) -> int:
        return hash(frozenset(self.asns))

    def __contains__(self, asn: object) -> bool:
        return asn in self.asns

    def __str__(self) -> str:
        return "{" + ",".join(str(asn) for asn in self.asns) + "}"


class AsPath(BaseModel):
    """Ordered AS path; each segment is a single hop ASN or an AsSet."""
    model_config = ConfigDict(frozen=True)

    segments: tuple[Union[U32, AsSet], ...] = ()

    @property
    def origin_asns(self) -> list[int]:
        if not self.segments:
            return []
        last = self.segments[-1]
        if isinstance(last, AsSet):
            return list(last.asns)
        return [last]

    def contains(self, asn: int) -> bool:
        return any(asn == seg or (isinstance(seg, AsSet) and asn in seg) for seg in self.segments)

    def __str__(self) -> str:
        return " ".join(str(seg) for seg in self.segments)


class Community(BaseModel):
    """Custom community (asn, value)."""
    model_config = ConfigDict(frozen=True)

    asn: U32
    value: U32

    def __str__(self) -> str:
        return f"{self.asn}:{self.value}"


class Origin(str, Enum):
    IGP = "IGP"
    EGP = "EGP"
    INCOMPLETE = "INCOMPLETE"


class SharedAttributes(BaseModel):
    """Path attributes of one update, shared by all of its announcements."""
    model_config = ConfigDict(frozen=True)

    as_path: Optional[AsPath] = None
    origin: Optional[Origin] = None
    med: Optional[U32] = None
    communities: Optional[tuple[Community, ...]] = None
    aggregator_asn: Optional[U32] = None
    aggregator_ip: Optional[IPvAnyAddress] = None


# --- Output ---

class ElemType(str, Enum):
    ANNOUNCE = "announce"
    WITHDRAW = "withdraw"


# Withdrawals carry no path attributes
PATH_ATTRIBUTE_FIELDS = ("next_hop", *SharedAttributes.model_fields)


class RoutingElement(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: float
    elem_type: ElemType
    peer_ip: IPvAnyAddress
    peer_asn: U32
    prefix: IPvAnyNetwork
    next_hop: Optional[IPvAnyAddress] = None
    as_path: Optional[AsPath] = None
    origin: Optional[Origin] = None
    med: Optional[U32] = None
    communities: Optional[tuple[Community, ...]] = None
    aggregator_asn: Optional[U32] = None
    aggregator_ip: Optional[IPvAnyAddress] = None

    @model_validator(mode="after")
    def _withdrawals_carry_no_attributes(self) -> RoutingElement:
        if self.elem_type is ElemType.WITHDRAW:
            carried = [name for name in PATH_ATTRIBUTE_FIELDS if getattr(self, name) is not None]
            if carried:
                raise ValueError(f"withdraw element cannot carry {', '.join(carried)}")
        return self

    @field_serializer("as_path", when_used="json")
    def _serialize_as_path(self, as_path: Optional[AsPath]) -> Optional[str]:
        return None if as_path is None else str(as_path)

    @field_serializer("communities", when_used="json")
    def _serialize_communities(self, communities: Optional[tuple[Community, ...]]) -> Optional[list[str]]:
        return None if communities is None else [str(c) for c in communities]

    def to_line(self) -> str:
        """Pipe-delimited one-line form, empty columns for absent fields."""
        def col(value: Any) -> str:
            return "" if value is None else str(value)

        communities = None
        if self.communities is not None:
            communities = " ".join(str(c) for c in self.communities)

        return "|".join([
            "A" if self.elem_type is ElemType.ANNOUNCE else "W",
            col(self.timestamp),
            col(self.peer_ip),
            col(self.peer_asn),
            col(self.prefix),
            col(self.as_path),
            col(self.origin.value if self.origin else None),
            col(self.next_hop),
            col(self.med),
            col(communities),
            col(self.aggregator_asn),
            col(self.aggregator_ip),
        ])


# --- Subscription Request ---

class RisSubscribe(BaseModel):
    """Filter sent upstream before stream messages start arriving."""
    model_config = ConfigDict(populate_by_name=True)

    host: Optional[str] = None           # None = all collectors (firehose)
    type: Optional[PayloadType] = None
    require: Optional[str] = None        # Only messages containing this key
    peer: Optional[IPvAnyAddress] = None
    prefix: Optional[IPvAnyNetwork] = None
    path: Optional[str] = None           # ASN or AS-path pattern
    more_specific: bool = Field(default=True, alias="moreSpecific")
    less_specific: bool = Field(default=False, alias="lessSpecific")
