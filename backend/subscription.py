"""Compose the ris_subscribe request that selects which stream messages arrive."""

from __future__ import annotations

import json
from typing import Optional

from models import PayloadType, RisSubscribe

SUBSCRIBE_TYPE = "ris_subscribe"
ALL_HOSTS = "all"


def build_subscription(
    host: Optional[str] = ALL_HOSTS,
    msg_type: Optional[str] = None,
    require: Optional[str] = None,
    peer: Optional[str] = None,
    prefix: Optional[str] = None,
    path: Optional[str] = None,
    more_specific: bool = True,
    less_specific: bool = False,
) -> RisSubscribe:
    """
    Build a validated subscription filter.

    host="all" (any case) or None subscribes to every collector. An unknown
    msg_type, peer address or prefix raises ValueError.
    """
    if msg_type is not None and PayloadType.from_wire(msg_type.upper()) is None:
        raise ValueError(f"Unknown message type filter: {msg_type!r}")

    return RisSubscribe(
        host=None if host is None or host.lower() == ALL_HOSTS else host,
        type=msg_type.upper() if msg_type else None,
        require=require,
        peer=peer,
        prefix=prefix,
        path=path,
        more_specific=more_specific,
        less_specific=less_specific,
    )


def to_message(subscribe: RisSubscribe) -> str:
    data = subscribe.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps({"type": SUBSCRIBE_TYPE, "data": data})


def compose_subscription_message(
    host: Optional[str] = ALL_HOSTS,
    msg_type: Optional[str] = None,
    require: Optional[str] = None,
    peer: Optional[str] = None,
    prefix: Optional[str] = None,
    path: Optional[str] = None,
    more_specific: bool = True,
    less_specific: bool = False,
) -> str:
    return to_message(build_subscription(
        host=host,
        msg_type=msg_type,
        require=require,
        peer=peer,
        prefix=prefix,
        path=path,
        more_specific=more_specific,
        less_specific=less_specific,
    ))
