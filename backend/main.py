"""RIS-Live Decoder API."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from errors import EndOfRib, SemanticError, TransportError
from parsers import parse_ris_live_message
from subscription import ALL_HOSTS, build_subscription, to_message

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

VERSION = "0.3.0"

app = FastAPI(title="RIS-Live Decoder", description="Decode RIS-Live stream messages into routing elements", version=VERSION)


class DecodeRequest(BaseModel):
    message: str


class BatchDecodeRequest(BaseModel):
    messages: list[str] = Field(default_factory=list)


class SubscriptionRequest(BaseModel):
    host: Optional[str] = ALL_HOSTS
    type: Optional[str] = None
    require: Optional[str] = None
    peer: Optional[str] = None
    prefix: Optional[str] = None
    path: Optional[str] = None
    more_specific: bool = True
    less_specific: bool = False


@app.post("/api/decode")
async def decode(request: DecodeRequest):
    try:
        elements = parse_ris_live_message(request.message)
    except EndOfRib:
        logger.info("End-of-RIB marker received")
        return {"elements": [], "end_of_rib": True}
    except TransportError as e:
        logger.warning("Malformed stream message: %s", e.reason)
        raise HTTPException(400, f"Malformed stream message: {e.reason}")
    except SemanticError as e:
        logger.warning("Rejected stream message: %s", e)
        raise HTTPException(422, {"kind": e.kind.value, "value": e.offending_value})
    return {"elements": [el.model_dump(mode="json", exclude_none=True) for el in elements], "end_of_rib": False}


@app.post("/api/decode/batch")
async def decode_batch(request: BatchDecodeRequest):
    """Decode many messages; a failing message is reported and skipped."""
    elements: list[dict] = []
    errors: list[dict] = []
    end_of_rib: list[int] = []

    for idx, message in enumerate(request.messages):
        try:
            decoded = parse_ris_live_message(message)
        except EndOfRib:
            end_of_rib.append(idx)
            continue
        except TransportError as e:
            errors.append({"index": idx, "error": "transport", "detail": e.reason})
            continue
        except SemanticError as e:
            errors.append({"index": idx, "error": "semantic", "kind": e.kind.value, "value": e.offending_value})
            continue
        elements.extend(el.model_dump(mode="json", exclude_none=True) for el in decoded)

    if errors:
        logger.warning("Batch decode: %d of %d messages failed", len(errors), len(request.messages))
    return {"elements": elements, "errors": errors, "end_of_rib": end_of_rib}


@app.post("/api/subscription")
async def subscription(request: SubscriptionRequest):
    try:
        subscribe = build_subscription(
            host=request.host,
            msg_type=request.type,
            require=request.require,
            peer=request.peer,
            prefix=request.prefix,
            path=request.path,
            more_specific=request.more_specific,
            less_specific=request.less_specific,
        )
    except ValueError as e:
        raise HTTPException(400, f"Invalid subscription filter: {e}")
    return {"message": to_message(subscribe)}


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": VERSION}
