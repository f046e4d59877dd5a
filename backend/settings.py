"""
Reader Settings: load stream reader configuration from YAML.

Expected layout (every key optional):

  reader:
    client: ris-live-reader
    url: ws://ris-live.ripe.net/v1/ws/
    log_level: INFO
  subscription:
    host: rrc21          # "all" for the firehose
    type: UPDATE
    require: null
    peer: null
    prefix: null
    path: null
    more_specific: true
    less_specific: false
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

from models import RisSubscribe
from subscription import build_subscription

logger = logging.getLogger(__name__)

DEFAULT_URL = "ws://ris-live.ripe.net/v1/ws/"
DEFAULT_CLIENT = "ris-live-reader"
DEFAULT_HOST = "rrc21"


@dataclass
class SubscriptionSettings:
    host: str = DEFAULT_HOST
    type: Optional[str] = None
    require: Optional[str] = None
    peer: Optional[str] = None
    prefix: Optional[str] = None
    path: Optional[str] = None
    more_specific: bool = True
    less_specific: bool = False


@dataclass
class ReaderSettings:
    client: str = DEFAULT_CLIENT
    url: str = DEFAULT_URL
    log_level: str = "INFO"
    subscription_filter: SubscriptionSettings = field(default_factory=SubscriptionSettings)

    def stream_url(self) -> str:
        return f"{self.url}?client={self.client}"

    def subscription(self) -> RisSubscribe:
        f = self.subscription_filter
        return build_subscription(
            host=f.host,
            msg_type=f.type,
            require=f.require,
            peer=f.peer,
            prefix=f.prefix,
            path=f.path,
            more_specific=f.more_specific,
            less_specific=f.less_specific,
        )


def _section(raw: dict, name: str) -> dict:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' section must be a mapping")
    return section


def load_settings(path: str | Path) -> ReaderSettings:
    """Parse a YAML settings file. Missing keys fall back to defaults."""
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        return ReaderSettings()
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: settings must be a YAML mapping")

    reader = _section(raw, "reader")
    sub = _section(raw, "subscription")

    known = {f.name for f in fields(SubscriptionSettings)}
    unknown = set(sub) - known
    if unknown:
        logger.warning("%s: ignoring unknown subscription keys %s", path, sorted(unknown))

    settings = ReaderSettings(
        client=str(reader.get("client") or DEFAULT_CLIENT),
        url=str(reader.get("url") or DEFAULT_URL),
        log_level=str(reader.get("log_level") or "INFO").upper(),
        subscription_filter=SubscriptionSettings(**{k: v for k, v in sub.items() if k in known}),
    )
    logger.debug("Loaded settings from %s", path)
    return settings
