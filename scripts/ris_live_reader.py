#!/usr/bin/env python3
"""
Replay reader: decode captured RIS-Live stream text into routing elements.

Reads one stream message per line from FILE (or stdin) and prints one line
per routing element. Malformed messages are logged and skipped.

Usage:
  python3 scripts/ris_live_reader.py capture.jsonl --update-type a --json
  python3 scripts/ris_live_reader.py --config etc/reader.yml --subscription
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))
from errors import EndOfRib, SemanticError, TransportError
from models import ElemType, RoutingElement
from parsers import parse_ris_live_message
from settings import ReaderSettings, load_settings
from subscription import to_message

logger = logging.getLogger("ris_live_reader")

UPDATE_TYPES = {"a": ElemType.ANNOUNCE, "w": ElemType.WITHDRAW}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Decode captured RIS-Live stream messages.")
    parser.add_argument("file", nargs="?", help="newline-delimited capture (default: stdin)")
    parser.add_argument("--config", help="YAML reader settings")
    parser.add_argument("--update-type", choices=sorted(UPDATE_TYPES),
                        help="only announcements (a) or withdrawals (w)")
    parser.add_argument("--asn", type=int,
                        help="only announcements whose AS path contains this ASN")
    parser.add_argument("--json", action="store_true", help="output JSON objects")
    parser.add_argument("--pretty", action="store_true", help="pretty-print JSON output")
    parser.add_argument("--raw", action="store_true", help="echo messages without decoding")
    parser.add_argument("--subscription", action="store_true",
                        help="print the subscription message for the configured filter and exit")
    return parser


def format_element(elem: RoutingElement, as_json: bool = False, pretty: bool = False) -> str:
    if not as_json:
        return elem.to_line()
    payload = elem.model_dump(mode="json", exclude_none=True)
    return json.dumps(payload, indent=2 if pretty else None)


def decode_stream(lines: Iterable[str], update_type: Optional[ElemType] = None, asn: Optional[int] = None):
    """Yield elements from every decodable line, logging and skipping the rest."""
    for lineno, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue
        try:
            elements = parse_ris_live_message(line)
        except EndOfRib:
            logger.info("line %d: end of RIB", lineno)
            continue
        except (TransportError, SemanticError) as e:
            logger.warning("line %d: %s", lineno, e)
            continue
        for elem in elements:
            if update_type is not None and elem.elem_type is not update_type:
                continue
            if asn is not None and (elem.as_path is None or not elem.as_path.contains(asn)):
                continue
            yield elem


def run(args: argparse.Namespace, out: TextIO = sys.stdout) -> int:
    settings = load_settings(args.config) if args.config else ReaderSettings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    if args.subscription:
        print(to_message(settings.subscription()), file=out)
        return 0

    source = open(args.file) if args.file else sys.stdin
    try:
        if args.raw:
            for line in source:
                if line.strip():
                    print(line.rstrip("\n"), file=out)
            return 0

        update_type = UPDATE_TYPES.get(args.update_type) if args.update_type else None
        for elem in decode_stream(source, update_type, args.asn):
            print(format_element(elem, args.json, args.pretty), file=out)
    finally:
        if source is not sys.stdin:
            source.close()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
