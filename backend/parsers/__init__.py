"""Parsers for RIS-Live stream messages."""

from .ris_live import parse_ris_live_message

__all__ = ["parse_ris_live_message"]
