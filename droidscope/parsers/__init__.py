"""
droidscope/parsers — content-query text → typed records.
"""

from droidscope.parsers.content_parser import parse_entities, parse_records
from droidscope.parsers.normalizer import (
    normalize_call,
    normalize_contact,
    normalize_message,
)

__all__ = [
    "normalize_call",
    "normalize_contact",
    "normalize_message",
    "parse_entities",
    "parse_records",
]
