"""
droidscope/parsers/content_parser.py
Parses `adb shell content query` output into raw field mappings.

Each row arrives as one line:
    Row: 0 _id=12, address=+15550001, date=1704067200000, type=1, body=hi there

FIX v1.1: values now run until the next ", <key>=" boundary instead of the
          first comma. Bodies such as "ok, see you at 5" were previously cut
          to "ok" and classified on the fragment.
"""

import logging
import re
from typing import Iterable, Iterator, Optional

from droidscope.models.record import RawRecord

logger = logging.getLogger(__name__)

NULL_SENTINEL = 'NULL'

# value = everything up to the next ",<spaces>key=" or end of line
FIELD_PATTERN = re.compile(r'(\w+)=(.*?)(?=,\s*\w+=|$)')

SMS_FIELDS      = ('address', 'date', 'type', 'body')
CALL_LOG_FIELDS = ('number', 'date', 'duration', 'type')
CONTACT_FIELDS  = ('display_name', 'number')

ENTITY_FIELDS = {
    'sms':      SMS_FIELDS,
    'call_log': CALL_LOG_FIELDS,
    'contact':  CONTACT_FIELDS,
}

# A row without this field is not a usable record of its entity
IDENTIFYING_FIELD = {
    'sms':      'address',
    'call_log': 'number',
    'contact':  'display_name',
}


def parse_line(line: str, fields: Iterable[str]) -> RawRecord:
    """
    Extract allow-listed `key=value` pairs from a single line.
    'NULL' and empty values become None. A line with no pairs gives {}.
    """
    allowed = set(fields)
    record: RawRecord = {}
    for match in FIELD_PATTERN.finditer(line):
        key, value = match.group(1), match.group(2).strip()
        if key in allowed:
            record[key] = _null_to_none(value)
    return record


def parse_records(text: str, fields: Iterable[str]) -> Iterator[RawRecord]:
    """Lazily yield one mapping per non-blank line of `text`."""
    fields = tuple(fields)
    for line in (text or '').splitlines():
        if not line.strip():
            continue
        yield parse_line(line, fields)


def parse_entities(text: str, kind: str) -> Iterator[RawRecord]:
    """
    parse_records() with the allow-list for `kind` ('sms', 'call_log',
    'contact'), dropping rows that lack the identifying field.
    """
    try:
        fields = ENTITY_FIELDS[kind]
        key    = IDENTIFYING_FIELD[kind]
    except KeyError:
        raise ValueError(f"Unknown entity kind: {kind}")

    skipped = 0
    for record in parse_records(text, fields):
        if not record.get(key):
            skipped += 1
            continue
        yield record
    if skipped:
        logger.debug(f"Skipped {skipped} {kind} row(s) without {key}")


def _null_to_none(value: str) -> Optional[str]:
    if not value or value == NULL_SENTINEL:
        return None
    return value
