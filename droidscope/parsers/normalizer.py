"""
droidscope/parsers/normalizer.py
Converts raw content-query fields into canonical record values.
Pure functions, no I/O.
"""

import logging
from datetime import datetime
from typing import Optional

from droidscope.models.record import CallLogEntry, Contact, Message, RawRecord

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

MESSAGE_DIRECTION_RECEIVED = 'received'
MESSAGE_DIRECTION_SENT     = 'sent'

CALL_DIRECTION = {
    '1': 'incoming',
    '2': 'outgoing',
    '3': 'missed',
}
CALL_DIRECTION_UNKNOWN = 'unknown'


def format_timestamp(raw: Optional[str]) -> Optional[str]:
    """Epoch milliseconds → 'YYYY-MM-DD HH:MM:SS' in local time."""
    if raw is None:
        return None
    try:
        return datetime.fromtimestamp(int(raw, 10) / 1000).strftime(DATE_FORMAT)
    except (ValueError, OSError, OverflowError):
        logger.debug(f"Unparseable timestamp: {raw!r}")
        return None


def message_direction(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    return MESSAGE_DIRECTION_RECEIVED if raw == '1' else MESSAGE_DIRECTION_SENT


def call_direction(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    return CALL_DIRECTION.get(raw, CALL_DIRECTION_UNKNOWN)


def format_duration(seconds: int) -> str:
    """125 → '2m 5s'. Lossy: the seconds value is not kept anywhere else."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"


def _duration(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    try:
        return format_duration(int(raw, 10))
    except ValueError:
        logger.debug(f"Unparseable duration: {raw!r}")
        return None


def normalize_message(raw: RawRecord) -> Message:
    return Message(
        address   = raw['address'],
        date      = format_timestamp(raw.get('date')),
        direction = message_direction(raw.get('type')),
        body      = raw.get('body'),
    )


def normalize_call(raw: RawRecord) -> CallLogEntry:
    return CallLogEntry(
        number    = raw['number'],
        date      = format_timestamp(raw.get('date')),
        direction = call_direction(raw.get('type')),
        duration  = _duration(raw.get('duration')),
    )


def normalize_contact(raw: RawRecord) -> Contact:
    return Contact(
        display_name = raw['display_name'],
        number       = raw.get('number'),
    )
