"""
droidscope/aggregators/timeline.py
Day-bucketed activity timeline over messages and call logs.

A day appears when it has at least one message OR one call inside the
analysis window. Missing counts on either side default to zero.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Optional

from droidscope.models.record import CallLogEntry, Message, TimelineEntry
from droidscope.parsers.normalizer import DATE_FORMAT

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_START = datetime(2024, 1, 1, 0, 0, 0)


def parse_record_date(value: Optional[str]) -> Optional[datetime]:
    """Normalized 'YYYY-MM-DD HH:MM:SS' back to a datetime. None if unusable."""
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return None


def build_timeline(
    messages:     List[Message],
    calls:        List[CallLogEntry],
    start:        datetime           = DEFAULT_WINDOW_START,
    end:          Optional[datetime] = None,
    with_details: bool               = False,
) -> List[TimelineEntry]:
    """
    One TimelineEntry per calendar day present in either input within
    [start, end], ascending by date. `end` defaults to now.
    with_details attaches that day's raw records to each entry.
    """
    end = end or datetime.now()

    day_messages: Dict[date, List[Message]]      = defaultdict(list)
    day_calls:    Dict[date, List[CallLogEntry]] = defaultdict(list)
    skipped = 0

    for msg in messages:
        ts = parse_record_date(msg.date)
        if ts is None or not (start <= ts <= end):
            skipped += 1
            continue
        day_messages[ts.date()].append(msg)

    for call in calls:
        ts = parse_record_date(call.date)
        if ts is None or not (start <= ts <= end):
            skipped += 1
            continue
        day_calls[ts.date()].append(call)

    if skipped:
        logger.debug(f"Timeline: {skipped} record(s) outside window or undated")

    timeline: List[TimelineEntry] = []
    for day in sorted(set(day_messages) | set(day_calls)):
        msgs  = day_messages.get(day, [])
        calls_ = day_calls.get(day, [])
        entry = TimelineEntry(
            date                = day.isoformat(),
            total_messages      = len(msgs),
            suspicious_messages = sum(1 for m in msgs if m.is_suspicious),
            total_calls         = len(calls_),
            incoming_calls      = sum(1 for c in calls_ if c.direction == 'incoming'),
            outgoing_calls      = sum(1 for c in calls_ if c.direction == 'outgoing'),
            missed_calls        = sum(1 for c in calls_ if c.direction == 'missed'),
        )
        if with_details:
            entry.messages  = list(msgs)
            entry.call_logs = list(calls_)
        timeline.append(entry)

    logger.info(f"Timeline built: {len(timeline)} day(s)")
    return timeline
