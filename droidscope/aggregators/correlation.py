"""
droidscope/aggregators/correlation.py
SMS ↔ call-log correlation by phone number.

NOTE ON MATCHING:
  Message.address and CallLogEntry.number are compared as exact strings.
  '+15550001' and '5550001' are different numbers here; a formatting
  mismatch yields zero correlated calls for that group.

Call-log lookups for each number run concurrently. A failed lookup is
logged and that number gets an empty call list; the others continue.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Tuple

from droidscope.models.record import CallLogEntry, CorrelationEntry, Message

logger = logging.getLogger(__name__)

CallLookup = Callable[[str], List[CallLogEntry]]


def group_messages_by_number(messages: List[Message]) -> List[Tuple[str, List[Message]]]:
    """
    (number, messages) per distinct address, largest group first.
    Ties keep first-seen order. Messages without an address are dropped.
    """
    groups: Dict[str, List[Message]] = {}
    for msg in messages:
        if not msg.address:
            continue
        groups.setdefault(msg.address, []).append(msg)
    # sorted() is stable, so dict insertion order breaks ties
    return sorted(groups.items(), key=lambda item: len(item[1]), reverse=True)


async def _lookup_isolated(number: str, lookup: CallLookup) -> List[CallLogEntry]:
    try:
        return await asyncio.to_thread(lookup, number)
    except Exception as e:
        logger.warning(f"Error fetching call logs for number {number}: {e}")
        return []


async def correlate(
    messages: List[Message],
    lookup:   CallLookup,
    limit:    Optional[int] = None,
) -> List[CorrelationEntry]:
    """
    Build one CorrelationEntry per distinct message address, sorted by
    sms_count descending. `lookup(number)` returns that number's call logs
    and may be blocking; it runs in a worker thread.
    `limit` keeps only the top-N numbers.
    """
    groups = group_messages_by_number(messages)
    if limit is not None:
        groups = groups[:limit]

    call_lists = await asyncio.gather(
        *(_lookup_isolated(number, lookup) for number, _ in groups)
    )

    results = [
        CorrelationEntry(
            number    = number,
            sms_count = len(msgs),
            messages  = msgs,
            call_logs = list(calls),
        )
        for (number, msgs), calls in zip(groups, call_lists)
    ]
    logger.info(
        f"Correlation complete: {len(results)} number(s), "
        f"{sum(1 for r in results if r.call_logs)} with call activity"
    )
    return results
