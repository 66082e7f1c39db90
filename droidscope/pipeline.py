"""
droidscope/pipeline.py
Device → parser → normalizer → classifier → store.

Each ingest_* call re-reads one entity set from the device and replaces
the stored set wholesale, so running it twice against an unchanged device
leaves the store unchanged. The analysis stages read the persisted
records only, never the device.

All functions take an explicit DeviceStore for the active device
namespace. Store calls are blocking SQLite and run in worker threads.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Sequence, Tuple, Union

from droidscope.aggregators.correlation import correlate
from droidscope.aggregators.timeline import DEFAULT_WINDOW_START, build_timeline
from droidscope.detectors.risk_classifier import classify
from droidscope.detectors.url_detector import analyze_urls
from droidscope.device.adb import (
    CALL_LOG_URI,
    CONTACTS_URI,
    SMS_INBOX_URI,
    SMS_SENT_URI,
    get_device_name,
    query_content,
)
from droidscope.device.base import DeviceShell
from droidscope.errors import require
from droidscope.models.record import (
    CallLogEntry,
    ConnectionDetail,
    Contact,
    CorrelationEntry,
    Message,
    TimelineEntry,
    UrlFinding,
)
from droidscope.parsers.content_parser import parse_entities
from droidscope.parsers.normalizer import normalize_call, normalize_contact, normalize_message
from droidscope.store.sqlite_store import DeviceStore, open_store

logger = logging.getLogger(__name__)


async def open_device_store(shell: DeviceShell, data_dir: Path) -> DeviceStore:
    """Namespace for whichever device is connected right now."""
    device_name = await get_device_name(shell)
    return await asyncio.to_thread(open_store, data_dir, device_name)


# ── INGESTION ────────────────────────────────────────────────

def enrich_message(message: Message, contact_names: Dict[str, str]) -> Message:
    """Classification + contact-name join. Mutates and returns `message`."""
    result = classify(message.body or '')
    message.is_suspicious   = result.is_suspicious
    message.category        = result.category
    message.sentiment_score = result.sentiment_score
    message.sentiment_emoji = result.sentiment_emoji
    message.contact_name    = contact_names.get(message.address)
    return message


async def ingest_sms(shell: DeviceShell, store: DeviceStore) -> List[Message]:
    inbox = await query_content(shell, SMS_INBOX_URI)
    sent  = await query_content(shell, SMS_SENT_URI)

    raw = list(parse_entities(inbox, 'sms')) + list(parse_entities(sent, 'sms'))
    names = await asyncio.to_thread(store.contact_names)
    messages = [enrich_message(normalize_message(r), names) for r in raw]

    flagged = sum(1 for m in messages if m.is_suspicious)
    logger.info(f"Parsed {len(messages)} SMS ({flagged} suspicious)")

    await asyncio.to_thread(store.replace_messages, messages)
    return messages


async def ingest_call_log(shell: DeviceShell, store: DeviceStore) -> List[CallLogEntry]:
    text  = await query_content(shell, CALL_LOG_URI)
    calls = [normalize_call(r) for r in parse_entities(text, 'call_log')]
    logger.info(f"Parsed {len(calls)} call log entries")
    await asyncio.to_thread(store.replace_call_logs, calls)
    return calls


async def ingest_contacts(shell: DeviceShell, store: DeviceStore) -> List[Contact]:
    text     = await query_content(shell, CONTACTS_URI)
    contacts = [normalize_contact(r) for r in parse_entities(text, 'contact')]
    logger.info(f"Parsed {len(contacts)} contacts")
    await asyncio.to_thread(store.replace_contacts, contacts)
    return contacts


# ── ANALYSIS (reads persisted records) ───────────────────────

async def analyze_timeline(
    store: DeviceStore,
    start: datetime           = DEFAULT_WINDOW_START,
    end:   Optional[datetime] = None,
) -> List[TimelineEntry]:
    messages = await asyncio.to_thread(store.messages)
    calls    = await asyncio.to_thread(store.call_logs)
    timeline = build_timeline(messages, calls, start=start, end=end)
    await asyncio.to_thread(store.replace_timeline, timeline)
    return timeline


async def analyze_links(
    store:         DeviceStore,
    spam_patterns: Optional[Sequence[Pattern]] = None,
) -> Tuple[List[UrlFinding], List[UrlFinding]]:
    """(spam, non_spam). Only the spam findings are persisted."""
    messages = await asyncio.to_thread(store.messages)
    spam, non_spam = analyze_urls(messages, spam_patterns)
    await asyncio.to_thread(store.replace_spam_findings, spam)
    return spam, non_spam


async def analyze_correlation(
    store: DeviceStore,
    limit: Optional[int] = None,
) -> List[CorrelationEntry]:
    messages = await asyncio.to_thread(store.messages)
    entries  = await correlate(messages, lambda number: store.call_logs(number=number), limit=limit)
    await asyncio.to_thread(store.replace_correlations, entries)
    return entries


# ── CASE METADATA ────────────────────────────────────────────

def record_connection_detail(
    store:           DeviceStore,
    device_name:     Optional[Union[str, int]],
    connector_id:    Optional[Union[str, int]],
    investigator_id: Optional[Union[str, int]],
    additional_info: Optional[Union[str, int]] = None,
) -> ConnectionDetail:
    """
    Append who connected the device and on whose behalf.
    Raises ValidationError naming the first missing required field.
    """
    connector_id    = require("connectorId", connector_id)
    investigator_id = require("investigatorId", investigator_id)

    detail = ConnectionDetail(
        device_name     = str(device_name or store.device_name),
        connector_id    = connector_id,
        investigator_id = investigator_id,
        additional_info = None if additional_info is None else str(additional_info),
    )
    return store.insert_connection_detail(detail)
