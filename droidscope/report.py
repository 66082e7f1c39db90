"""
droidscope/report.py
Long-form and short-form device reports.

build_comprehensive_report / build_short_report are read-only: they never
write to the store. submit_short_report recomputes the short report and
persists it as an immutable ReportSnapshot.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from droidscope.aggregators.correlation import correlate
from droidscope.aggregators.timeline import DEFAULT_WINDOW_START, build_timeline
from droidscope.detectors.url_detector import has_link
from droidscope.documents import (
    call_document,
    contact_document,
    correlation_document,
    message_document,
    timeline_document,
)
from droidscope.errors import require
from droidscope.models.record import ReportSnapshot
from droidscope.store.sqlite_store import DeviceStore

logger = logging.getLogger(__name__)

CORRELATION_REPORT_LIMIT = 10


def _generated_at() -> str:
    return datetime.now().isoformat(timespec='seconds')


async def build_comprehensive_report(
    store:          DeviceStore,
    device_name:    str,
    timeline_start: datetime = DEFAULT_WINDOW_START,
    limit:          int      = CORRELATION_REPORT_LIMIT,
) -> Dict[str, Any]:
    """
    Everything known about one device in a single document:
    records (newest first), summary counts, the detailed timeline,
    messages carrying links, and call activity for the top `limit`
    numbers by message count.
    """
    messages   = await asyncio.to_thread(store.messages, True)
    calls      = await asyncio.to_thread(store.call_logs, None, True)
    contacts   = await asyncio.to_thread(store.contacts)
    sms_stats  = await asyncio.to_thread(store.message_stats)
    call_stats = await asyncio.to_thread(store.call_stats)

    timeline = build_timeline(messages, calls, start=timeline_start, with_details=True)
    correlations = await correlate(
        messages, lambda number: store.call_logs(number=number), limit=limit,
    )

    logger.info(
        f"[{device_name}] comprehensive report: {len(messages)} SMS, "
        f"{len(calls)} calls, {len(timeline)} timeline day(s)"
    )
    return {
        "deviceName":             device_name,
        "smsData":                [message_document(m) for m in messages],
        "callLogs":               [call_document(c) for c in calls],
        "contacts":               [contact_document(c) for c in contacts],
        "smsStats":               sms_stats,
        "callStats":              call_stats,
        "timelineAnalysis":       [timeline_document(e) for e in timeline],
        "smsWithUrls":            [message_document(m) for m in messages if has_link(m.body)],
        "dataCorrelationResults": [
            correlation_document(e, include_messages=False) for e in correlations
        ],
        "generatedAt":            _generated_at(),
    }


def build_short_report(store: DeviceStore, device_name: str) -> Dict[str, Any]:
    return {
        "deviceName":    device_name,
        "smsStats":      store.message_stats(),
        "callStats":     store.call_stats(),
        "totalContacts": store.contact_count(),
        "generatedAt":   _generated_at(),
    }


def submit_short_report(
    store:       DeviceStore,
    device_name: str,
    case_number: Optional[Union[str, int]],
    remark:      Optional[Union[str, int]],
) -> ReportSnapshot:
    """
    Validate, recompute the short report, and persist it.
    Raises ValidationError naming the missing field (caseNumber first).
    """
    case_number = require("caseNumber", case_number)
    remark      = require("remark", remark)

    short = build_short_report(store, device_name)
    snapshot = ReportSnapshot(
        case_number    = case_number,
        remark         = remark,
        device_name    = device_name,
        sms_stats      = short["smsStats"],
        call_stats     = short["callStats"],
        total_contacts = short["totalContacts"],
        created_at     = short["generatedAt"],
    )
    return store.insert_report(snapshot)


def list_reports(store: DeviceStore) -> List[ReportSnapshot]:
    """Persisted snapshots, oldest first."""
    return store.reports()
