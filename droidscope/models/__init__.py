"""
droidscope/models — record dataclasses shared across the pipeline.
"""

from droidscope.models.record import (
    CATEGORIES,
    CallLogEntry,
    ConnectionDetail,
    Contact,
    CorrelationEntry,
    Message,
    RawRecord,
    ReportSnapshot,
    TimelineEntry,
    UrlFinding,
)

__all__ = [
    "CATEGORIES",
    "CallLogEntry",
    "ConnectionDetail",
    "Contact",
    "CorrelationEntry",
    "Message",
    "RawRecord",
    "ReportSnapshot",
    "TimelineEntry",
    "UrlFinding",
]
