"""
droidscope/documents.py
Record dataclasses → JSON-serializable documents with the camelCase keys
used by the HTTP API and by JSON columns in the store.
"""

from typing import Any, Dict

from droidscope.models.record import (
    CallLogEntry,
    ConnectionDetail,
    Contact,
    CorrelationEntry,
    Message,
    ReportSnapshot,
    TimelineEntry,
    UrlFinding,
)


def message_document(m: Message) -> Dict[str, Any]:
    return {
        "address":        m.address,
        "date":           m.date,
        "direction":      m.direction,
        "body":           m.body,
        "isSuspicious":   m.is_suspicious,
        "category":       m.category,
        "sentimentScore": m.sentiment_score,
        "sentimentEmoji": m.sentiment_emoji,
        "contactName":    m.contact_name,
    }


def call_document(c: CallLogEntry) -> Dict[str, Any]:
    return {
        "number":    c.number,
        "date":      c.date,
        "direction": c.direction,
        "duration":  c.duration,
    }


def contact_document(c: Contact) -> Dict[str, Any]:
    return {"display_name": c.display_name, "number": c.number}


def timeline_document(e: TimelineEntry) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "date":               e.date,
        "totalMessages":      e.total_messages,
        "suspiciousMessages": e.suspicious_messages,
        "totalCalls":         e.total_calls,
        "incomingCalls":      e.incoming_calls,
        "outgoingCalls":      e.outgoing_calls,
        "missedCalls":        e.missed_calls,
    }
    if e.messages is not None:
        doc["messages"] = [message_document(m) for m in e.messages]
    if e.call_logs is not None:
        doc["callLogs"] = [call_document(c) for c in e.call_logs]
    return doc


def correlation_document(e: CorrelationEntry, include_messages: bool = True) -> Dict[str, Any]:
    doc: Dict[str, Any] = {"number": e.number, "smsCount": e.sms_count}
    if include_messages:
        doc["messages"] = [message_document(m) for m in e.messages]
    doc["callLogs"] = [call_document(c) for c in e.call_logs]
    return doc


def url_document(f: UrlFinding) -> Dict[str, Any]:
    return {"sender": f.sender, "date": f.date, "body": f.body, "urls": list(f.urls)}


def report_document(r: ReportSnapshot) -> Dict[str, Any]:
    return {
        "id":            r.id,
        "caseNumber":    r.case_number,
        "remark":        r.remark,
        "deviceName":    r.device_name,
        "smsStats":      dict(r.sms_stats),
        "callStats":     dict(r.call_stats),
        "totalContacts": r.total_contacts,
        "createdAt":     r.created_at,
    }


def connection_document(d: ConnectionDetail) -> Dict[str, Any]:
    return {
        "id":             d.id,
        "deviceName":     d.device_name,
        "connectorId":    d.connector_id,
        "additionalInfo": d.additional_info,
        "investigatorId": d.investigator_id,
        "createdAt":      d.created_at,
    }
