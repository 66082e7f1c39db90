"""
droidscope/models/record.py
Shared dataclass schema. Parsers, detectors, aggregators and the store
all use these types. Data only, no logic.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

# One parsed `key=value` line, restricted to an entity allow-list.
RawRecord = Dict[str, Optional[str]]

# Category labels in priority order (first match wins).
FRAUD              = 'fraud'
CRIMINAL           = 'criminal'
CYBERBULLYING      = 'cyberbullying'
THREAT             = 'threat'
NEGATIVE_SENTIMENT = 'negative_sentiment'
NORMAL             = 'normal'

CATEGORIES = (FRAUD, CRIMINAL, CYBERBULLYING, THREAT, NEGATIVE_SENTIMENT, NORMAL)


@dataclass
class Message:
    """Normalized and classified SMS record."""
    address:         str
    date:            Optional[str]          # YYYY-MM-DD HH:MM:SS, local time
    direction:       Optional[str]          # sent / received
    body:            Optional[str]   = None
    is_suspicious:   bool            = False
    category:        str             = NORMAL
    sentiment_score: int             = 0
    sentiment_emoji: str             = ''
    contact_name:    Optional[str]   = None


@dataclass
class CallLogEntry:
    """Normalized call log record."""
    number:     str
    date:       Optional[str]
    direction:  Optional[str]               # incoming / outgoing / missed / unknown
    duration:   Optional[str]   = None      # e.g. "4m 32s"


@dataclass
class Contact:
    display_name: str
    number:       Optional[str] = None


@dataclass
class TimelineEntry:
    """Per-day activity counts."""
    date:                str                # YYYY-MM-DD
    total_messages:      int = 0
    suspicious_messages: int = 0
    total_calls:         int = 0
    incoming_calls:      int = 0
    outgoing_calls:      int = 0
    missed_calls:        int = 0

    # Populated only for the detailed timeline
    messages:  Optional[List[Message]]      = None
    call_logs: Optional[List[CallLogEntry]] = None


@dataclass
class CorrelationEntry:
    """Messages and call logs sharing one phone number."""
    number:    str
    sms_count: int
    messages:  List[Message]      = field(default_factory=list)
    call_logs: List[CallLogEntry] = field(default_factory=list)


@dataclass
class UrlFinding:
    """A message carrying one or more http(s) links."""
    sender:  str
    date:    Optional[str]
    body:    str
    urls:    List[str] = field(default_factory=list)
    is_spam: bool      = False


@dataclass
class ReportSnapshot:
    """Immutable short report saved on explicit submission."""
    case_number:  str
    remark:       str
    device_name:  str
    sms_stats:    Dict[str, int]
    call_stats:   Dict[str, int]
    total_contacts: int
    created_at:   str
    id:           Optional[int] = None


@dataclass
class ConnectionDetail:
    """Investigator/connector metadata recorded for a device session."""
    device_name:     str
    connector_id:    str
    investigator_id: str
    additional_info: Optional[str] = None
    created_at:      str           = ''
    id:              Optional[int] = None
