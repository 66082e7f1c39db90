"""
droidscope/store/sqlite_store.py
Per-device document store on SQLite.

NAMESPACE DESIGN NOTES:
- One database file per device: <data_dir>/<sanitized device name>.db
- No cross-device queries. Switching devices means opening another store.
- messages / call_logs / contacts are owned by the ingestion pipeline and
  are only ever replaced wholesale (delete-all then insert-all, one
  transaction).
- timeline_analysis / spam_url_analysis / data_correlation hold the last
  computed analysis and are replaced the same way.
- reports and connection_details are append-only.
- Every operation opens a short-lived connection, so a store handle may be
  used from worker threads.
"""

import json
import logging
import re
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from droidscope.documents import call_document, message_document
from droidscope.errors import StoreConnectionError, StoreError
from droidscope.models.record import (
    CallLogEntry,
    ConnectionDetail,
    Contact,
    CorrelationEntry,
    CRIMINAL,
    CYBERBULLYING,
    FRAUD,
    Message,
    NEGATIVE_SENTIMENT,
    ReportSnapshot,
    THREAT,
    TimelineEntry,
    UrlFinding,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = '1.0'

MESSAGE_CATEGORY_COUNTS = (FRAUD, CRIMINAL, CYBERBULLYING, THREAT, NEGATIVE_SENTIMENT)


class DeviceStore:
    """
    Handle on one device namespace. Pass it explicitly to every stage
    that reads or writes device data.

    Usage:
        store = open_store(Path("data"), "Pixel_7")
        store.replace_contacts(contacts)
        names = store.contact_names()
    """

    def __init__(self, db_path: Path, device_name: str):
        self.db_path     = Path(db_path)
        self.device_name = device_name

    # ── INTERNAL ──────────────────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.create_function("REGEXP", 2, _regexp, deterministic=True)
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open store {self.db_path}: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Store operation failed on {self.db_path.name}: {e}")
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def create_schema(self) -> None:
        with self._session() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS store_meta (
                    id              INTEGER PRIMARY KEY AUTOINCREMENT,
                    created_at      TEXT    NOT NULL,
                    device_name     TEXT    NOT NULL,
                    schema_version  TEXT    NOT NULL
                );

                CREATE TABLE IF NOT EXISTS messages (
                    id              INTEGER PRIMARY KEY AUTOINCREMENT,
                    address         TEXT    NOT NULL,
                    date            TEXT,
                    direction       TEXT,
                    body            TEXT,
                    is_suspicious   INTEGER DEFAULT 0,
                    category        TEXT,
                    sentiment_score INTEGER DEFAULT 0,
                    sentiment_emoji TEXT,
                    contact_name    TEXT,
                    created_at      TEXT
                );

                CREATE TABLE IF NOT EXISTS call_logs (
                    id              INTEGER PRIMARY KEY AUTOINCREMENT,
                    number          TEXT    NOT NULL,
                    date            TEXT,
                    direction       TEXT,
                    duration        TEXT,
                    created_at      TEXT
                );

                CREATE TABLE IF NOT EXISTS contacts (
                    id              INTEGER PRIMARY KEY AUTOINCREMENT,
                    display_name    TEXT    NOT NULL,
                    number          TEXT,
                    created_at      TEXT
                );

                CREATE TABLE IF NOT EXISTS timeline_analysis (
                    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
                    date                TEXT    NOT NULL,
                    total_messages      INTEGER DEFAULT 0,
                    suspicious_messages INTEGER DEFAULT 0,
                    total_calls         INTEGER DEFAULT 0,
                    incoming_calls      INTEGER DEFAULT 0,
                    outgoing_calls      INTEGER DEFAULT 0,
                    missed_calls        INTEGER DEFAULT 0,
                    created_at          TEXT
                );

                CREATE TABLE IF NOT EXISTS spam_url_analysis (
                    id              INTEGER PRIMARY KEY AUTOINCREMENT,
                    sender          TEXT    NOT NULL,
                    date            TEXT,
                    body            TEXT    NOT NULL,
                    urls            TEXT,    -- JSON array
                    created_at      TEXT
                );

                CREATE TABLE IF NOT EXISTS data_correlation (
                    id              INTEGER PRIMARY KEY AUTOINCREMENT,
                    number          TEXT    NOT NULL,
                    sms_count       INTEGER NOT NULL,
                    messages        TEXT,    -- JSON array
                    call_logs       TEXT,    -- JSON array
                    created_at      TEXT
                );

                CREATE TABLE IF NOT EXISTS reports (
                    id              INTEGER PRIMARY KEY AUTOINCREMENT,
                    case_number     TEXT    NOT NULL,
                    remark          TEXT    NOT NULL,
                    device_name     TEXT    NOT NULL,
                    sms_stats       TEXT,    -- JSON object
                    call_stats      TEXT,    -- JSON object
                    total_contacts  INTEGER DEFAULT 0,
                    created_at      TEXT    NOT NULL
                );

                CREATE TABLE IF NOT EXISTS connection_details (
                    id              INTEGER PRIMARY KEY AUTOINCREMENT,
                    device_name     TEXT    NOT NULL,
                    connector_id    TEXT    NOT NULL,
                    additional_info TEXT,
                    investigator_id TEXT    NOT NULL,
                    created_at      TEXT    NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_msg_address ON messages(address);
                CREATE INDEX IF NOT EXISTS idx_msg_date    ON messages(date);
                CREATE INDEX IF NOT EXISTS idx_call_number ON call_logs(number);
                CREATE INDEX IF NOT EXISTS idx_call_date   ON call_logs(date);
            """)
            if conn.execute("SELECT COUNT(*) FROM store_meta").fetchone()[0] == 0:
                conn.execute(
                    "INSERT INTO store_meta (created_at, device_name, schema_version) VALUES (?,?,?)",
                    (_now(), self.device_name, SCHEMA_VERSION),
                )

    # ── INGESTION: MESSAGES / CALL LOGS / CONTACTS ────────────────────────

    def replace_messages(self, messages: List[Message]) -> int:
        created = _now()
        rows = [
            (
                m.address, m.date, m.direction, m.body, int(m.is_suspicious),
                m.category, m.sentiment_score, m.sentiment_emoji, m.contact_name,
                created,
            )
            for m in messages
        ]
        with self._session() as conn:
            conn.execute("DELETE FROM messages")
            conn.executemany("""
                INSERT INTO messages
                (address, date, direction, body, is_suspicious, category,
                 sentiment_score, sentiment_emoji, contact_name, created_at)
                VALUES (?,?,?,?,?,?,?,?,?,?)
            """, rows)
        logger.info(f"[{self.device_name}] replaced messages: {len(rows)} rows")
        return len(rows)

    def replace_call_logs(self, calls: List[CallLogEntry]) -> int:
        created = _now()
        rows = [(c.number, c.date, c.direction, c.duration, created) for c in calls]
        with self._session() as conn:
            conn.execute("DELETE FROM call_logs")
            conn.executemany("""
                INSERT INTO call_logs (number, date, direction, duration, created_at)
                VALUES (?,?,?,?,?)
            """, rows)
        logger.info(f"[{self.device_name}] replaced call logs: {len(rows)} rows")
        return len(rows)

    def replace_contacts(self, contacts: List[Contact]) -> int:
        created = _now()
        rows = [(c.display_name, c.number, created) for c in contacts]
        with self._session() as conn:
            conn.execute("DELETE FROM contacts")
            conn.executemany(
                "INSERT INTO contacts (display_name, number, created_at) VALUES (?,?,?)",
                rows,
            )
        logger.info(f"[{self.device_name}] replaced contacts: {len(rows)} rows")
        return len(rows)

    # ── QUERY: RECORDS ────────────────────────────────────────────────────

    def messages(self, newest_first: bool = False) -> List[Message]:
        order = "date DESC, id DESC" if newest_first else "id"
        with self._session() as conn:
            rows = conn.execute(f"SELECT * FROM messages ORDER BY {order}").fetchall()
        return [_row_to_message(r) for r in rows]

    def call_logs(self, number: Optional[str] = None, newest_first: bool = False) -> List[CallLogEntry]:
        sql    = "SELECT * FROM call_logs"
        params: list = []
        if number is not None:
            sql += " WHERE number = ?"
            params.append(number)
        sql += " ORDER BY date DESC, id DESC" if newest_first else " ORDER BY id"
        with self._session() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_call(r) for r in rows]

    def contacts(self) -> List[Contact]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM contacts ORDER BY id").fetchall()
        return [_row_to_contact(r) for r in rows]

    def contact_names(self) -> Dict[str, str]:
        """number → display_name. Later rows win on duplicate numbers."""
        return {c.number: c.display_name for c in self.contacts() if c.number}

    def search(self, pattern: str) -> Dict[str, list]:
        """
        Case-insensitive regex search. `pattern` must be a valid Python
        regular expression; callers escape plain keywords.
        """
        regex = f"(?i){pattern}"
        with self._session() as conn:
            sms = conn.execute(
                "SELECT * FROM messages WHERE body REGEXP ? OR address REGEXP ? ORDER BY id",
                (regex, regex),
            ).fetchall()
            calls = conn.execute(
                "SELECT * FROM call_logs WHERE number REGEXP ? ORDER BY id",
                (regex,),
            ).fetchall()
            contacts = conn.execute(
                "SELECT * FROM contacts WHERE display_name REGEXP ? OR number REGEXP ? ORDER BY id",
                (regex, regex),
            ).fetchall()
        return {
            "sms":      [_row_to_message(r) for r in sms],
            "call_log": [_row_to_call(r) for r in calls],
            "contacts": [_row_to_contact(r) for r in contacts],
        }

    # ── QUERY: COUNTS ─────────────────────────────────────────────────────

    def sms_counts_by_address(self) -> List[Dict[str, object]]:
        with self._session() as conn:
            rows = conn.execute("""
                SELECT address, COUNT(*) AS total
                FROM messages
                GROUP BY address
                ORDER BY total DESC, MIN(id)
            """).fetchall()
        return [{"address": r["address"], "totalMessages": r["total"]} for r in rows]

    def message_stats(self) -> Dict[str, int]:
        category_sums = ", ".join(
            f"COALESCE(SUM(CASE WHEN category = '{c}' THEN 1 ELSE 0 END), 0) AS {c}"
            for c in MESSAGE_CATEGORY_COUNTS
        )
        with self._session() as conn:
            row = conn.execute(f"""
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(is_suspicious), 0) AS suspicious,
                       {category_sums}
                FROM messages
            """).fetchone()
        stats = {"totalMessages": row["total"], "suspiciousMessages": row["suspicious"]}
        for c in MESSAGE_CATEGORY_COUNTS:
            stats[c] = row[c]
        return stats

    def call_stats(self) -> Dict[str, int]:
        with self._session() as conn:
            row = conn.execute("""
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(CASE WHEN direction = 'incoming' THEN 1 ELSE 0 END), 0) AS incoming,
                       COALESCE(SUM(CASE WHEN direction = 'outgoing' THEN 1 ELSE 0 END), 0) AS outgoing,
                       COALESCE(SUM(CASE WHEN direction = 'missed'   THEN 1 ELSE 0 END), 0) AS missed
                FROM call_logs
            """).fetchone()
        return {
            "totalCalls":    row["total"],
            "incomingCalls": row["incoming"],
            "outgoingCalls": row["outgoing"],
            "missedCalls":   row["missed"],
        }

    def contact_count(self) -> int:
        with self._session() as conn:
            return conn.execute("SELECT COUNT(*) FROM contacts").fetchone()[0]

    # ── ANALYSIS RESULTS ──────────────────────────────────────────────────

    def replace_timeline(self, entries: List[TimelineEntry]) -> int:
        created = _now()
        rows = [
            (
                e.date, e.total_messages, e.suspicious_messages, e.total_calls,
                e.incoming_calls, e.outgoing_calls, e.missed_calls, created,
            )
            for e in entries
        ]
        with self._session() as conn:
            conn.execute("DELETE FROM timeline_analysis")
            conn.executemany("""
                INSERT INTO timeline_analysis
                (date, total_messages, suspicious_messages, total_calls,
                 incoming_calls, outgoing_calls, missed_calls, created_at)
                VALUES (?,?,?,?,?,?,?,?)
            """, rows)
        return len(rows)

    def timeline(self) -> List[TimelineEntry]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM timeline_analysis ORDER BY date").fetchall()
        return [
            TimelineEntry(
                date                = r["date"],
                total_messages      = r["total_messages"],
                suspicious_messages = r["suspicious_messages"],
                total_calls         = r["total_calls"],
                incoming_calls      = r["incoming_calls"],
                outgoing_calls      = r["outgoing_calls"],
                missed_calls        = r["missed_calls"],
            )
            for r in rows
        ]

    def replace_spam_findings(self, findings: List[UrlFinding]) -> int:
        created = _now()
        rows = [(f.sender, f.date, f.body, json.dumps(f.urls), created) for f in findings]
        with self._session() as conn:
            conn.execute("DELETE FROM spam_url_analysis")
            conn.executemany("""
                INSERT INTO spam_url_analysis (sender, date, body, urls, created_at)
                VALUES (?,?,?,?,?)
            """, rows)
        return len(rows)

    def spam_findings(self) -> List[UrlFinding]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM spam_url_analysis ORDER BY id").fetchall()
        return [
            UrlFinding(
                sender  = r["sender"],
                date    = r["date"],
                body    = r["body"],
                urls    = _json_list(r["urls"]),
                is_spam = True,
            )
            for r in rows
        ]

    def replace_correlations(self, entries: List[CorrelationEntry]) -> int:
        created = _now()
        rows = [
            (
                e.number, e.sms_count,
                json.dumps([message_document(m) for m in e.messages]),
                json.dumps([call_document(c) for c in e.call_logs]),
                created,
            )
            for e in entries
        ]
        with self._session() as conn:
            conn.execute("DELETE FROM data_correlation")
            conn.executemany("""
                INSERT INTO data_correlation (number, sms_count, messages, call_logs, created_at)
                VALUES (?,?,?,?,?)
            """, rows)
        return len(rows)

    def correlations(self) -> List[Dict[str, object]]:
        """Stored correlation rows as documents (already serialized)."""
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM data_correlation ORDER BY id").fetchall()
        return [
            {
                "number":   r["number"],
                "smsCount": r["sms_count"],
                "messages": _json_list(r["messages"]),
                "callLogs": _json_list(r["call_logs"]),
            }
            for r in rows
        ]

    # ── APPEND-ONLY: REPORTS / CONNECTION DETAILS ─────────────────────────

    def insert_report(self, snapshot: ReportSnapshot) -> ReportSnapshot:
        with self._session() as conn:
            cur = conn.execute("""
                INSERT INTO reports
                (case_number, remark, device_name, sms_stats, call_stats,
                 total_contacts, created_at)
                VALUES (?,?,?,?,?,?,?)
            """, (
                snapshot.case_number, snapshot.remark, snapshot.device_name,
                json.dumps(snapshot.sms_stats), json.dumps(snapshot.call_stats),
                snapshot.total_contacts, snapshot.created_at,
            ))
            snapshot.id = cur.lastrowid
        logger.info(f"[{self.device_name}] saved report #{snapshot.id} for case {snapshot.case_number}")
        return snapshot

    def reports(self) -> List[ReportSnapshot]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM reports ORDER BY id").fetchall()
        return [
            ReportSnapshot(
                id             = r["id"],
                case_number    = r["case_number"],
                remark         = r["remark"],
                device_name    = r["device_name"],
                sms_stats      = json.loads(r["sms_stats"] or "{}"),
                call_stats     = json.loads(r["call_stats"] or "{}"),
                total_contacts = r["total_contacts"],
                created_at     = r["created_at"],
            )
            for r in rows
        ]

    def insert_connection_detail(self, detail: ConnectionDetail) -> ConnectionDetail:
        detail.created_at = detail.created_at or _now()
        with self._session() as conn:
            cur = conn.execute("""
                INSERT INTO connection_details
                (device_name, connector_id, additional_info, investigator_id, created_at)
                VALUES (?,?,?,?,?)
            """, (
                detail.device_name, detail.connector_id, detail.additional_info,
                detail.investigator_id, detail.created_at,
            ))
            detail.id = cur.lastrowid
        return detail

    def connection_details(self) -> List[ConnectionDetail]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM connection_details ORDER BY id").fetchall()
        return [
            ConnectionDetail(
                id              = r["id"],
                device_name     = r["device_name"],
                connector_id    = r["connector_id"],
                additional_info = r["additional_info"],
                investigator_id = r["investigator_id"],
                created_at      = r["created_at"],
            )
            for r in rows
        ]


# ── OPENING ──────────────────────────────────────────────────

def store_path(data_dir: Path, device_name: str) -> Path:
    return Path(data_dir) / f"{device_name}.db"


def open_store(data_dir: Path, device_name: str) -> DeviceStore:
    """
    Open (creating if needed) the namespace for `device_name`.
    `device_name` must already be sanitized. Raises StoreConnectionError.
    """
    if not device_name:
        raise StoreConnectionError("Empty device name (is a device connected?)")
    store = DeviceStore(store_path(data_dir, device_name), device_name)
    try:
        store.create_schema()
    except StoreError as e:
        raise StoreConnectionError(f"Cannot open store for {device_name}: {e}") from e
    logger.debug(f"Opened store {store.db_path}")
    return store


# ── HELPERS ──────────────────────────────────────────────────

def _regexp(pattern: str, value: Optional[str]) -> bool:
    if value is None:
        return False
    return re.search(pattern, value) is not None


def _now() -> str:
    return datetime.now().isoformat(timespec='seconds')


def _json_list(raw: Optional[str]) -> list:
    if not raw:
        return []
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return []


def _row_to_message(r: sqlite3.Row) -> Message:
    return Message(
        address         = r["address"],
        date            = r["date"],
        direction       = r["direction"],
        body            = r["body"],
        is_suspicious   = bool(r["is_suspicious"]),
        category        = r["category"],
        sentiment_score = r["sentiment_score"],
        sentiment_emoji = r["sentiment_emoji"],
        contact_name    = r["contact_name"],
    )


def _row_to_call(r: sqlite3.Row) -> CallLogEntry:
    return CallLogEntry(
        number    = r["number"],
        date      = r["date"],
        direction = r["direction"],
        duration  = r["duration"],
    )


def _row_to_contact(r: sqlite3.Row) -> Contact:
    return Contact(display_name=r["display_name"], number=r["number"])
