"""
droidscope/api.py
─────────────────────────────────────────────────────────────────────────────
droidscope HTTP API (FastAPI)

USAGE:
    uvicorn droidscope.api:app --port 3000
    droidscope serve --port 3000

ENDPOINTS:
  GET  /device-name           — model name of the connected device
  GET  /sms                   — pull inbox + sent, classify, replace, return
  GET  /call-log              — pull call log, replace, return
  GET  /contacts              — pull contacts, replace, return
  GET  /sms-stats             — message count per address, largest first
  GET  /search?keyword=       — case-insensitive regex over stored records
  GET  /timeline-analysis     — per-day activity, persisted
  GET  /url-analysis          — links in messages split spam / non-spam
  GET  /data-correlation      — SMS ↔ call log by number, persisted
  GET  /comprehensive-report  — everything in one document
  GET  /short-report          — counts only
  POST /short-report          — persist a short report under a case number
  GET  /reports               — persisted short reports
  GET  /connection-details    — recorded connector / investigator metadata
  POST /connection-details    — record one
  GET  /health                — status + data directory

Every request resolves the device namespace from the connected device, so
unplugging one phone and plugging in another switches stores.

ERRORS:
  400 — missing required parameter (message names the field)
  500 — device command or store failure (generic message, logged with trace)

Binds to 127.0.0.1 by default. No authentication.
"""

import asyncio
import logging
import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from droidscope import __version__
from droidscope.config import (
    ensure_data_dir,
    load_config,
    resolve_data_dir,
    timeline_start,
)
from droidscope.detectors.url_detector import compile_spam_patterns
from droidscope.device.adb import AdbShell, get_device_name
from droidscope.device.base import DeviceShell
from droidscope.documents import (
    call_document,
    connection_document,
    contact_document,
    correlation_document,
    message_document,
    report_document,
    timeline_document,
    url_document,
)
from droidscope.errors import StoreConnectionError, ValidationError
from droidscope.pipeline import (
    analyze_correlation,
    analyze_links,
    analyze_timeline,
    ingest_call_log,
    ingest_contacts,
    ingest_sms,
    open_device_store,
    record_connection_detail,
)
from droidscope.report import (
    build_comprehensive_report,
    build_short_report,
    list_reports,
    submit_short_report,
)
from droidscope.store.sqlite_store import DeviceStore

logger = logging.getLogger(__name__)


# ── REQUEST MODELS ──────────────────────────────────────────────────────
# Fields are optional so a missing value reaches our own validation and
# comes back as a 400 naming the field. Numeric ids are accepted and stored
# as text.

class ShortReportRequest(BaseModel):
    caseNumber: Optional[Union[str, int]] = None
    remark:     Optional[Union[str, int]] = None


class ConnectionDetailRequest(BaseModel):
    deviceName:     Optional[Union[str, int]] = None
    connectorId:    Optional[Union[str, int]] = None
    investigatorId: Optional[Union[str, int]] = None
    additionalInfo: Optional[Union[str, int]] = None


def compile_keyword(keyword: str) -> re.Pattern:
    """Keyword as a regex; invalid regex syntax falls back to a literal match."""
    try:
        return re.compile(keyword)
    except re.error:
        return re.compile(re.escape(keyword))


def _server_error(message: str) -> HTTPException:
    """Log the active exception with its trace and hide it behind `message`."""
    logger.error(message, exc_info=True)
    return HTTPException(status_code=500, detail=message)


def build_app(
    config:       Optional[Dict[str, Any]] = None,
    shell:        Optional[DeviceShell]    = None,
    project_root: Optional[Path]           = None,
) -> FastAPI:
    """
    Build the FastAPI application.
    `shell` defaults to an AdbShell from config; tests pass a fake.
    """
    config          = config if config is not None else load_config(project_root)
    shell           = shell or AdbShell(config.get("adb_path") or "adb", config.get("device_serial"))
    data_dir        = resolve_data_dir(config, project_root)
    window_start    = timeline_start(config)
    spam_patterns   = compile_spam_patterns(config.get("spam_url_patterns"))
    correlation_top = int(config.get("correlation_report_limit") or 10)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        try:
            await asyncio.to_thread(ensure_data_dir, config, project_root)
        except StoreConnectionError as exc:
            logger.critical(f"Refusing to start: {exc}")
            raise
        logger.info(f"droidscope API ready | data_dir={data_dir}")
        yield

    _app = FastAPI(
        title       = "droidscope API",
        description = "Android SMS / call log / contact extraction and analysis over adb",
        version     = __version__,
        docs_url    = "/docs",
        redoc_url   = None,
        lifespan    = lifespan,
    )

    _app.add_middleware(
        CORSMiddleware,
        allow_origins     = [
            "http://localhost",
            "http://localhost:3000",
            "http://127.0.0.1",
            "http://127.0.0.1:3000",
        ],
        allow_methods     = ["GET", "POST", "OPTIONS"],
        allow_headers     = ["Content-Type"],
        allow_credentials = False,
    )

    async def _store() -> DeviceStore:
        return await open_device_store(shell, data_dir)

    # ── DEVICE / INGESTION ──────────────────────────────────────────────

    @_app.get("/device-name", summary="Connected device model")
    async def device_name():
        try:
            name = await get_device_name(shell)
        except Exception:
            raise _server_error("Error fetching device name")
        return {"deviceName": name}

    @_app.get("/sms", summary="Pull, classify and store SMS")
    async def sms():
        """
        Queries inbox and sent, classifies every body, joins contact names
        from the stored contacts, and replaces the stored messages.
        Ingest contacts first for names to resolve.
        """
        try:
            store    = await _store()
            messages = await ingest_sms(shell, store)
        except Exception:
            raise _server_error("Error querying and saving SMS data")
        return [message_document(m) for m in messages]

    @_app.get("/call-log", summary="Pull and store call log")
    async def call_log():
        try:
            store = await _store()
            calls = await ingest_call_log(shell, store)
        except Exception:
            raise _server_error("Error querying and saving call log data")
        return [call_document(c) for c in calls]

    @_app.get("/contacts", summary="Pull and store contacts")
    async def contacts():
        try:
            store  = await _store()
            result = await ingest_contacts(shell, store)
        except Exception:
            raise _server_error("Error querying and saving contacts data")
        return [contact_document(c) for c in result]

    # ── QUERIES ─────────────────────────────────────────────────────────

    @_app.get("/sms-stats", summary="Message count per address")
    async def sms_stats():
        try:
            store = await _store()
            return await asyncio.to_thread(store.sms_counts_by_address)
        except Exception:
            raise _server_error("Error aggregating SMS data")

    @_app.get("/search", summary="Search stored records")
    async def search(keyword: Optional[str] = Query(None, description="Regex or plain text")):
        """
        Case-insensitive match over message bodies and addresses, call
        numbers, and contact names and numbers.
        """
        if not keyword:
            raise HTTPException(status_code=400, detail="Keyword is required")
        pattern = compile_keyword(keyword)
        try:
            store   = await _store()
            results = await asyncio.to_thread(store.search, pattern.pattern)
        except Exception:
            raise _server_error("Error searching data")
        return {
            "sms":      [message_document(m) for m in results["sms"]],
            "callLog":  [call_document(c) for c in results["call_log"]],
            "contacts": [contact_document(c) for c in results["contacts"]],
        }

    # ── ANALYSIS ────────────────────────────────────────────────────────

    @_app.get("/timeline-analysis", summary="Per-day activity timeline")
    async def timeline_analysis():
        try:
            store    = await _store()
            timeline = await analyze_timeline(store, start=window_start)
        except Exception:
            raise _server_error("Error performing timeline analysis")
        return [timeline_document(e) for e in timeline]

    @_app.get("/url-analysis", summary="Links in messages, spam vs other")
    async def url_analysis():
        try:
            store = await _store()
            spam, non_spam = await analyze_links(store, spam_patterns)
        except Exception:
            raise _server_error("Error performing URL analysis")
        return {
            "spamUrls":    [url_document(f) for f in spam],
            "nonSpamUrls": [url_document(f) for f in non_spam],
        }

    @_app.get("/data-correlation", summary="SMS and call log correlated by number")
    async def data_correlation():
        try:
            store   = await _store()
            entries = await analyze_correlation(store)
        except Exception:
            raise _server_error("Error performing data correlation")
        return [correlation_document(e) for e in entries]

    # ── REPORTS ─────────────────────────────────────────────────────────

    @_app.get("/comprehensive-report", summary="Full device report")
    async def comprehensive_report():
        try:
            store = await _store()
            return await build_comprehensive_report(
                store, store.device_name,
                timeline_start = window_start,
                limit          = correlation_top,
            )
        except Exception:
            raise _server_error("Failed to generate comprehensive report")

    @_app.get("/short-report", summary="Summary counts")
    async def short_report():
        try:
            store = await _store()
            return await asyncio.to_thread(build_short_report, store, store.device_name)
        except Exception:
            raise _server_error("Failed to generate short report")

    @_app.post("/short-report", status_code=201, summary="Save a short report")
    async def save_short_report(req: Optional[ShortReportRequest] = None):
        """
        Requires caseNumber and remark. The counts are recomputed at
        submission time and frozen into the saved report.
        """
        req = req or ShortReportRequest()
        try:
            store    = await _store()
            snapshot = await asyncio.to_thread(
                submit_short_report, store, store.device_name, req.caseNumber, req.remark,
            )
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except Exception:
            raise _server_error("Failed to save short report")
        return report_document(snapshot)

    @_app.get("/reports", summary="Saved short reports")
    async def reports():
        try:
            store = await _store()
            saved = await asyncio.to_thread(list_reports, store)
        except Exception:
            raise _server_error("Error retrieving reports")
        return [report_document(r) for r in saved]

    # ── CONNECTION DETAILS ──────────────────────────────────────────────

    @_app.get("/connection-details", summary="Recorded connection details")
    async def connection_details():
        try:
            store  = await _store()
            detail = await asyncio.to_thread(store.connection_details)
        except Exception:
            raise _server_error("Error retrieving additional information")
        return [connection_document(d) for d in detail]

    @_app.post("/connection-details", status_code=201, summary="Record connection details")
    async def add_connection_detail(req: Optional[ConnectionDetailRequest] = None):
        req = req or ConnectionDetailRequest()
        try:
            store  = await _store()
            detail = await asyncio.to_thread(
                record_connection_detail,
                store, req.deviceName, req.connectorId, req.investigatorId, req.additionalInfo,
            )
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except Exception:
            raise _server_error("Error saving connection details")
        return connection_document(detail)

    @_app.get("/health", summary="Health check")
    async def health():
        return {
            "status":        "ok",
            "dataDir":       str(data_dir),
            "dataDirExists": data_dir.is_dir(),
            "version":       __version__,
        }

    return _app


# Module-level app instance, used by `uvicorn droidscope.api:app`
app = build_app()
