"""
droidscope — Android SMS, call log and contact extraction and analysis.

Pulls records from a connected device over adb, classifies message risk
and sentiment, stores one SQLite database per device, and serves reports
over a local FastAPI app.
"""

__version__ = "1.0.0"
