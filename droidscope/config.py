"""
droidscope/config.py
JSON config with defaults. Persists to droidscope_config.json.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from droidscope.errors import StoreConnectionError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "droidscope_config.json"

DEFAULT_CONFIG = {
    "data_dir": "data",
    "adb_path": "adb",
    "device_serial": None,
    "host": "127.0.0.1",
    "port": 3000,
    "timeline_start": "2024-01-01T00:00:00",
    "spam_url_patterns": [
        r"example-spam-domain\.com",
        r"another-spam-site\.net",
    ],
    "correlation_report_limit": 10,
}


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load config from droidscope_config.json. Returns defaults if missing."""
    path = _config_path(project_root)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Config load failed: {e}")
    return dict(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to droidscope_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def timeline_start(config: Dict[str, Any]) -> datetime:
    return datetime.fromisoformat(config.get("timeline_start") or DEFAULT_CONFIG["timeline_start"])


def resolve_data_dir(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """data_dir from config, made absolute against the project root."""
    data_dir = Path(config.get("data_dir") or DEFAULT_CONFIG["data_dir"])
    if not data_dir.is_absolute():
        data_dir = (project_root or Path.cwd()) / data_dir
    return data_dir


def ensure_data_dir(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """
    Make sure the resolved data_dir exists and is writable.
    Raises StoreConnectionError otherwise.
    """
    data_dir = resolve_data_dir(config, project_root)
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        probe = data_dir / ".write_test"
        probe.write_text("", encoding="utf-8")
        probe.unlink()
    except OSError as e:
        raise StoreConnectionError(f"Data directory unusable: {data_dir}: {e}") from e
    return data_dir
