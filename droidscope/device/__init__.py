"""
droidscope/device — device shell transports.
"""

from droidscope.device.adb import AdbShell, get_device_name, query_content, sanitize_device_name
from droidscope.device.base import DeviceShell

__all__ = [
    "AdbShell",
    "DeviceShell",
    "get_device_name",
    "query_content",
    "sanitize_device_name",
]
