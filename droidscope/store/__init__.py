"""
droidscope/store — per-device SQLite namespaces.
"""

from droidscope.store.sqlite_store import DeviceStore, open_store, store_path

__all__ = [
    "DeviceStore",
    "open_store",
    "store_path",
]
