"""
droidscope/aggregators — timeline bucketing and SMS/call correlation.
"""

from droidscope.aggregators.correlation import correlate, group_messages_by_number
from droidscope.aggregators.timeline import build_timeline

__all__ = [
    "build_timeline",
    "correlate",
    "group_messages_by_number",
]
