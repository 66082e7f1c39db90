"""
tests/conftest.py
Synthetic `adb shell content query` dumps and a fake device shell.
No real device or messages needed.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

import pytest

from droidscope.device.adb import CALL_LOG_URI, CONTACTS_URI, SMS_INBOX_URI, SMS_SENT_URI
from droidscope.device.base import DeviceShell
from droidscope.errors import DeviceCommandError


# ── FIXTURE: Synthetic content-query output ──────────────────

SAMPLE_INBOX = """\
Row: 0 _id=1, address=+15550001, date=1705320000000, type=1, body=This is a scam, send the money now
Row: 1 _id=2, address=+15550001, date=1705323600000, type=1, body=Visit http://example-spam-domain.com/win today
Row: 2 _id=3, address=+15550002, date=1705406400000, type=1, body=See you at the park tomorrow
"""

SAMPLE_SENT = """\
Row: 0 _id=4, address=+15550001, date=1705327200000, type=2, body=I hate this, it is terrible and awful
"""

SAMPLE_CALLS = """\
Row: 0 _id=1, number=+15550001, date=1705320600000, duration=125, type=1
Row: 1 _id=2, number=+15550003, date=1705500000000, duration=0, type=3
Row: 2 _id=3, number=+15550001, date=1705330000000, duration=60, type=2
"""

SAMPLE_CONTACTS = """\
Row: 0 _id=1, display_name=Alice Example, number=+15550001
Row: 1 _id=2, display_name=Bob Example, number=+15550002
Row: 2 _id=3, display_name=NULL, number=+15550009
"""

SMS_TIMESTAMPS  = (1705320000000, 1705323600000, 1705406400000, 1705327200000)
CALL_TIMESTAMPS = (1705320600000, 1705500000000, 1705330000000)


def local_day(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime('%Y-%m-%d')


class FakeShell(DeviceShell):
    """Answers getprop and content queries from canned text."""

    def __init__(
        self,
        model:   str = 'Pixel 7',
        outputs: Optional[Dict[str, str]] = None,
        fail:    bool = False,
    ):
        self.model   = model
        self.outputs = outputs if outputs is not None else {
            SMS_INBOX_URI: SAMPLE_INBOX,
            SMS_SENT_URI:  SAMPLE_SENT,
            CALL_LOG_URI:  SAMPLE_CALLS,
            CONTACTS_URI:  SAMPLE_CONTACTS,
        }
        self.fail  = fail
        self.calls: List[List[str]] = []

    async def run(self, args: Sequence[str]) -> str:
        self.calls.append(list(args))
        if self.fail:
            raise DeviceCommandError(' '.join(args), 'error: no devices/emulators found')
        if args[0] == 'getprop':
            return self.model + '\n'
        return self.outputs.get(args[-1], '')


@pytest.fixture
def fake_shell():
    return FakeShell()
