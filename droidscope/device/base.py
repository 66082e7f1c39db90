"""
droidscope/device/base.py
Abstract base class for device shells.
To add a new transport: subclass DeviceShell and implement run().
"""

from abc import ABC, abstractmethod
from typing import Sequence


class DeviceShell(ABC):
    """
    Runs a command on the connected device and returns its stdout.
    Callers never know which transport is underneath.
    """

    @abstractmethod
    async def run(self, args: Sequence[str]) -> str:
        """
        Run `args` as a device shell command, e.g.
        ['content', 'query', '--uri', 'content://sms/inbox/'].

        Returns stdout text. Raises DeviceCommandError on any failure.
        No timeout and no retry.
        """
        ...
