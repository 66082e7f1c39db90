"""
droidscope/device/adb.py
Android Debug Bridge shell. Requires `adb` on PATH (or adb_path in config)
and exactly one authorized device, unless device_serial is set.

INSTALL:
  Linux:   apt install adb
  Windows: https://developer.android.com/tools/releases/platform-tools
"""

import asyncio
import logging
import re
from typing import List, Optional, Sequence

from droidscope.device.base import DeviceShell
from droidscope.errors import DeviceCommandError

logger = logging.getLogger(__name__)

SMS_INBOX_URI = 'content://sms/inbox/'
SMS_SENT_URI  = 'content://sms/sent/'
CALL_LOG_URI  = 'content://call_log/calls/'
CONTACTS_URI  = 'content://contacts/phones/'

DEVICE_MODEL_PROP = 'ro.product.model'

_UNSAFE_NAME_CHARS = re.compile(r'[^a-zA-Z0-9_]')


class AdbShell(DeviceShell):

    def __init__(self, adb_path: str = 'adb', serial: Optional[str] = None):
        self.adb_path = adb_path
        self.serial   = serial

    def _argv(self, args: Sequence[str]) -> List[str]:
        argv = [self.adb_path]
        if self.serial:
            argv += ['-s', self.serial]
        return argv + ['shell', *args]

    async def run(self, args: Sequence[str]) -> str:
        argv    = self._argv(args)
        command = ' '.join(argv)
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout = asyncio.subprocess.PIPE,
                stderr = asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except OSError as e:
            logger.error(f"Error executing command: {command}: {e}")
            raise DeviceCommandError(command, str(e)) from e

        err_text = stderr.decode('utf-8', errors='replace').strip()
        if proc.returncode != 0:
            logger.error(f"Command exited {proc.returncode}: {command}")
            raise DeviceCommandError(command, err_text or f"exit status {proc.returncode}")
        if err_text:
            logger.error(f"Command had errors: {command}: {err_text}")
            raise DeviceCommandError(command, err_text)

        return stdout.decode('utf-8', errors='replace')


def sanitize_device_name(name: str) -> str:
    """Replace anything outside [A-Za-z0-9_] so the name is safe as a store namespace."""
    return _UNSAFE_NAME_CHARS.sub('_', name)


async def get_device_name(shell: DeviceShell) -> str:
    raw = await shell.run(['getprop', DEVICE_MODEL_PROP])
    return sanitize_device_name(raw.strip())


async def query_content(shell: DeviceShell, uri: str) -> str:
    logger.debug(f"Querying {uri}")
    return await shell.run(['content', 'query', '--uri', uri])
