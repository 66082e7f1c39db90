"""
droidscope/errors.py
Exception types raised across the pipeline. The HTTP layer maps
ValidationError to 400 and everything else to 500.
"""

from typing import Any


class DroidscopeError(Exception):
    """Base class for all droidscope errors."""


class DeviceCommandError(DroidscopeError):
    """A device shell command failed (device unreachable, bad command)."""

    def __init__(self, command: str, detail: str = ''):
        self.command = command
        self.detail  = detail
        super().__init__(f"Device command failed: {command}" + (f" ({detail})" if detail else ''))


class StoreError(DroidscopeError):
    """A query or write against a device store failed."""


class StoreConnectionError(StoreError):
    """A device store could not be opened at all."""


class ValidationError(DroidscopeError):
    """A required request parameter is missing."""

    def __init__(self, field_name: str, message: str = ''):
        self.field_name = field_name
        super().__init__(message or f"{field_name} is required")


def require(field_name: str, value: Any) -> str:
    """
    `value` as stripped text. Numbers are accepted and stringified.
    Raises ValidationError when the value is missing or blank.
    """
    text = '' if value is None else str(value).strip()
    if not text:
        raise ValidationError(field_name)
    return text
