"""Fastboot messages and results.

One Message/Result pair per operation. Operations with no output
beyond success share StatusResult.
"""

from __future__ import annotations

from dataclasses import dataclass

from fbexp.core.base import Message, Result


@dataclass
class GetVarMessage(Message):
    """Read a fastboot variable."""

    name: str


@dataclass
class GetVarResult(Result):
    value: str = ""


@dataclass
class DownloadMessage(Message):
    """Download a payload into the device's staging buffer."""

    data: bytes


@dataclass
class DownloadResult(Result):
    size: int = 0


@dataclass
class FlashMessage(Message):
    """Flash the downloaded payload into a partition."""

    partition: str


@dataclass
class EraseMessage(Message):
    partition: str


@dataclass
class RebootMessage(Message):
    pass


@dataclass
class StatusResult(Result):
    """Outcome of a command that returns nothing but OKAY."""
