"""Fastboot reply tokens.

Every device reply starts with a 4-byte ASCII token. The remainder is
free text, except for DATA where it is the hex byte count the device is
ready to receive.
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass

lg = logging.getLogger(__name__)

TOKEN_LEN = 4

OKAY = "OKAY"
INFO = "INFO"
FAIL = "FAIL"
DATA = "DATA"


@dataclass(frozen=True)
class Reply:
    """Base class for a decoded device reply."""

    @property
    def kind(self) -> str:
        return type(self).__name__.upper()


@dataclass(frozen=True)
class Okay(Reply):
    payload: str = ""


@dataclass(frozen=True)
class Info(Reply):
    payload: str = ""


@dataclass(frozen=True)
class Fail(Reply):
    message: str = ""


@dataclass(frozen=True)
class Data(Reply):
    size: int


def _parse_size(text: str) -> int | None:
    if not text or any(c not in string.hexdigits for c in text):
        return None
    return int(text, 16)


def decode(raw: bytes) -> Reply:
    """Classify a raw reply buffer. Never raises."""
    text = bytes(raw).decode("utf-8", errors="replace")
    if len(raw) < TOKEN_LEN:
        lg.warning("short reply: %r", text)
        return Fail(text)

    token = bytes(raw[:TOKEN_LEN]).decode("ascii", errors="replace")
    rest = bytes(raw[TOKEN_LEN:]).decode("utf-8", errors="replace")
    if token == OKAY:
        return Okay(rest)
    if token == INFO:
        return Info(rest)
    if token == FAIL:
        return Fail(rest)
    if token == DATA:
        size = _parse_size(rest)
        if size is None:
            lg.warning("bad DATA size: %r", rest)
            return Fail("Failed to decode DATA size")
        return Data(size)

    lg.warning("unrecognized reply: %r", text)
    return Fail(text)
