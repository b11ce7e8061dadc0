"""Custom log levels and traffic formatting shared by every layer."""

from __future__ import annotations

import logging

TRACE = 15
PROTOCOL = 18
logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(PROTOCOL, "PROTOCOL")

LINE_BYTES = 16
# Raw payloads are only previewed; a full image would flood the log.
PREVIEW_BYTES = 64


def _printable(data: bytes) -> bool:
    return all(0x20 <= b < 0x7F for b in data)


def log_traffic(logger: logging.Logger, prefix: str, data: bytes) -> None:
    """Log one transfer at TRACE: printable frames as text, others as hex."""
    if not logger.isEnabledFor(TRACE):
        return
    if data and _printable(data):
        logger.log(TRACE, "%s%s", prefix, data.decode("ascii"))
        return
    shown = data[:PREVIEW_BYTES]
    pad = " " * len(prefix)
    for i in range(0, len(shown), LINE_BYTES):
        chunk = shown[i : i + LINE_BYTES].hex(" ").upper()
        logger.log(TRACE, "%s%s", prefix if i == 0 else pad, chunk)
    if len(data) > len(shown):
        logger.log(TRACE, "%s... (%d bytes total)", pad, len(data))
