from __future__ import annotations

import logging
from collections.abc import Callable

from fbexp.core.transport import PROTOCOL, Data, Fail, Okay, Reply

lg = logging.getLogger(__name__)

_GREEN = "\033[32m"
_RED = "\033[31m"
_RESET = "\033[0m"

# download:<8 hex digits>
MAX_DOWNLOAD_SIZE = 0xFFFFFFFF

UNKNOWN_FAILURE = "Unknown failure"


class FastbootError(Exception):
    """The device rejected a command or answered with the wrong reply.

    ``message`` is the device's FAIL text, which may be empty.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _expect_okay(reply: Reply) -> str:
    if isinstance(reply, Okay):
        return reply.payload
    if isinstance(reply, Fail):
        raise FastbootError(reply.message)
    raise FastbootError(UNKNOWN_FAILURE)


class Fastboot:
    """Fastboot protocol operations.

    Receives ``agent.transmit`` as a callable. The ``send_`` methods
    perform exactly one exchange and return the decoded reply; the
    operations map replies to values and raise FastbootError otherwise.
    """

    def __init__(self, transmit: Callable[[bytes], Reply]) -> None:
        self._transmit = transmit

    def _send(self, label: str, payload: bytes) -> Reply:
        reply = self._transmit(payload)
        color = _RED if isinstance(reply, Fail) else _GREEN
        lg.log(PROTOCOL, "%s %s%s%s", label, color, _describe(reply), _RESET)
        return reply

    def _command(self, command: str) -> Reply:
        return self._send(command, command.encode("ascii"))

    # -- commands --

    def send_getvar(self, name: str) -> Reply:
        """getvar:<name>"""
        return self._command(f"getvar:{name}")

    def send_download(self, size: int) -> Reply:
        """download:<size as 8 lowercase hex digits>"""
        if not 0 <= size <= MAX_DOWNLOAD_SIZE:
            raise ValueError(f"download size out of range: {size}")
        return self._command(f"download:{size:08x}")

    def send_data(self, data: bytes) -> Reply:
        """Raw payload phase of a download."""
        return self._send(f"DATA {len(data)} bytes", data)

    def send_flash(self, partition: str) -> Reply:
        return self._command(f"flash:{partition}")

    def send_erase(self, partition: str) -> Reply:
        return self._command(f"erase:{partition}")

    def send_reboot(self) -> Reply:
        return self._command("reboot")

    # -- operations --

    def getvar(self, name: str) -> str:
        """Read a fastboot variable (not a bootloader environment variable)."""
        return _expect_okay(self.send_getvar(name))

    def download(self, data: bytes) -> None:
        """Two-phase download: announce the size, then stream the bytes.

        The device must acknowledge with DATA of exactly len(data);
        anything else ends the operation before the payload is sent.
        """
        reply = self.send_download(len(data))
        if isinstance(reply, Fail):
            raise FastbootError(reply.message)
        if not isinstance(reply, Data):
            raise FastbootError(UNKNOWN_FAILURE)
        if reply.size != len(data):
            lg.error("device offered %d bytes, payload is %d", reply.size, len(data))
            raise FastbootError(UNKNOWN_FAILURE)
        _expect_okay(self.send_data(data))

    def flash(self, partition: str) -> None:
        """Write previously downloaded data to a partition."""
        _expect_okay(self.send_flash(partition))

    def erase(self, partition: str) -> None:
        _expect_okay(self.send_erase(partition))

    def reboot(self) -> None:
        _expect_okay(self.send_reboot())


def _describe(reply: Reply) -> str:
    if isinstance(reply, Data):
        return f"DATA {reply.size:08x}"
    text = getattr(reply, "payload", None)
    if text is None:
        text = getattr(reply, "message", "")
    return f"{reply.kind} {text}".rstrip()
