from __future__ import annotations

from typing import Protocol


class TransportError(IOError):
    """Fatal transport failure; aborts the current operation."""


class TransportTimeout(TransportError):
    """A single blocking transfer hit the transport timeout.

    For reads this is a liveness signal, not a failure: the device may
    take arbitrarily long to answer a synchronous command.
    """


class Transport(Protocol):
    """Byte-stream capability the fastboot core is driven through."""

    def write_all(self, data: bytes) -> None: ...
    def read(self, size: int) -> bytes: ...


class TransferObserver(Protocol):
    """Side-channel notified after each successful write chunk."""

    def on_progress(self, transferred: int, total: int) -> None: ...
