from __future__ import annotations

from collections.abc import Callable

import pytest

from fbexp.core.base import Agent
from fbexp.core.fastboot import Fastboot, FastbootTerminal


class ScriptedDevice:
    """In-memory Transport.

    ``script`` is consumed one item per read: bytes are returned,
    exception instances are raised. A ``responder`` may instead map each
    written buffer to the items queued for the following reads.
    """

    def __init__(
        self,
        script: list | None = None,
        responder: Callable[[bytes], list] | None = None,
        write_error: Exception | None = None,
    ) -> None:
        self.script = list(script or [])
        self.responder = responder
        self.write_error = write_error
        self.writes: list[bytes] = []
        self.read_sizes: list[int] = []
        self.opened = 0
        self.closed = 0

    def write_all(self, data: bytes) -> None:
        if self.write_error is not None:
            raise self.write_error
        self.writes.append(bytes(data))
        if self.responder is not None:
            self.script.extend(self.responder(bytes(data)))

    def read(self, size: int) -> bytes:
        self.read_sizes.append(size)
        if not self.script:
            raise AssertionError("read with nothing scripted")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item[:size]

    def open(self) -> None:
        self.opened += 1

    def close(self) -> None:
        self.closed += 1


@pytest.fixture
def device_factory():
    return ScriptedDevice


@pytest.fixture
def fastboot_over():
    def build(device, follow_info: bool = False) -> Fastboot:
        return Fastboot(Agent(device, follow_info=follow_info).transmit)

    return build


@pytest.fixture
def terminal_over():
    def build(device) -> FastbootTerminal:
        return FastbootTerminal(Agent(device))

    return build
