from __future__ import annotations

import logging

import pytest
import usb.core
import usb.util

from fbexp.core.transport import (
    TRACE,
    LoggingTransferObserver,
    TransportError,
    TransportTimeout,
    UsbDevice,
)
from fbexp.core.transport import usb as usb_transport


class FakeEndpoint:
    def __init__(self, address: int, attributes: int = 0x02, max_packet: int = 512):
        self.bEndpointAddress = address
        self.bmAttributes = attributes
        self.wMaxPacketSize = max_packet


class FakeInterface(list):
    def __init__(self, number: int, endpoints: list[FakeEndpoint]):
        super().__init__(endpoints)
        self.bInterfaceNumber = number


class FakeDev:
    def __init__(self, config, reads=None, write_limit=None):
        self.config = config
        self.reads = list(reads or [])
        self.write_limit = write_limit
        self.written: list[bytes] = []
        self.read_calls: list[tuple[int, int, int]] = []

    def get_active_configuration(self):
        return self.config

    def set_configuration(self):
        pass

    def read(self, address, size, timeout=None):
        self.read_calls.append((address, size, timeout))
        item = self.reads.pop(0)
        if isinstance(item, Exception):
            raise item
        return bytearray(item)

    def write(self, address, data, timeout=None):
        data = bytes(data)
        if self.write_limit is not None:
            data = data[: self.write_limit]
        self.written.append(data)
        return len(data)


@pytest.fixture
def usb_calls(monkeypatch):
    calls: list[tuple[str, int]] = []
    monkeypatch.setattr(usb.util, "claim_interface", lambda dev, i: calls.append(("claim", i)))
    monkeypatch.setattr(usb.util, "release_interface", lambda dev, i: calls.append(("release", i)))
    monkeypatch.setattr(usb.util, "dispose_resources", lambda dev: calls.append(("dispose", -1)))
    return calls


def _fastboot_config():
    # interrupt IN endpoint first, then the bulk pair
    return [FakeInterface(0, [
        FakeEndpoint(0x83, attributes=0x03, max_packet=16),
        FakeEndpoint(0x81, max_packet=512),
        FakeEndpoint(0x01, max_packet=512),
    ])]


def _opened(monkeypatch, usb_calls, dev, **kwargs) -> UsbDevice:
    monkeypatch.setattr(usb.core, "find", lambda **ids: dev)
    device = UsbDevice(0x18D1, 0x4EE0, **kwargs)
    device.open()
    return device


def test_open_finds_bulk_endpoints(monkeypatch, usb_calls):
    dev = FakeDev(_fastboot_config(), reads=[b"OKAY"])
    device = _opened(monkeypatch, usb_calls, dev, timeout_ms=250)
    assert device.connected
    assert usb_calls == [("claim", 0)]
    assert device.read(64) == b"OKAY"
    assert dev.read_calls == [(0x81, 64, 250)]

    device.close()
    assert not device.connected
    assert usb_calls[-2:] == [("release", 0), ("dispose", -1)]


def test_second_open_keeps_claimed_device(monkeypatch, usb_calls):
    dev = FakeDev(_fastboot_config())
    device = _opened(monkeypatch, usb_calls, dev)
    monkeypatch.setattr(usb.core, "find", lambda **ids: pytest.fail("device looked up twice"))
    device.open()
    assert device.connected
    assert usb_calls == [("claim", 0)]


def test_read_skips_zero_length_packets(monkeypatch, usb_calls):
    dev = FakeDev(_fastboot_config(), reads=[b"", b"", b"OKAY"])
    device = _opened(monkeypatch, usb_calls, dev)
    assert device.read(64) == b"OKAY"
    assert len(dev.read_calls) == 3


def test_open_missing_device(monkeypatch):
    monkeypatch.setattr(usb.core, "find", lambda **ids: None)
    with pytest.raises(TransportError, match="18d1:4ee0"):
        UsbDevice(0x18D1, 0x4EE0).open()


def test_open_without_bulk_endpoints(monkeypatch, usb_calls):
    config = [FakeInterface(0, [FakeEndpoint(0x81, attributes=0x03)])]
    monkeypatch.setattr(usb.core, "find", lambda **ids: FakeDev(config))
    with pytest.raises(TransportError, match="endpoints"):
        UsbDevice(0x18D1, 0x4EE0).open()


def test_not_connected():
    device = UsbDevice(0x18D1, 0x4EE0)
    with pytest.raises(RuntimeError):
        device.read(64)
    with pytest.raises(RuntimeError):
        device.write_all(b"reboot")


def test_read_bounded_by_packet_size(monkeypatch, usb_calls):
    config = [FakeInterface(1, [FakeEndpoint(0x82, max_packet=32), FakeEndpoint(0x02, max_packet=32)])]
    dev = FakeDev(config, reads=[b"OKAY"])
    device = _opened(monkeypatch, usb_calls, dev)
    device.read(64)
    assert dev.read_calls[0][1] == 32


def test_read_error_mapping(monkeypatch, usb_calls):
    dev = FakeDev(_fastboot_config(), reads=[
        usb.core.USBTimeoutError("Operation timed out", errno=110),
        usb.core.USBError("Pipe error", errno=32),
    ])
    device = _opened(monkeypatch, usb_calls, dev)
    with pytest.raises(TransportTimeout):
        device.read(64)
    with pytest.raises(TransportError) as exc_info:
        device.read(64)
    assert not isinstance(exc_info.value, TransportTimeout)


def test_write_all_chunks_and_reports_progress(monkeypatch, usb_calls):
    monkeypatch.setattr(usb_transport, "WRITE_CHUNK", 4)
    progress: list[tuple[int, int]] = []

    class Recorder:
        def on_progress(self, transferred, total):
            progress.append((transferred, total))

    dev = FakeDev(_fastboot_config(), write_limit=3)
    device = _opened(monkeypatch, usb_calls, dev, observer=Recorder())
    device.write_all(b"0123456789")
    assert b"".join(dev.written) == b"0123456789"
    assert progress[-1] == (10, 10)
    assert [p[0] for p in progress] == sorted(p[0] for p in progress)


def test_observer_failure_does_not_abort(monkeypatch, usb_calls):
    class Broken:
        def on_progress(self, transferred, total):
            raise ValueError("boom")

    dev = FakeDev(_fastboot_config())
    device = _opened(monkeypatch, usb_calls, dev, observer=Broken())
    device.write_all(b"reboot")
    assert dev.written == [b"reboot"]


def test_write_error_mapping(monkeypatch, usb_calls):
    dev = FakeDev(_fastboot_config())

    def fail(address, data, timeout=None):
        raise usb.core.USBTimeoutError("Operation timed out", errno=110)

    dev.write = fail
    device = _opened(monkeypatch, usb_calls, dev)
    with pytest.raises(TransportTimeout):
        device.write_all(b"reboot")


def test_logging_observer(caplog):
    observer = LoggingTransferObserver(min_total=100, step=50)
    with caplog.at_level(TRACE):
        observer.on_progress(6, 6)
        assert caplog.records == []
        for sent in (10, 40, 60, 100):
            observer.on_progress(sent, 100)
    messages = [r.getMessage() for r in caplog.records]
    assert messages == [
        "sent 10/100 bytes (0%)",
        "sent 60/100 bytes (50%)",
        "sent 100/100 bytes (100%)",
    ]
    assert all(r.levelno == TRACE for r in caplog.records)
    assert logging.getLevelName(TRACE) == "TRACE"


def test_logging_observer_restarts_after_cut_short_transfer(caplog):
    observer = LoggingTransferObserver(min_total=100, step=50)
    with caplog.at_level(TRACE):
        observer.on_progress(10, 100)
        observer.on_progress(60, 100)
        # the first write failed here; the next one has the same size
        observer.on_progress(10, 100)
        observer.on_progress(20, 200)
    messages = [r.getMessage() for r in caplog.records]
    assert messages == [
        "sent 10/100 bytes (0%)",
        "sent 60/100 bytes (50%)",
        "sent 10/100 bytes (0%)",
        "sent 20/200 bytes (0%)",
    ]
