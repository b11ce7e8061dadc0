from __future__ import annotations

import logging
from dataclasses import dataclass

import usb.core
import usb.util

from fbexp.core.transport.types import TransferObserver, TransportError, TransportTimeout

lg = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 1000

# Bulk writes are issued in chunks of this size; the observer is
# notified after each one.
WRITE_CHUNK = 64 * 1024


@dataclass
class Endpoint:
    iface: int
    address: int
    max_packet_size: int


def _is_bulk(ep, direction: int) -> bool:
    return (
        usb.util.endpoint_direction(ep.bEndpointAddress) == direction
        and usb.util.endpoint_type(ep.bmAttributes) == usb.util.ENDPOINT_TYPE_BULK
    )


def _find_endpoints(config) -> tuple[Endpoint | None, Endpoint | None]:
    """Return the first bulk IN and bulk OUT endpoints of a configuration."""
    e_in = e_out = None
    for intf in config:
        for ep in intf:
            if e_in is None and _is_bulk(ep, usb.util.ENDPOINT_IN):
                e_in = Endpoint(intf.bInterfaceNumber, ep.bEndpointAddress, ep.wMaxPacketSize)
            if e_out is None and _is_bulk(ep, usb.util.ENDPOINT_OUT):
                e_out = Endpoint(intf.bInterfaceNumber, ep.bEndpointAddress, ep.wMaxPacketSize)
    return e_in, e_out


def _io_error(exc: usb.core.USBError) -> TransportError:
    if isinstance(exc, usb.core.USBTimeoutError):
        return TransportTimeout(str(exc))
    return TransportError(str(exc))


class UsbDevice:
    """Wrapper around pyusb exposing a fastboot device as a byte stream.

    ``timeout_ms`` bounds every individual bulk transfer. A read that
    times out raises TransportTimeout, which the transfer loop retries.
    """

    def __init__(
        self,
        vid: int,
        pid: int,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        observer: TransferObserver | None = None,
    ) -> None:
        self.vid = vid
        self.pid = pid
        self.timeout_ms = timeout_ms
        self._observer = observer
        self._dev = None
        self._e_in: Endpoint | None = None
        self._e_out: Endpoint | None = None

    @property
    def connected(self) -> bool:
        return self._dev is not None

    def open(self) -> None:
        """Open the first device matching vid:pid and claim its bulk interfaces."""
        if self.connected:
            return
        dev = usb.core.find(idVendor=self.vid, idProduct=self.pid)
        if dev is None:
            raise TransportError(f"no device {self.vid:04x}:{self.pid:04x}")
        try:
            try:
                config = dev.get_active_configuration()
            except usb.core.USBError:
                dev.set_configuration()
                config = dev.get_active_configuration()
            e_in, e_out = _find_endpoints(config)
            if e_in is not None and e_out is not None:
                for iface in {e_in.iface, e_out.iface}:
                    usb.util.claim_interface(dev, iface)
        except usb.core.USBError as exc:
            usb.util.dispose_resources(dev)
            raise _io_error(exc) from exc
        if e_in is None or e_out is None:
            usb.util.dispose_resources(dev)
            raise TransportError("no bulk IN/OUT endpoints found")
        self._dev, self._e_in, self._e_out = dev, e_in, e_out
        lg.debug(
            "opened %04x:%04x IN=0x%02x OUT=0x%02x",
            self.vid, self.pid, e_in.address, e_out.address,
        )

    def close(self) -> None:
        if self._dev is None:
            return
        for iface in {self._e_in.iface, self._e_out.iface}:
            try:
                usb.util.release_interface(self._dev, iface)
            except usb.core.USBError as exc:
                lg.debug("release interface %d: %s", iface, exc)
        usb.util.dispose_resources(self._dev)
        self._dev = None
        self._e_in = self._e_out = None

    def _require(self):
        if self._dev is None:
            raise RuntimeError("not connected to a device")
        return self._dev

    def read(self, size: int) -> bytes:
        dev = self._require()
        if size == 0:
            return b""
        size = min(self._e_in.max_packet_size, size)
        # Zero-length packets carry no reply; wait for the next transfer.
        while True:
            try:
                data = bytes(dev.read(self._e_in.address, size, timeout=self.timeout_ms))
            except usb.core.USBError as exc:
                raise _io_error(exc) from exc
            if data:
                return data
            lg.debug("skipping zero-length packet")

    def write_all(self, data: bytes) -> None:
        dev = self._require()
        total = len(data)
        sent = 0
        while sent < total:
            chunk = data[sent : sent + WRITE_CHUNK]
            try:
                written = dev.write(self._e_out.address, chunk, timeout=self.timeout_ms)
            except usb.core.USBError as exc:
                raise _io_error(exc) from exc
            if written == 0:
                raise TransportError("device accepted no data")
            sent += written
            self._notify(sent, total)

    def _notify(self, transferred: int, total: int) -> None:
        if self._observer is None:
            return
        try:
            self._observer.on_progress(transferred, total)
        except Exception as exc:
            lg.warning("progress observer failed: %s", exc)
