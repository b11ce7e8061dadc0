from fbexp.core.transport.logging import PROTOCOL, TRACE
from fbexp.core.transport.observer import LoggingTransferObserver
from fbexp.core.transport.reply import Data, Fail, Info, Okay, Reply, decode
from fbexp.core.transport.types import (
    TransferObserver,
    Transport,
    TransportError,
    TransportTimeout,
)
from fbexp.core.transport.usb import UsbDevice

__all__ = [
    "Data",
    "Fail",
    "Info",
    "LoggingTransferObserver",
    "Okay",
    "PROTOCOL",
    "Reply",
    "TRACE",
    "TransferObserver",
    "Transport",
    "TransportError",
    "TransportTimeout",
    "UsbDevice",
    "decode",
]
