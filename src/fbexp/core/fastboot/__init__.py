from fbexp.core.fastboot.messages import (
    DownloadMessage,
    DownloadResult,
    EraseMessage,
    FlashMessage,
    GetVarMessage,
    GetVarResult,
    RebootMessage,
    StatusResult,
)
from fbexp.core.fastboot.protocol import Fastboot, FastbootError
from fbexp.core.fastboot.terminal import FastbootTerminal

__all__ = [
    "DownloadMessage",
    "DownloadResult",
    "EraseMessage",
    "Fastboot",
    "FastbootError",
    "FastbootTerminal",
    "FlashMessage",
    "GetVarMessage",
    "GetVarResult",
    "RebootMessage",
    "StatusResult",
]
