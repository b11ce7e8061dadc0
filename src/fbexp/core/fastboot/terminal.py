from __future__ import annotations

from fbexp.core.base import Agent, Terminal, handles
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


class FastbootTerminal(Terminal):
    """Terminal for a fastboot device.

    Device rejections come back as results with ``success=False``;
    transport errors propagate.
    """

    def __init__(self, agent: Agent) -> None:
        super().__init__(agent)
        self._fb = Fastboot(agent.transmit)

    @handles(GetVarMessage)
    def _getvar(self, message: GetVarMessage) -> GetVarResult:
        try:
            value = self._fb.getvar(message.name)
        except FastbootError as exc:
            return GetVarResult(success=False, message=exc.message)
        return GetVarResult(success=True, value=value)

    @handles(DownloadMessage)
    def _download(self, message: DownloadMessage) -> DownloadResult:
        try:
            self._fb.download(message.data)
        except FastbootError as exc:
            return DownloadResult(success=False, message=exc.message)
        return DownloadResult(success=True, size=len(message.data))

    @handles(FlashMessage)
    def _flash(self, message: FlashMessage) -> StatusResult:
        return self._status(self._fb.flash, message.partition)

    @handles(EraseMessage)
    def _erase(self, message: EraseMessage) -> StatusResult:
        return self._status(self._fb.erase, message.partition)

    @handles(RebootMessage)
    def _reboot(self, message: RebootMessage) -> StatusResult:
        return self._status(self._fb.reboot)

    @staticmethod
    def _status(operation, *args) -> StatusResult:
        try:
            operation(*args)
        except FastbootError as exc:
            return StatusResult(success=False, message=exc.message)
        return StatusResult(success=True)
