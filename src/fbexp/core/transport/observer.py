from __future__ import annotations

import logging

from fbexp.core.transport.logging import TRACE

lg = logging.getLogger(__name__)


class LoggingTransferObserver:
    """TransferObserver that logs write progress via Python logging.

    Small writes (commands) are skipped; only buffers of at least
    ``min_total`` bytes report progress, once per ``step`` percent.
    """

    def __init__(self, min_total: int = 4096, step: int = 10) -> None:
        self._min_total = min_total
        self._step = step
        self._last = -1
        self._total = 0
        self._sent = 0

    def on_progress(self, transferred: int, total: int) -> None:
        if total < self._min_total:
            return
        # A new write_all starts over, even if the previous one was cut short.
        if total != self._total or transferred < self._sent:
            self._last = -1
        self._total = total
        self._sent = transferred
        percent = transferred * 100 // total
        bucket = percent - percent % self._step
        if transferred == total:
            lg.log(TRACE, "sent %d/%d bytes (100%%)", transferred, total)
            self._last = -1
        elif bucket != self._last:
            lg.log(TRACE, "sent %d/%d bytes (%d%%)", transferred, total, bucket)
            self._last = bucket
