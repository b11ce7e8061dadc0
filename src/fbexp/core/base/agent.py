from __future__ import annotations

import logging

from fbexp.core.transport import PROTOCOL, TRACE, Info, Reply, Transport, TransportTimeout, decode
from fbexp.core.transport.logging import log_traffic

lg = logging.getLogger(__name__)

# Replies are designed to fit a single small frame.
MAX_REPLY_LEN = 64


class Agent:
    """Agent that owns a transport and performs request/reply exchanges.

    Fastboot is synchronous: every write is followed by a blocking wait
    for the device's reply. Protocol operations live in the Fastboot
    class, which receives agent.transmit as a callable.

    With ``follow_info`` set, INFO replies are logged and the agent
    keeps reading until a terminal reply arrives. Otherwise the first
    reply of any kind ends the exchange.
    """

    def __init__(self, transport: Transport, follow_info: bool = False) -> None:
        self._transport = transport
        self.follow_info = follow_info

    @property
    def transport(self) -> Transport:
        return self._transport

    def connect(self) -> None:
        """Open the transport if it supports it."""
        open_ = getattr(self._transport, "open", None)
        if open_ is not None:
            open_()
            lg.info("connected")

    def disconnect(self) -> None:
        """Close the transport if it supports it."""
        close = getattr(self._transport, "close", None)
        if close is not None:
            close()

    def transmit(self, payload: bytes) -> Reply:
        """Write payload, then block until the device replies.

        A TransportTimeout while waiting is not an error: the read is
        simply issued again, with no upper bound. Write failures and
        any other transport error propagate to the caller.
        """
        log_traffic(lg, ">> ", payload)
        self._transport.write_all(payload)
        while True:
            reply = self._receive()
            if self.follow_info and isinstance(reply, Info):
                lg.log(PROTOCOL, "(device) %s", reply.payload)
                continue
            return reply

    def _receive(self) -> Reply:
        while True:
            try:
                raw = self._transport.read(MAX_REPLY_LEN)
            except TransportTimeout:
                lg.log(TRACE, "waiting for reply")
                continue
            log_traffic(lg, "<< ", raw)
            return decode(raw)
