from __future__ import annotations

import logging
from typing import Callable

from fbexp.core.base.agent import Agent
from fbexp.core.base.message import Message, Result

lg = logging.getLogger(__name__)

_HANDLES = "_handles_message"


def handles(message_cls: type[Message]) -> Callable:
    """Mark a terminal method as the handler for one message type."""

    def decorator(method: Callable) -> Callable:
        setattr(method, _HANDLES, message_cls)
        return method

    return decorator


class Terminal:
    """Turns app-layer messages into device operations.

    Subclasses mark handler methods with @handles; the handler table is
    built per class when it is defined and inherits the handlers of its
    bases. A subclass may override a base handler for the same message.
    """

    _handlers: dict[type[Message], str] = {}

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        table: dict[type[Message], str] = {}
        for klass in reversed(cls.__mro__[1:]):
            table.update(vars(klass).get("_handlers", {}))
        for name, attr in vars(cls).items():
            message_cls = getattr(attr, _HANDLES, None)
            if message_cls is not None:
                table[message_cls] = name
        cls._handlers = table

    def __init__(self, agent: Agent) -> None:
        self._agent = agent

    @property
    def agent(self) -> Agent:
        return self._agent

    def connect(self) -> None:
        self._agent.connect()

    def disconnect(self) -> None:
        self._agent.disconnect()

    def send(self, message: Message) -> Result:
        """Run the handler registered for the message's type."""
        name = self._handlers.get(type(message))
        if name is None:
            raise ValueError(f"unsupported message: {message}")
        lg.debug("%s -> %s", type(message).__name__, name)
        return getattr(self, name)(message)

    @property
    def supported_messages(self) -> list[type[Message]]:
        return list(self._handlers)

    def on_error(self, error: Exception) -> None:
        """Report an error that ended a session."""
        lg.error("terminal error: %s", error)
