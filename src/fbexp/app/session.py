"""Fastboot session orchestrator.

Constructs the full stack (UsbDevice -> Agent -> Terminal -> Runner),
connects, runs commands, a command file or the REPL, and disconnects.
"""

from __future__ import annotations

import logging

from fbexp.app.commands import COMMAND_MODULES
from fbexp.app.runner import Runner
from fbexp.core.base import Agent
from fbexp.core.fastboot import FastbootTerminal
from fbexp.core.transport import LoggingTransferObserver, UsbDevice
from fbexp.core.transport.usb import DEFAULT_TIMEOUT_MS

lg = logging.getLogger(__name__)

DEFAULT_VID = 0x0451
DEFAULT_PID = 0xD022


def session(
    vid: int = DEFAULT_VID,
    pid: int = DEFAULT_PID,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    file: str | None = None,
    commands: list[str] | None = None,
    follow_info: bool = False,
) -> bool:
    """Open a fastboot session. Returns True if everything succeeded."""
    device = UsbDevice(vid, pid, timeout_ms=timeout_ms, observer=LoggingTransferObserver())
    agent = Agent(device, follow_info=follow_info)
    terminal = FastbootTerminal(agent)
    runner = Runner(terminal, COMMAND_MODULES)

    ok = False
    try:
        terminal.connect()
        if commands:
            ok = runner.run_lines(commands)
        elif file:
            ok = runner.run_file(file)
        else:
            runner.run_interactive()
            ok = True
    except Exception as exc:
        terminal.on_error(exc)
    finally:
        terminal.disconnect()
    return ok
