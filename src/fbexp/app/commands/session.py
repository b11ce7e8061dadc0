"""Session management commands."""

from __future__ import annotations

import logging

lg = logging.getLogger(__name__)

_raw_commands: set[str] = set()


def cmd_connect(runner) -> bool:
    """Open the device."""
    runner._terminal.connect()
    return True


def cmd_disconnect(runner) -> bool:
    """Release the device."""
    runner._terminal.disconnect()
    return True


def cmd_reconnect(runner) -> bool:
    """Release and reopen the device (e.g. after reboot)."""
    runner._terminal.disconnect()
    runner._terminal.connect()
    return True


def cmd_info(runner) -> bool:
    """Show what has been collected from the device."""
    lg.info("Device:\n%s", runner._info.format())
    return True


def _set_follow_info(runner, value: str) -> None:
    runner._terminal.agent.follow_info = value.lower() in ("true", "yes", "1")
    lg.info("follow_info = %s", runner._terminal.agent.follow_info)


_settings: dict[str, callable] = {
    "follow_info": _set_follow_info,
}
