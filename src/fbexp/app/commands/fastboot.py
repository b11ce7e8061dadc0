"""Fastboot commands.

Each ``cmd_*`` function is discovered by the runner; the name minus the
``cmd_`` prefix is the command name. All take raw string arguments:
partition and variable names are opaque device-defined strings.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fbexp.core.fastboot import (
    DownloadMessage,
    EraseMessage,
    FlashMessage,
    GetVarMessage,
    RebootMessage,
)

lg = logging.getLogger(__name__)

_raw_commands: set[str] = {"getvar", "download", "flash", "erase", "reboot"}


def _failed(op: str, message: str) -> bool:
    lg.error("%s failed: %s", op, message or "(no message)")
    return False


def cmd_getvar(runner, *, name: str = "") -> bool:
    """Read a fastboot variable (name=version, name=all, ...)."""
    if not name:
        lg.error("getvar needs name=")
        return False
    result = runner._terminal.send(GetVarMessage(name=name))
    if not result.success:
        return _failed(f"getvar {name}", result.message)
    runner._info.variables[name] = result.value
    lg.info("%s: %s", name, result.value)
    return True


def _download(runner, file: str) -> bool:
    data = Path(file).read_bytes()
    lg.info("downloading %s (%d bytes)", file, len(data))
    result = runner._terminal.send(DownloadMessage(data=data))
    if not result.success:
        return _failed("download", result.message)
    runner._info.downloaded = result.size
    return True


def cmd_download(runner, *, file: str = "") -> bool:
    """Stage a file in the device's download buffer."""
    if not file:
        lg.error("download needs file=")
        return False
    return _download(runner, file)


def cmd_flash(runner, *, partition: str = "", file: str = "") -> bool:
    """Flash the staged download (or file=, downloaded first) to partition=."""
    if not partition:
        lg.error("flash needs partition=")
        return False
    if file and not _download(runner, file):
        return False
    result = runner._terminal.send(FlashMessage(partition=partition))
    if not result.success:
        return _failed(f"flash {partition}", result.message)
    lg.info("flashed %s", partition)
    return True


def cmd_erase(runner, *, partition: str = "") -> bool:
    """Erase partition=."""
    if not partition:
        lg.error("erase needs partition=")
        return False
    result = runner._terminal.send(EraseMessage(partition=partition))
    if not result.success:
        return _failed(f"erase {partition}", result.message)
    lg.info("erased %s", partition)
    return True


def cmd_reboot(runner) -> bool:
    """Reboot the device."""
    result = runner._terminal.send(RebootMessage())
    if not result.success:
        return _failed("reboot", result.message)
    return True
