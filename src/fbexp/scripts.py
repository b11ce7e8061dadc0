# filename : scripts.py
# created  : 10/18/2026


import logging

import click

from fbexp.core.transport.logging import PROTOCOL, TRACE
from fbexp.core.transport.usb import DEFAULT_TIMEOUT_MS

lg = logging.getLogger(__name__)


def _hex_id(ctx, param, value):
    try:
        return int(value, 16)
    except ValueError:
        raise click.BadParameter(f"expected a hex id, got '{value}'")


@click.command()
@click.option("-v", "--verbose", is_flag=True, help="TRACE level (show raw traffic).")
@click.option("--vid", default="0451", callback=_hex_id, help="USB vendor id (hex).")
@click.option("--pid", default="d022", callback=_hex_id, help="USB product id (hex).")
@click.option(
    "-t",
    "--timeout",
    type=click.IntRange(min=1),
    default=DEFAULT_TIMEOUT_MS,
    show_default=True,
    help="Per-transfer USB timeout in milliseconds.",
)
@click.option(
    "--follow-info",
    is_flag=True,
    help="Keep reading past INFO replies until OKAY/FAIL/DATA.",
)
@click.option(
    "-c",
    "--command",
    "commands",
    multiple=True,
    help="Command line to run, e.g. 'getvar name=version' (repeatable).",
)
@click.option(
    "-f",
    "--file",
    "file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Run commands from a file.",
)
@click.option(
    "-i",
    "--interactive",
    is_flag=True,
    help="Interactive REPL (default when no commands or file are given).",
)
def fbexp(verbose, vid, pid, timeout, follow_info, commands, file, interactive):

    logging.basicConfig(
        level=TRACE if verbose else PROTOCOL,
        format="%(levelname)-8s %(name)s: %(message)s",
    )

    if interactive:
        commands, file = (), None

    from fbexp.app.main import main
    ok = main(
        vid=vid,
        pid=pid,
        timeout_ms=timeout,
        file=file,
        commands=list(commands),
        follow_info=follow_info,
    )
    raise SystemExit(0 if ok else 1)
