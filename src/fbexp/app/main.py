# filename : main.py
# created  : 10/18/2026


import logging

from fbexp.app.session import session

lg = logging.getLogger(__name__)


def main(
    vid: int,
    pid: int,
    timeout_ms: int,
    file: str | None = None,
    commands: list[str] | None = None,
    follow_info: bool = False,
) -> bool:
    lg.debug("fbexp v1 %04x:%04x timeout=%dms", vid, pid, timeout_ms)
    return session(
        vid=vid,
        pid=pid,
        timeout_ms=timeout_ms,
        file=file,
        commands=commands,
        follow_info=follow_info,
    )
