"""Runner: holds session state, dispatches command lines.

A command line is ``name key=value ...``. A bare ``key`` means
``key=true``; ``#`` starts a comment. Commands come from ``cmd_*``
functions in command modules, which may also export ``_raw_commands``
(commands whose arguments stay strings) and ``_settings`` (handlers for
``set key=value``).
"""

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from functools import partial
from types import ModuleType

try:
    import readline
except ImportError:
    readline = None  # type: ignore[assignment]

from fbexp.app.deviceinfo import DeviceInfo

lg = logging.getLogger(__name__)

EXIT_COMMANDS = frozenset({"quit", "exit"})


class BreakRequested(Exception):
    """A 'break' line was reached in a command file."""


def _parse_value(s: str) -> int | str | bool:
    """Convert a non-raw argument: booleans, decimal or 0x ints, else str."""
    low = s.lower()
    if low in ("true", "yes"):
        return True
    if low in ("false", "no"):
        return False
    base = 16 if low.startswith("0x") else 10
    try:
        return int(s, base)
    except ValueError:
        return s


def parse_command(line: str) -> tuple[str, dict[str, str]] | None:
    """Split a line into (name, raw kwargs); None for blank/comment lines."""
    code = line.split("#", 1)[0].strip()
    if not code:
        return None
    name, *args = shlex.split(code)
    kwargs: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        kwargs[key] = value if sep else "true"
    return name, kwargs


@dataclass
class Command:
    func: Callable[..., bool]
    help: str = ""
    params: list[str] = field(default_factory=list)
    raw: bool = False


def _first_line(doc: str | None) -> str:
    return (doc or "").strip().split("\n")[0]


def _flag(value: str) -> bool:
    return value.lower() in ("true", "yes", "1")


class Runner:
    """Holds session state and dispatches commands to a terminal."""

    def __init__(self, terminal, command_modules: list[ModuleType]) -> None:
        self._terminal = terminal
        self._info = DeviceInfo()
        self._stop_on_error = True
        self._commands: dict[str, Command] = {}
        self._settings: dict[str, Callable[[Runner, str], None]] = {
            "log": Runner._set_log,
            "stop_on_error": Runner._set_stop_on_error,
        }
        for mod in command_modules:
            self._register(mod)
        self._commands["help"] = Command(self.cmd_help, _first_line(self.cmd_help.__doc__))
        self._commands["set"] = Command(
            self.cmd_set, _first_line(self.cmd_set.__doc__), list(self._settings), raw=True,
        )
        self._matches: list[str] = []

    def _register(self, mod: ModuleType) -> None:
        raw = getattr(mod, "_raw_commands", set())
        for attr, func in inspect.getmembers(mod, inspect.isfunction):
            if not attr.startswith("cmd_"):
                continue
            name = attr[len("cmd_"):]
            params = [p for p in inspect.signature(func).parameters if p != "runner"]
            self._commands[name] = Command(
                func=partial(func, self),
                help=_first_line(func.__doc__),
                params=params,
                raw=name in raw,
            )
        self._settings.update(getattr(mod, "_settings", {}))

    @property
    def info(self) -> DeviceInfo:
        return self._info

    # --- Settings ---

    def _set_log(self, value: str) -> None:
        level = logging.getLevelName(value.upper())
        if not isinstance(level, int):
            lg.warning("unknown log level: %s", value)
            return
        logging.getLogger().setLevel(level)
        lg.info("log = %s", value.upper())

    def _set_stop_on_error(self, value: str) -> None:
        self._stop_on_error = _flag(value)
        lg.info("stop_on_error = %s", self._stop_on_error)

    # --- Built-in commands ---

    def cmd_help(self) -> bool:
        """List available commands."""
        rows = [f"  {name:20s} {cmd.help}" for name, cmd in sorted(self._commands.items())]
        lg.info("Commands:\n%s", "\n".join(rows))
        return True

    def cmd_set(self, **kwargs: str) -> bool:
        """Change a setting (set log=DEBUG, set stop_on_error=false)."""
        for key, value in kwargs.items():
            handler = self._settings.get(key)
            if handler is None:
                lg.warning("unknown setting: %s", key)
                continue
            handler(self, value)
        return True

    # --- Execution ---

    def execute(self, line: str) -> bool:
        """Run one command line. Returns True on success.

        Raises StopIteration on quit/exit and BreakRequested on break.
        """
        parsed = parse_command(line)
        if parsed is None:
            return True
        name, raw_kwargs = parsed
        if name in EXIT_COMMANDS:
            raise StopIteration
        if name == "break":
            raise BreakRequested
        cmd = self._commands.get(name)
        if cmd is None:
            lg.error("unknown command: %s", name)
            return False
        if cmd.raw:
            kwargs: dict[str, object] = dict(raw_kwargs)
        else:
            kwargs = {k: _parse_value(v) for k, v in raw_kwargs.items()}
        try:
            return cmd.func(**kwargs)
        except TypeError as exc:
            lg.error("bad arguments for '%s': %s", name, exc)
        except Exception as exc:
            lg.error("command '%s' failed: %s", name, exc)
        return False

    def run_lines(self, lines: Iterable[str]) -> bool:
        """Execute lines in order. Returns True if all of them succeed."""
        for lineno, line in enumerate(lines, 1):
            try:
                ok = self.execute(line)
            except StopIteration:
                return True
            except BreakRequested:
                lg.info("break at line %d, type 'continue' to resume", lineno)
                if self._prompt_loop("fbexp (break)> ", EXIT_COMMANDS | {"continue"}) != "continue":
                    return False
                continue
            if not ok and self._stop_on_error:
                lg.error("stopped at line %d: %s", lineno, line.strip())
                return False
        return True

    def run_file(self, path: str) -> bool:
        with open(path) as f:
            return self.run_lines(f.readlines())

    def run_interactive(self) -> None:
        lg.info("interactive mode: type 'help' for commands, 'quit' to exit")
        self._prompt_loop("fbexp> ", EXIT_COMMANDS)

    # --- REPL ---

    def _candidates(self, words: list[str], at_new_word: bool) -> list[str]:
        if not words or (len(words) == 1 and not at_new_word):
            return sorted(self._commands) + sorted(EXIT_COMMANDS)
        cmd = self._commands.get(words[0])
        if cmd is None:
            return []
        used = {w.split("=", 1)[0] for w in words[1:]}
        return [p + "=" for p in cmd.params if p not in used]

    def _complete(self, text: str, state: int) -> str | None:
        """Readline completer for command and parameter names."""
        if state == 0:
            buf = readline.get_line_buffer()
            options = self._candidates(buf.split(), buf.endswith(" "))
            self._matches = [o for o in options if o.startswith(text)]
        return self._matches[state] if state < len(self._matches) else None

    def _prompt_loop(self, prompt: str, exit_commands: frozenset[str]) -> str | None:
        """Read and execute lines until an exit command, EOF or Ctrl-C.

        Returns the exit command typed, or None on EOF/Ctrl-C.
        """
        if readline is not None:
            readline.set_completer(self._complete)
            readline.set_completer_delims(" ")
            readline.parse_and_bind("tab: complete")
        while True:
            try:
                line = input(prompt)
            except (EOFError, KeyboardInterrupt):
                print()
                return None
            parsed = parse_command(line)
            name = parsed[0] if parsed else None
            if name in exit_commands:
                return name
            if name == "break":
                lg.warning("already in a break")
                continue
            try:
                self.execute(line)
            except StopIteration:
                return "quit"
