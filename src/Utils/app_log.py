"""
app_log.py
Application log: the single sink every warning and error is reported through.

The entry point builds one LaunchLog and hands it (as log_fn) to the mod
manager, deployer and installer.  Each call formats a timestamped,
severity-tagged line:

    [INFO] [2024-05-01 18:30] Launched GUILTY GEAR Xrd Mod Manager
    [ERROR] [2024-05-01 18:30] Path .../Mods/Foo/mod.ini does not exist! Ignoring mod.

Lines are appended to Launch.log, kept in memory (log_text) and forwarded to
any registered listeners, e.g. the console echo in xrd_mod_manager.py.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, TextIO

_TIMESTAMP_FMT = "%Y-%m-%d %H:%M"

# Callback signature used by every core helper: (message, level)
LogFn = Callable[[str, "LogType"], None]


class LogType(Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


def format_line(message: str, level: LogType, when: datetime | None = None) -> str:
    """Return the log line for message, without the trailing newline."""
    stamp = (when or datetime.now()).strftime(_TIMESTAMP_FMT)
    return f"[{level.value}] [{stamp}] {message}"


def null_log(message: str, level: LogType = LogType.INFO) -> None:
    """log_fn used when the caller did not pass one."""


class LaunchLog:
    """
    Append-only, human-readable log.

    Parameters
    ----------
    log_path : Path | None
        File the lines are appended to.  None keeps the log in memory only.
    """

    def __init__(self, log_path: Path | None = None):
        self._file: TextIO | None = None
        self._listeners: list[Callable[[str], None]] = []
        self.log_path = log_path
        self.log_text = ""
        if log_path is not None:
            self._open(log_path)

    def _open(self, log_path: Path) -> None:
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(log_path, "a", encoding="utf-8")
        except OSError as exc:
            self._file = None
            self(f"Failed to create log file! {exc}", LogType.ERROR)

    # -- Listeners ----------------------------------------------------------

    def add_listener(self, fn: Callable[[str], None]) -> None:
        """Register fn to receive every formatted line as it is logged."""
        self._listeners.append(fn)

    def remove_listener(self, fn: Callable[[str], None]) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    # -- Logging ------------------------------------------------------------

    def __call__(self, message: str, level: LogType = LogType.INFO) -> None:
        line = format_line(message, level)
        self.log_text += line + "\n"
        if self._file is not None:
            try:
                self._file.write(line + "\n")
                self._file.flush()
            except OSError:
                pass
        for fn in list(self._listeners):
            try:
                fn(line)
            except Exception:
                pass

    def lines(self, level: LogType | None = None) -> list[str]:
        """Return the logged lines, optionally only those of one severity."""
        out = self.log_text.splitlines()
        if level is None:
            return out
        prefix = f"[{level.value}]"
        return [line for line in out if line.startswith(prefix)]

    def close(self) -> None:
        if self._file is not None:
            try:
                self._file.close()
            except OSError:
                pass
            self._file = None
