"""Logging setup shared by sketch-convert and sketch-view.

    - stderr console handler; optional size-rotated log file
    - JSON-lines mode for the file handler
    - context fields (app, file) attached to every record
    - Python warnings routed into logging
    - uncaught exceptions logged before exit

Public API:
    setup_logging("INFO", context={"app": "convert"})
    get_logger(__name__)
    push_context(file="cat.sk") / pop_context(["file"])
    install_excepthook()

Line formats:
    human: 2026-10-17T13:45:12.345Z | INFO     | app=view file=cat.sk | Rendered 1 frame(s)
    json:  {"t": "2026-10-17T13:45:12.345+00:00", "lvl": "INFO", "app": "view", "msg": "..."}

Calling setup_logging() again replaces the handlers it installed before.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "sketch_log_context", default={}
)

# Handlers owned by setup_logging(); foreign handlers on root are left alone
_installed: list[logging.Handler] = []


class ContextFormatter(logging.Formatter):
    """Render records as human-readable lines or JSON objects.

    Parameters
    ----------
    fmt_mode : str
        ``"human"`` or ``"json"``.
    use_color : bool
        Colour the level name (human mode, TTY only).
    tz : str
        ``"UTC"`` or ``"local"``.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt_mode: str = "human", use_color: bool = True, tz: str = "UTC") -> None:
        super().__init__()
        if fmt_mode not in ("human", "json"):
            raise ValueError(f"fmt_mode must be 'human' or 'json', got {fmt_mode!r}")
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()
        self.utc = tz.upper() == "UTC"

    def _timestamp(self, record: logging.LogRecord) -> datetime:
        if self.utc:
            return datetime.fromtimestamp(record.created, tz=timezone.utc)
        return datetime.fromtimestamp(record.created).astimezone()

    def format(self, record: logging.LogRecord) -> str:
        ts = self._timestamp(record)
        fields = _context.get()
        exc = self.formatException(record.exc_info) if record.exc_info else None

        if self.fmt_mode == "json":
            payload: dict[str, Any] = {
                "t": ts.isoformat(timespec="milliseconds"),
                "lvl": record.levelname,
                "name": record.name,
                "pid": os.getpid(),
                **fields,
                "msg": record.getMessage(),
            }
            if exc:
                payload["exc"] = exc
            return json.dumps(payload, default=str)

        level = f"{record.levelname:<8}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"
        stamp = ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")

        columns = [stamp, level]
        if fields:
            columns.append(" ".join(f"{k}={v}" for k, v in fields.items()))
        columns.append(record.getMessage())
        line = " | ".join(columns)
        return f"{line}\n{exc}" if exc else line


def setup_logging(
    log_level: str = "INFO",
    log_file: str | None = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    max_bytes: int = 5_000_000,
    backup_count: int = 3,
    tz: str = "UTC",
    capture_warnings: bool = True,
    quiet_libs: list[str] | None = None,
    context: dict[str, Any] | None = None,
) -> list[logging.Handler]:
    """Configure the root logger for a sketch entrypoint.

    Parameters
    ----------
    log_level : str
        Root level name, e.g. ``"DEBUG"``.
    log_file : str | None
        Also log to this file (rotated at *max_bytes*, *backup_count* kept).
    json : bool
        Write the file handler as JSON lines; the console stays human.
    color : bool
        Colour console level names when stderr is a TTY.
    to_stderr : bool
        Attach the console handler.
    tz : str
        ``"UTC"`` or ``"local"`` timestamps.
    capture_warnings : bool
        Route ``warnings.warn`` through logging.
    quiet_libs : list[str] | None
        Logger names capped at WARNING (e.g. ``["PIL"]``).
    context : dict | None
        Initial context fields, e.g. ``{"app": "view"}``.

    Returns
    -------
    list[logging.Handler]
        Handlers added to the root logger.
    """
    root = logging.getLogger()
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()

    root.setLevel(log_level.upper())

    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter("human", color, tz))
        _installed.append(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        rotating.setFormatter(ContextFormatter("json" if json else "human", False, tz))
        _installed.append(rotating)

    for handler in _installed:
        root.addHandler(handler)

    for name in quiet_libs or ():
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(capture_warnings)

    if context:
        push_context(**context)

    return list(_installed)


def get_logger(name: str) -> logging.Logger:
    """Same as ``logging.getLogger``; kept for a single import site."""
    return logging.getLogger(name)


def push_context(**fields: Any) -> None:
    """Add *fields* to every subsequent record in this context."""
    _context.set({**_context.get(), **fields})


def pop_context(keys: list[str] | None = None) -> None:
    """Drop the named context fields, or all of them when *keys* is None."""
    if keys is None:
        _context.set({})
    else:
        _context.set({k: v for k, v in _context.get().items() if k not in keys})


def install_excepthook() -> None:
    """Log uncaught exceptions at CRITICAL; Ctrl+C keeps the default hook."""

    def _hook(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logging.getLogger("sketch").critical(
            "Uncaught exception", exc_info=(exc_type, exc_value, exc_tb)
        )

    sys.excepthook = _hook
