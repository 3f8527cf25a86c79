# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/core/logger.py
"""
Project logging: a TRACE level, a colored console format, NDJSON output
and the `Log` facade used by the importer and the CLI.

Records may carry `extra={"ctx": {...}}`. A "line" entry is the .reg file
line being parsed and is shown in front of the message; other entries are
appended as key=value pairs.
"""
from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from termcolor import colored as _colored

TRACE = 5
if not hasattr(logging, "TRACE"):
    logging.TRACE = TRACE  # type: ignore[attr-defined]
    logging.addLevelName(TRACE, "TRACE")

# levelname -> (emoji, termcolor color)
_LEVELS: Dict[str, Tuple[str, str]] = {
    "TRACE": ("🧬", "cyan"),
    "DEBUG": ("🔍", "blue"),
    "INFO": ("✅", "green"),
    "WARNING": ("⚠️", "yellow"),
    "ERROR": ("💥", "red"),
    "CRITICAL": ("🧨", "red"),
}


def c(
    text: str,
    color: Optional[str] = None,
    attrs: Optional[List[str]] = None,
    *,
    enable: bool = True,
) -> str:
    """Colorize text with termcolor if enabled."""
    if not enable or not color:
        return text
    return _colored(text, color=color, attrs=attrs or [])


def _stderr_is_tty() -> bool:
    try:
        return bool(sys.stderr.isatty())
    except (AttributeError, ValueError):
        return False


def _stderr_takes_emoji() -> bool:
    enc = getattr(sys.stderr, "encoding", None) or "utf-8"
    try:
        "✅".encode(enc)
    except (LookupError, UnicodeEncodeError):
        return False
    return True


def _short(v: Any, limit: int = 200) -> str:
    s = str(v).replace("\r", "\\r").replace("\n", "\\n")
    return s if len(s) <= limit else s[: limit - 1] + "…"


def _split_ctx(record: logging.LogRecord) -> Tuple[Optional[Any], Dict[str, Any]]:
    """(.reg line number, remaining context) of a record."""
    ctx: Mapping[str, Any] = getattr(record, "ctx", None) or {}
    rest = {k: v for k, v in ctx.items() if k != "line"}
    return ctx.get("line"), rest


@dataclass(frozen=True)
class ConsoleStyle:
    color: bool = True
    emoji: bool = True
    show_ms: bool = False
    show_logger: bool = False  # e.g. regimport.parser
    show_pid: bool = False


class ConsoleFormatter(logging.Formatter):
    def __init__(self, style: ConsoleStyle):
        super().__init__()
        self._style = style

    def _stamp(self, created: float) -> str:
        dt = _dt.datetime.fromtimestamp(created)
        return dt.strftime("%H:%M:%S.%f")[:-3] if self._style.show_ms else dt.strftime("%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        emoji, color = _LEVELS.get(record.levelname, ("•", ""))
        if not self._style.emoji:
            emoji = "·"
        colorize = self._style.color and _stderr_is_tty()

        head = [self._stamp(record.created), emoji, c(f"{record.levelname:<8}", color, enable=colorize)]
        if self._style.show_pid:
            head.append(f"[pid={os.getpid()}]")
        if self._style.show_logger:
            head.append(f"[{record.name}]")

        line_no, rest = _split_ctx(record)
        if line_no is not None:
            head.append(f"L{line_no}:")

        msg = record.getMessage()
        if record.levelno >= logging.WARNING:
            msg = c(msg, color, ["bold"], enable=colorize)
        head.append(msg)
        head.extend(f"{k}={_short(v)}" for k, v in sorted(rest.items()))

        out = " ".join(head)
        if record.exc_info:
            tb = "\n".join("  " + ln for ln in self.formatException(record.exc_info).splitlines())
            out += "\n" + c(tb, "red", enable=colorize)
        return out


class JsonFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, msg, pid, ctx (+ module/lineno, exception)."""

    def __init__(self, *, include_src: bool = True):
        super().__init__()
        self._include_src = include_src

    def format(self, record: logging.LogRecord) -> str:
        obj: Dict[str, Any] = {
            "ts": _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
        }
        if self._include_src:
            obj["module"] = record.module
            obj["lineno"] = record.lineno

        ctx = getattr(record, "ctx", None)
        if ctx:
            obj["ctx"] = {str(k): _short(v) for k, v in ctx.items()}

        if record.exc_info:
            obj["exc_type"] = record.exc_info[0].__name__ if record.exc_info[0] else "Exception"
            obj["traceback"] = self.formatException(record.exc_info)

        return json.dumps(obj, ensure_ascii=False)


class Log:
    @staticmethod
    def _level_from_flags(verbose: int, quiet: int) -> int:
        """
        quiet wins over verbose:
          -qq ERROR, -q WARNING, default/-v INFO, -vv DEBUG, -vvv TRACE
        """
        if quiet >= 2:
            return logging.ERROR
        if quiet == 1:
            return logging.WARNING
        if verbose >= 3:
            return TRACE
        if verbose >= 2:
            return logging.DEBUG
        return logging.INFO

    @staticmethod
    def step(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.info("➡️  %s", msg, extra={"ctx": ctx} if ctx else None)

    @staticmethod
    def ok(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.info("✅ %s", msg, extra={"ctx": ctx} if ctx else None)

    @staticmethod
    def warn(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.warning("⚠️  %s", msg, extra={"ctx": ctx} if ctx else None)

    @staticmethod
    def fail(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.error("💥 %s", msg, extra={"ctx": ctx} if ctx else None)

    @staticmethod
    def trace(logger: logging.Logger, msg: str, *args: Any, **ctx: Any) -> None:
        # per-line parser chatter; skip formatting entirely unless -vvv
        if not logger.isEnabledFor(TRACE):
            return
        logger.log(TRACE, msg, *args, extra={"ctx": ctx} if ctx else None)

    @staticmethod
    def setup(
        verbose: int = 0,
        log_file: Optional[str] = None,
        *,
        quiet: int = 0,
        color: Optional[bool] = None,
        json_logs: bool = False,
        logger_name: str = "regimport",
    ) -> logging.Logger:
        """
        Configure and return the project logger.

        Console output goes to stderr (stdout is left to the dry-run report).
        log_file adds a file handler: NDJSON with json_logs, otherwise the
        console format without color and with logger names and pids.
        """
        logger = logging.getLogger(logger_name)
        logger.propagate = False

        level = Log._level_from_flags(verbose, quiet)
        logger.setLevel(level)

        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()

        handlers: List[logging.Handler] = []

        sh = logging.StreamHandler(stream=sys.stderr)
        if json_logs:
            sh.setFormatter(JsonFormatter())
        else:
            sh.setFormatter(
                ConsoleFormatter(
                    ConsoleStyle(
                        color=True if color is None else bool(color),
                        emoji=_stderr_takes_emoji(),
                        show_ms=verbose >= 3,
                        show_logger=verbose >= 2,
                    )
                )
            )
        handlers.append(sh)

        if log_file:
            fp = Path(log_file).expanduser().resolve()
            fp.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(fp, encoding="utf-8")
            if json_logs:
                fh.setFormatter(JsonFormatter())
            else:
                fh.setFormatter(ConsoleFormatter(ConsoleStyle(color=False, show_ms=True, show_logger=True, show_pid=True)))
            handlers.append(fh)

        for h in handlers:
            h.setLevel(level)
            logger.addHandler(h)

        logger.debug("Logger initialized (level=%s)", logging.getLevelName(level))
        Log.trace(logger, "TRACE enabled (verbose >= 3)")
        return logger
