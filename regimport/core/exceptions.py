# SPDX-License-Identifier: LGPL-3.0-or-later
# regimport/core/exceptions.py
"""
Error types.

Fatal aborts the whole import and becomes the process exit code.
StoreError is raised by key stores; the parser contains it to the key
section or value it happened in (only hive commit failures escape).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


def _exit_code(x: Any) -> int:
    try:
        code = int(x)
    except (TypeError, ValueError):
        return 1
    if code < 0:
        return 1
    return min(code, 255)


def _one_line(s: str, limit: int = 600) -> str:
    s = " ".join((s or "").split())
    return s if len(s) <= limit else s[: limit - 3] + "..."


def _compact(ctx: Dict[str, Any]) -> str:
    return ", ".join(f"{k}={ctx[k]!r}" for k in sorted(ctx))


@dataclass(eq=False)
class RegImportError(Exception):
    """
    Base error. `code` is an exit code (clamped to 0..255), `msg` is a single
    line shown to users, `context` carries things like the file or .reg line.
    """
    code: int = 1
    msg: str = "error"
    cause: Optional[BaseException] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.code = _exit_code(self.code)
        self.msg = _one_line(self.msg) or type(self).__name__
        self.context = dict(self.context or {})
        super().__init__(self.msg)

    def with_context(self, **ctx: Any) -> "RegImportError":
        self.context.update(ctx)
        return self

    def user_message(self, *, include_context: bool = False, include_cause: bool = False) -> str:
        out = self.msg
        if include_context and self.context:
            out += f" [{_one_line(_compact(self.context))}]"
        if include_cause and self.cause is not None:
            out += f" (cause: {type(self.cause).__name__}: {_one_line(str(self.cause))})"
        return out

    def __str__(self) -> str:
        return self.msg

    def to_dict(self, *, include_cause: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": type(self).__name__,
            "code": self.code,
            "message": self.msg,
            "context": dict(self.context),
        }
        if include_cause and self.cause is not None:
            d["cause"] = {"type": type(self.cause).__name__, "message": _one_line(str(self.cause))}
        return d


class Fatal(RegImportError):
    """The import is abandoned; main() exits with `code`."""


class StoreError(RegImportError):
    """A key store could not open a key, set a value or commit."""


def wrap_fatal(msg: str, exc: Optional[BaseException] = None, code: int = 1, **context: Any) -> Fatal:
    return Fatal(code=code, msg=msg, cause=exc, context=context)


def wrap_store(msg: str, exc: Optional[BaseException] = None, code: int = 1, **context: Any) -> StoreError:
    return StoreError(code=code, msg=msg, cause=exc, context=context)


def format_exception_for_cli(e: BaseException, *, verbose: int = 0) -> str:
    """
    One line for the terminal: -v adds context, -vv adds the cause.
    """
    if isinstance(e, RegImportError):
        return e.user_message(include_context=verbose >= 1, include_cause=verbose >= 2)
    if verbose >= 2:
        return f"{type(e).__name__}: {_one_line(str(e))}"
    return _one_line(str(e)) or type(e).__name__
