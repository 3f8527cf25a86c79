# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/parser/escape.py
"""
Escape handling for double-quoted value names and REG_SZ data.

Recognized escapes: \\n \\r \\0 \\\\ \\". Any other escaped character is kept
as-is and reported. The unescaped text is never longer than its source.
"""
from __future__ import annotations

import logging
from typing import NamedTuple, Optional

_UNESCAPE = {
    "n": "\n",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    '"': '"',
}

_ESCAPE = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\0": "\\0",
}


class UnescapeResult(NamedTuple):
    ok: bool
    value: str
    end: int  # index just past the closing quote (or len(text) on failure)


def unescape_string(text: str, start: int = 0, *, logger: Optional[logging.Logger] = None) -> UnescapeResult:
    """
    Unescape `text` from `start` (just after an opening quote) up to the first
    unescaped double quote.

    Fails when the text ends before a closing quote or with a lone backslash.
    """
    out = []
    i = start
    n = len(text)

    while i < n:
        ch = text[i]
        if ch == '"':
            return UnescapeResult(True, "".join(out), i + 1)
        if ch == "\\":
            i += 1
            if i >= n:
                return UnescapeResult(False, "".join(out), n)
            esc = text[i]
            repl = _UNESCAPE.get(esc)
            if repl is None:
                (logger or logging.getLogger("regimport.parser")).warning(
                    "Unrecognized escape sequence [\\%s]", esc
                )
                repl = esc
            out.append(repl)
        else:
            out.append(ch)
        i += 1

    return UnescapeResult(False, "".join(out), n)


def escape_string(value: str) -> str:
    """Inverse of unescape_string() for the five recognized escapes (no surrounding quotes)."""
    return "".join(_ESCAPE.get(ch, ch) for ch in value)
