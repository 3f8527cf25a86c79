# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/parser/literals.py
"""
Typed data literals on the right-hand side of a value line.

    "text"          REG_SZ
    dword:0000001f  REG_DWORD
    hex:01,02       REG_BINARY
    hex(2):41,00    binary payload stored with type 2 (REG_EXPAND_SZ)
"""
from __future__ import annotations

import string
from enum import IntEnum
from typing import NamedTuple, Optional, Tuple

_HEX_DIGITS = frozenset(string.hexdigits)
_BLANKS = " \t"

MAX_DWORD = 0xFFFFFFFF


class RegType(IntEnum):
    REG_NONE = 0
    REG_SZ = 1
    REG_EXPAND_SZ = 2
    REG_BINARY = 3
    REG_DWORD = 4
    REG_MULTI_SZ = 7


def reg_type_name(t: int) -> str:
    try:
        return RegType(t).name
    except ValueError:
        return f"0x{t:x}"


class DataTypeMatch(NamedTuple):
    parse_type: RegType  # drives the next parser state
    data_type: int  # type written to the store
    pos: int  # cursor after the type tag


# tag, logical type, store type (None: read from "hex(NN):")
_DATA_TYPES: Tuple[Tuple[str, RegType, Optional[int]], ...] = (
    ('"', RegType.REG_SZ, RegType.REG_SZ),
    ("hex:", RegType.REG_BINARY, RegType.REG_BINARY),
    ("dword:", RegType.REG_DWORD, RegType.REG_DWORD),
    ("hex(", RegType.REG_BINARY, None),
)


def _parse_hex_type_id(text: str, pos: int) -> Optional[Tuple[int, int]]:
    """Parse the NN of "hex(NN):" starting at pos. Returns (type, cursor after ':')."""
    end = pos
    while end < len(text) and text[end] in _HEX_DIGITS:
        end += 1
    if end == pos:
        return None
    if text[end:end + 2] != "):":
        return None
    val = int(text[pos:end], 16)
    if val > MAX_DWORD:
        return None
    return val, end + 2


def parse_data_type(text: str, pos: int = 0) -> Optional[DataTypeMatch]:
    """
    Match the data type tag at text[pos:].

    Returns None when no tag matches or a "hex(NN):" tag is malformed.
    """
    for tag, parse_type, data_type in _DATA_TYPES:
        if not text.startswith(tag, pos):
            continue

        cur = pos + len(tag)
        if data_type is not None:
            return DataTypeMatch(parse_type, int(data_type), cur)

        parsed = _parse_hex_type_id(text, cur)
        if parsed is None:
            return None
        val, cur = parsed
        return DataTypeMatch(parse_type, val, cur)

    return None


def convert_hex_to_dword(text: str) -> Optional[int]:
    """
    Convert "  0000ff  ; comment" style DWORD text to an int.

    At most 8 hex digits; only blanks or a ';' comment may follow.
    """
    i = 0
    n = len(text)
    while i < n and text[i] in _BLANKS:
        i += 1

    start = i
    while i < n and text[i] in _HEX_DIGITS:
        i += 1
    digits = text[start:i]
    if not digits or len(digits) > 8:
        return None

    while i < n and text[i] in _BLANKS:
        i += 1
    if i < n and text[i] != ";":
        return None

    return int(digits, 16)
