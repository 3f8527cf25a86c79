# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/parser/state_machine.py
"""
.reg file parser.

The parser is a state machine over decoded lines. Each state handler gets a
cursor into the current line and returns either a new cursor (the next
handler continues on the same line) or None when the line source is
exhausted. Handlers that need a fresh line read it themselves.

    HEADER ──► PARSE_WIN31_LINE ◄──────────────┐
       │                  │                    │
       └──► LINE_START ◄──┼── KEY_NAME         │
              │  ▲        ▼                    │
              │  └───── SET_VALUE ─────────────┘
              ▼             ▲
  DEFAULT/QUOTED_VALUE_NAME │
              ▼             │
    DATA_START ► DATA_TYPE ► STRING_DATA / DWORD_DATA

The current line is owned by the parser and may be narrowed destructively
(truncation at ']', trailing blank trimming) as parsing proceeds.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional

from ..core.exceptions import StoreError
from ..core.logger import Log
from ..reader.line_source import LineSource
from ..store.base import KeyHandle, KeyStore
from ..store.roots import RootKey, split_key_path
from .escape import unescape_string
from .header import RegVersion, classify_header
from .literals import RegType, convert_hex_to_dword, parse_data_type

_BLANKS = " \t"

WIN31_ROOT_LITERAL = "HKEY_CLASSES_ROOT"


class ParserState(Enum):
    HEADER = auto()  # parsing the registry file version header
    PARSE_WIN31_LINE = auto()  # parsing a Windows 3.1 registry line
    LINE_START = auto()  # at the beginning of a registry line
    KEY_NAME = auto()  # parsing a key name
    DEFAULT_VALUE_NAME = auto()  # parsing a default value name
    QUOTED_VALUE_NAME = auto()  # parsing a double-quoted value name
    DATA_START = auto()  # preparing for data parsing operations
    DATA_TYPE = auto()  # parsing the registry data type
    STRING_DATA = auto()  # parsing REG_SZ data
    DWORD_DATA = auto()  # parsing DWORD data
    SET_VALUE = auto()  # adding a value to the registry


MAX_KEPT_DIAGNOSTICS = 100


@dataclass
class ImportStats:
    lines_read: int = 0
    keys_opened: int = 0
    key_open_failures: int = 0
    values_set: int = 0
    values_dropped: int = 0
    diagnostic_count: int = 0
    # first diagnostics only; diagnostic_count has the total
    diagnostics: List[str] = field(default_factory=list)
    max_diagnostics: int = MAX_KEPT_DIAGNOSTICS

    def add_diagnostic(self, text: str) -> None:
        self.diagnostic_count += 1
        if len(self.diagnostics) < self.max_diagnostics:
            self.diagnostics.append(text)

    def as_dict(self) -> Dict[str, int]:
        return {
            "lines": self.lines_read,
            "keys": self.keys_opened,
            "key_failures": self.key_open_failures,
            "values": self.values_set,
            "dropped": self.values_dropped,
            "diagnostics": self.diagnostic_count,
        }


def _skip_blanks(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in _BLANKS:
        pos += 1
    return pos


def encode_reg_sz(s: str) -> bytes:
    """REG_SZ payload: UTF-16LE with NUL terminator."""
    return (s + "\0").encode("utf-16le", errors="replace")


class Parser:
    """
    Drives one import: reads lines from `source`, writes into `store`.

    `header_prefix` holds the two characters consumed by encoding detection
    in single-byte files; they are put back in front of the first line
    before the header is classified.
    """

    def __init__(
        self,
        source: LineSource,
        store: KeyStore,
        *,
        header_prefix: str = "",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.source = source
        self.store = store
        self.header_prefix = header_prefix
        self.logger = logger or logging.getLogger("regimport.parser")

        self.reg_version: Optional[RegVersion] = None
        self.hkey: Optional[KeyHandle] = None
        self.key_name: Optional[str] = None
        self.value_name: Optional[str] = None
        self.parse_type: Optional[RegType] = None
        self.data_type: int = 0
        self.data: Optional[bytes] = None
        self.state = ParserState.HEADER
        self.stats = ImportStats()

        self._line = ""
        self._handlers: Dict[ParserState, Callable[[int], Optional[int]]] = {
            ParserState.HEADER: self._header_state,
            ParserState.PARSE_WIN31_LINE: self._parse_win31_line_state,
            ParserState.LINE_START: self._line_start_state,
            ParserState.KEY_NAME: self._key_name_state,
            ParserState.DEFAULT_VALUE_NAME: self._default_value_name_state,
            ParserState.QUOTED_VALUE_NAME: self._quoted_value_name_state,
            ParserState.DATA_START: self._data_start_state,
            ParserState.DATA_TYPE: self._data_type_state,
            ParserState.STRING_DATA: self._string_data_state,
            ParserState.DWORD_DATA: self._dword_data_state,
            ParserState.SET_VALUE: self._set_value_state,
        }

    # ------------------------------------------------------------------
    # driving
    # ------------------------------------------------------------------

    def run(self) -> RegVersion:
        """Run the state machine to the end of the input and return the detected version."""
        pos: Optional[int] = 0
        while pos is not None:
            pos = self._handlers[self.state](pos)
        return self.reg_version or RegVersion.INVALID

    def close(self) -> None:
        """Close the open key, drop the pending value and release the line source."""
        self._close_key()
        self._clear_pending_value()
        self.source.close()

    def __enter__(self) -> "Parser":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _set_state(self, state: ParserState) -> ParserState:
        """Set the new parser state and return the previous one."""
        prev = self.state
        self.state = state
        return prev

    def _get_line(self) -> bool:
        line = self.source.next_line()
        if line is None:
            return False
        self._line = line
        self.stats.lines_read += 1
        Log.trace(self.logger, "line %d: %r", self.stats.lines_read, line)
        return True

    def _diag(self, msg: str, *args: object) -> None:
        text = msg % args if args else msg
        self.stats.add_diagnostic(text)
        self.logger.warning("%s", text, extra={"ctx": {"line": self.stats.lines_read}})

    def _close_key(self) -> None:
        if self.hkey is not None:
            self.store.close_key(self.hkey)
            self.hkey = None
            self.key_name = None

    def _set_open_key(self, handle: KeyHandle, path: str) -> None:
        self.hkey = handle
        self.key_name = path
        self.stats.keys_opened += 1

    def _open_key(self, path: str) -> bool:
        """Close the current key, then open/create `path` (ROOT\\sub\\path)."""
        self._close_key()

        root_name, sub_path = split_key_path(path)
        root = self.store.resolve_root(root_name)
        if root is None:
            self.logger.debug("Unknown registry root %r", root_name)
            return False

        try:
            handle = self.store.open_or_create_key(root, sub_path)
        except StoreError as e:
            self.logger.debug("open_or_create_key(%s, %r) failed: %s", root.name, sub_path, e)
            return False

        self._set_open_key(handle, path)
        return True

    def _open_win31_key(self, path: str) -> bool:
        """Windows 3.1 files only ever address HKEY_CLASSES_ROOT."""
        self._close_key()

        rest = path[len(WIN31_ROOT_LITERAL):]
        if rest and not rest.startswith("\\"):
            return False

        try:
            handle = self.store.open_or_create_key(RootKey.HKEY_CLASSES_ROOT, rest[1:] or None)
        except StoreError as e:
            self.logger.debug("open_or_create_key(HKEY_CLASSES_ROOT, %r) failed: %s", rest, e)
            return False

        self._set_open_key(handle, path)
        return True

    def _clear_pending_value(self) -> None:
        self.value_name = None
        self.parse_type = None
        self.data_type = 0
        self.data = None

    def _abandon_value(self) -> None:
        self.stats.values_dropped += 1
        self._clear_pending_value()
        self._set_state(ParserState.LINE_START)

    # ------------------------------------------------------------------
    # state handlers
    # ------------------------------------------------------------------

    def _header_state(self, pos: int) -> Optional[int]:
        if not self._get_line():
            return None

        self.reg_version = classify_header(self.header_prefix + self._line)
        self.logger.debug("Registry file header classified as %s", self.reg_version.name)

        if self.reg_version is RegVersion.WIN31:
            self._set_state(ParserState.PARSE_WIN31_LINE)
        elif self.reg_version in (RegVersion.V4, RegVersion.V5):
            self._set_state(ParserState.LINE_START)
        else:
            return None
        return 0

    def _parse_win31_line_state(self, pos: int) -> Optional[int]:
        if not self._get_line():
            return None

        line = self._line
        if not line.startswith(WIN31_ROOT_LITERAL):
            return 0

        key_end = 0
        while key_end < len(line) and not line[key_end].isspace():
            key_end += 1

        value = _skip_blanks(line, key_end)
        if line.startswith("=", value):
            value += 1
        if line.startswith(" ", value):
            value += 1  # at most one space is skipped

        key = line[:key_end]
        if not self._open_win31_key(key):
            self.stats.key_open_failures += 1
            self._diag("Unable to open the registry key '%s'.", key)
            return 0

        self.value_name = None
        self.parse_type = RegType.REG_SZ
        self.data_type = RegType.REG_SZ
        self.data = encode_reg_sz(line[value:])

        self._set_state(ParserState.SET_VALUE)
        return value

    def _line_start_state(self, pos: int) -> Optional[int]:
        if not self._get_line():
            return None

        line = self._line
        for i, ch in enumerate(line):
            if ch == "[":
                self._set_state(ParserState.KEY_NAME)
                return i + 1
            if ch == "@":
                self._set_state(ParserState.DEFAULT_VALUE_NAME)
                return i
            if ch == '"':
                self._set_state(ParserState.QUOTED_VALUE_NAME)
                return i + 1
            if ch in _BLANKS:
                continue
            return i

        return len(line)

    def _key_name_state(self, pos: int) -> Optional[int]:
        line = self._line
        key_end = line.rfind("]", pos)

        if (pos < len(line) and line[pos] in _BLANKS) or key_end < 0:
            self._set_state(ParserState.LINE_START)
            return pos

        self._line = line[:key_end]
        path = self._line[pos:]

        if path.startswith("-"):
            self._diag("Key deletion is not supported, skipping [%s]", path)
        elif not self._open_key(path):
            self.stats.key_open_failures += 1
            self._diag("Unable to open the registry key '%s'.", path)
        else:
            Log.trace(self.logger, "Opened key %s", path)

        self._set_state(ParserState.LINE_START)
        return pos

    def _default_value_name_state(self, pos: int) -> Optional[int]:
        self.value_name = None
        self._set_state(ParserState.DATA_START)
        return pos + 1

    def _quoted_value_name_state(self, pos: int) -> Optional[int]:
        res = unescape_string(self._line, pos, logger=self.logger)
        if not res.ok:
            self.logger.debug("Unterminated value name at line %d", self.stats.lines_read)
            self._set_state(ParserState.LINE_START)
            return pos

        self.value_name = res.value
        self._set_state(ParserState.DATA_START)
        return res.end

    def _data_start_state(self, pos: int) -> Optional[int]:
        line = self._line
        p = _skip_blanks(line, pos)
        if not line.startswith("=", p):
            self._abandon_value()
            return p
        p = _skip_blanks(line, p + 1)

        # trim trailing whitespace
        self._line = line.rstrip(_BLANKS)
        p = min(p, len(self._line))

        if self._line.startswith("-", p):
            self._diag("Value deletion is not supported, skipping %s", self.value_name or "@")
            self._abandon_value()
            return p

        self._set_state(ParserState.DATA_TYPE)
        return p

    def _data_type_state(self, pos: int) -> Optional[int]:
        match = parse_data_type(self._line, pos)
        if match is None:
            self.logger.debug("Unrecognized data type: %r", self._line[pos:pos + 16])
            self._abandon_value()
            return pos

        self.parse_type = match.parse_type
        self.data_type = match.data_type

        if match.parse_type is RegType.REG_SZ:
            self._set_state(ParserState.STRING_DATA)
        elif match.parse_type is RegType.REG_DWORD:
            self._set_state(ParserState.DWORD_DATA)
        else:
            # all hex data types, including undefined
            self.logger.debug("Binary data (type %d) is not supported, skipping %s", match.data_type, self.value_name or "@")
            self._abandon_value()
        return match.pos

    def _string_data_state(self, pos: int) -> Optional[int]:
        res = unescape_string(self._line, pos, logger=self.logger)
        if not res.ok:
            self._abandon_value()
            return res.end

        p = _skip_blanks(self._line, res.end)
        if p < len(self._line) and self._line[p] != ";":
            self._abandon_value()
            return p

        self.data = encode_reg_sz(res.value)
        self._set_state(ParserState.SET_VALUE)
        return p

    def _dword_data_state(self, pos: int) -> Optional[int]:
        dw = convert_hex_to_dword(self._line[pos:])
        if dw is None:
            self._abandon_value()
            return pos

        self.data = dw.to_bytes(4, "little")
        self._set_state(ParserState.SET_VALUE)
        return pos

    def _set_value_state(self, pos: int) -> Optional[int]:
        name = self.value_name
        if self.hkey is None:
            self.stats.values_dropped += 1
            self._diag("No registry key is open, dropping value %s", name or "@")
        else:
            try:
                self.store.set_value(self.hkey, name, self.data_type, self.data or b"")
                self.stats.values_set += 1
                Log.trace(self.logger, "Set %s\\%s", self.key_name, name or "@")
            except StoreError as e:
                self.stats.values_dropped += 1
                self._diag("Unable to set value %s under '%s': %s", name or "@", self.key_name, e)

        self._clear_pending_value()

        if self.reg_version is RegVersion.WIN31:
            self._set_state(ParserState.PARSE_WIN31_LINE)
        else:
            self._set_state(ParserState.LINE_START)
        return pos
