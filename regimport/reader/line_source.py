# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/reader/line_source.py
"""
Incremental, encoding-aware line reader for .reg files.

The encoding is fixed once from the first two bytes of the file:
  - FF FE        -> WIDE (UTF-16LE, BOM excluded from the text)
  - anything else -> SINGLE_BYTE (host code page)

Lines are returned without their terminator. "\r\n", "\n" and a lone "\r"
each end one line. Buffers live on the instance; close() drops them.
"""
from __future__ import annotations

import codecs
import logging
import re
from enum import Enum
from typing import BinaryIO, Iterator, Optional

from ..config.config_loader import DEFAULT_BUFFER_SIZE
from ..core.logger import Log

BOM_UTF16LE = b"\xff\xfe"

_TERMINATOR_RE = re.compile(r"[\r\n]")


class Encoding(Enum):
    SINGLE_BYTE = "single-byte"
    WIDE = "wide"


def sniff_encoding(first_two: bytes) -> Encoding:
    """Pick the encoding from the two leading bytes of the stream."""
    return Encoding.WIDE if first_two[:2] == BOM_UTF16LE else Encoding.SINGLE_BYTE


def decode_prefix(raw: bytes, codepage: str) -> str:
    """Decode the sniffed bytes of a single-byte file so they can rejoin the header line."""
    return raw.decode(codepage, errors="replace")


def _make_decoder(encoding: Encoding, codepage: str) -> codecs.IncrementalDecoder:
    if encoding is Encoding.WIDE:
        return codecs.getincrementaldecoder("utf-16-le")(errors="replace")
    if encoding is Encoding.SINGLE_BYTE:
        return codecs.getincrementaldecoder(codepage)(errors="replace")
    raise ValueError(f"unsupported encoding: {encoding!r}")


class LineSource:
    """
    Lazy, finite, non-restartable sequence of decoded lines.

    The source borrows the stream (the caller closes it) and owns its
    buffers. A logical line may span any number of physical reads; the read
    size doubles whenever a pending partial line fills the buffer.
    """

    def __init__(
        self,
        stream: BinaryIO,
        encoding: Encoding,
        *,
        codepage: str = "cp1252",
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or logging.getLogger("regimport.reader")
        self.encoding = encoding
        self.codepage = codepage
        self.lines_read = 0

        self._stream: Optional[BinaryIO] = stream
        self._decoder: Optional[codecs.IncrementalDecoder] = _make_decoder(encoding, codepage)
        self._capacity = max(int(buffer_size), 4)
        self._pending = ""
        self._eof = False
        self._done = False

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._stream is None

    def close(self) -> None:
        """Invalidate all buffers. Safe to call more than once."""
        if self._stream is None:
            return
        self._stream = None
        self._decoder = None
        self._pending = ""
        self._done = True
        self.logger.debug("Line source closed after %d line(s)", self.lines_read)

    def __enter__(self) -> "LineSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line

    # ------------------------------------------------------------------
    # reading
    # ------------------------------------------------------------------

    def _fill(self) -> bool:
        """Read one physical chunk into the pending buffer. False at end of stream."""
        if self._eof or self._stream is None or self._decoder is None:
            return False

        if self._capacity - len(self._pending) < 3:
            self._capacity *= 2
            Log.trace(self.logger, "Line buffer grown to %d", self._capacity)

        count = max(self._capacity - len(self._pending) - 1, 1)
        if self.encoding is Encoding.WIDE:
            count *= 2

        raw = self._stream.read(count)
        if not raw:
            self._eof = True
            self._pending += self._decoder.decode(b"", final=True)
            return False

        self._pending += self._decoder.decode(raw)
        return True

    def next_line(self) -> Optional[str]:
        """Return the next line without its terminator, or None at end of stream."""
        if self._done:
            return None

        while True:
            m = _TERMINATOR_RE.search(self._pending)
            if m is None:
                if self._fill():
                    continue
                # End of stream: whatever is left is the final line.
                line = self._pending
                self._pending = ""
                self._done = True
                self.lines_read += 1
                return line

            idx = m.start()
            if self._pending[idx] == "\r" and idx + 1 == len(self._pending) and self._fill():
                # "\r" at the end of the buffer; look at the next chunk before deciding.
                continue

            end = idx + 1
            if self._pending[idx] == "\r" and self._pending[end:end + 1] == "\n":
                end += 1

            line = self._pending[:idx]
            self._pending = self._pending[end:]
            self.lines_read += 1
            return line
