# SPDX-License-Identifier: LGPL-3.0-or-later
from .line_source import BOM_UTF16LE, Encoding, LineSource, decode_prefix, sniff_encoding

__all__ = ["BOM_UTF16LE", "Encoding", "LineSource", "decode_prefix", "sniff_encoding"]
