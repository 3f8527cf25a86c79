# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""
.reg file parsing:
- escape: quoted string unescaping
- literals: data type tags and DWORD conversion
- header: file version header classification
- state_machine: the line-driven parser
"""
from .escape import UnescapeResult, escape_string, unescape_string
from .header import RegVersion, classify_header
from .literals import DataTypeMatch, RegType, convert_hex_to_dword, parse_data_type
from .state_machine import ImportStats, Parser, ParserState

__all__ = [
    "UnescapeResult",
    "escape_string",
    "unescape_string",
    "RegVersion",
    "classify_header",
    "DataTypeMatch",
    "RegType",
    "convert_hex_to_dword",
    "parse_data_type",
    "ImportStats",
    "Parser",
    "ParserState",
]
