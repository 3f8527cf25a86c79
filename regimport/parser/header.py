# SPDX-License-Identifier: LGPL-3.0-or-later
# regimport/parser/header.py
from __future__ import annotations

from enum import Enum

HEADER_31 = "REGEDIT"
HEADER_40 = "REGEDIT4"
HEADER_50 = "Windows Registry Editor Version 5.00"


class RegVersion(Enum):
    WIN31 = "3.1"
    V4 = "4"
    V5 = "5.00"
    FUZZY = "fuzzy"
    INVALID = "invalid"


def classify_header(text: str) -> RegVersion:
    """
    Classify the first line of a .reg file.

    Lines that start with "REGEDIT" but are not an exact header ("REGEDIT 4",
    "REGEDIT9") are FUZZY: accepted, but nothing gets imported.
    """
    s = text.strip(" \t")

    if s == HEADER_31:
        return RegVersion.WIN31
    if s == HEADER_40:
        return RegVersion.V4
    if s == HEADER_50:
        return RegVersion.V5
    if s.startswith(HEADER_31):
        return RegVersion.FUZZY
    return RegVersion.INVALID
