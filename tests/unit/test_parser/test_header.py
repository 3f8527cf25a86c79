# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest

from regimport.parser.header import RegVersion, classify_header


@pytest.mark.unit
@pytest.mark.parametrize(
    "text,expected",
    [
        ("REGEDIT", RegVersion.WIN31),
        ("REGEDIT4", RegVersion.V4),
        ("Windows Registry Editor Version 5.00", RegVersion.V5),
        ("  REGEDIT4\t", RegVersion.V4),
        ("\tWindows Registry Editor Version 5.00  ", RegVersion.V5),
        ("REGEDIT 4", RegVersion.FUZZY),
        ("REGEDIT9", RegVersion.FUZZY),
        ("REGEDIT4FOO", RegVersion.FUZZY),
        ("regedit4", RegVersion.INVALID),
        ("", RegVersion.INVALID),
        ("Windows Registry Editor Version 5.0", RegVersion.INVALID),
        ("[HKEY_CURRENT_USER\\x]", RegVersion.INVALID),
    ],
)
def test_classify_header(text, expected):
    assert classify_header(text) is expected
