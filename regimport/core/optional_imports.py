# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/core/optional_imports.py
"""
Centralized optional imports.

hivex ships with libguestfs/hivex system packages rather than as a regular
wheel, so it may be missing on hosts that only do dry runs.
"""

from __future__ import annotations

# hivex (registry hive files)
try:
    import hivex  # type: ignore

    HIVEX_AVAILABLE = True
except Exception:
    hivex = None  # type: ignore
    HIVEX_AVAILABLE = False

__all__ = [
    "hivex",
    "HIVEX_AVAILABLE",
]
