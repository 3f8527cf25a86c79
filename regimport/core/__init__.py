# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""Core utilities: exceptions and logging."""

from .exceptions import Fatal, RegImportError, StoreError, format_exception_for_cli, wrap_fatal, wrap_store
from .logger import TRACE, Log

__all__ = [
    "Fatal",
    "RegImportError",
    "StoreError",
    "format_exception_for_cli",
    "wrap_fatal",
    "wrap_store",
    "TRACE",
    "Log",
]
