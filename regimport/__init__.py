# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/__init__.py
"""
regimport - import Windows .reg files into registry hives

Usage as a library:

    from regimport import reg_import, MemoryStore, HiveStore

    store = MemoryStore()
    result = reg_import("setup.reg", store)
    assert result.ok

    with HiveStore({"HKLM\\\\SOFTWARE": "/tmp/SOFTWARE"}) as hive:
        reg_import("setup.reg", hive)
"""

__version__ = "0.1.0"

from .config import ImportConfig, load_config
from .core import Fatal, RegImportError, StoreError
from .importer import ImportResult, import_stream, reg_import
from .parser import Parser, RegVersion
from .reader import Encoding, LineSource
from .store import HiveStore, KeyStore, MemoryStore, RootKey

__all__ = [
    "__version__",
    "ImportConfig",
    "load_config",
    "Fatal",
    "RegImportError",
    "StoreError",
    "ImportResult",
    "import_stream",
    "reg_import",
    "Parser",
    "RegVersion",
    "Encoding",
    "LineSource",
    "HiveStore",
    "KeyStore",
    "MemoryStore",
    "RootKey",
]
