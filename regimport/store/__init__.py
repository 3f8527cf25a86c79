# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""
Registry stores the importer writes into:
- base: KeyStore interface and KeyHandle
- roots: root key names and key path splitting
- memory: in-memory tree (dry runs, tests)
- hive: local hive files through hivex
"""
from .base import KeyHandle, KeyStore
from .roots import RootKey, path_get_rootkey, split_key_path
from .memory import MemoryKey, MemoryStore, RegValue
from .hive import HiveStore

__all__ = [
    "KeyHandle",
    "KeyStore",
    "RootKey",
    "path_get_rootkey",
    "split_key_path",
    "MemoryKey",
    "MemoryStore",
    "RegValue",
    "HiveStore",
]
