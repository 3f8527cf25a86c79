# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/store/memory.py
"""
In-memory registry tree.

Keys and value names are case-insensitive and case-preserving, like the
real registry. Every mutation is recorded so dry runs can report them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ..core.exceptions import StoreError
from ..parser.escape import escape_string
from ..parser.literals import RegType, reg_type_name
from .base import KeyHandle, KeyStore
from .roots import RootKey, path_get_rootkey, split_components, split_key_path


@dataclass
class RegValue:
    name: Optional[str]
    reg_type: int
    data: bytes


@dataclass
class MemoryKey:
    name: str
    subkeys: Dict[str, "MemoryKey"] = field(default_factory=dict)
    values: Dict[str, RegValue] = field(default_factory=dict)

    def child(self, name: str) -> Optional["MemoryKey"]:
        return self.subkeys.get(name.lower())

    def ensure_child(self, name: str) -> "MemoryKey":
        k = self.subkeys.get(name.lower())
        if k is None:
            k = MemoryKey(name)
            self.subkeys[name.lower()] = k
        return k


def _value_slot(name: Optional[str]) -> str:
    return (name or "").lower()


def format_value_data(reg_type: int, data: bytes) -> str:
    """Short human-readable rendering of value data."""
    if reg_type in (RegType.REG_SZ, RegType.REG_EXPAND_SZ):
        text = data.decode("utf-16le", errors="replace")
        if text.endswith("\0"):
            text = text[:-1]
        return f'"{escape_string(text)}"'
    if reg_type == RegType.REG_DWORD and len(data) == 4:
        return f"dword:{int.from_bytes(data, 'little'):08x}"
    return ",".join(f"{b:02x}" for b in data)


class MemoryStore(KeyStore):
    def __init__(self, *, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("regimport.store")
        self.roots: Dict[RootKey, MemoryKey] = {r: MemoryKey(r.name) for r in RootKey}
        self.mutations: List[Tuple] = []
        self._open: Set[int] = set()

    # ------------------------------------------------------------------
    # KeyStore
    # ------------------------------------------------------------------

    def open_or_create_key(self, root: RootKey, sub_path: Optional[str]) -> KeyHandle:
        node = self.roots[root]
        for comp in split_components(sub_path):
            node = node.ensure_child(comp)

        handle = KeyHandle(root=root, sub_path=sub_path, token=node)
        self._open.add(id(handle))
        self.mutations.append(("open", handle.path))
        self.logger.debug("Opened key %s", handle.path)
        return handle

    def close_key(self, handle: Optional[KeyHandle]) -> None:
        if handle is None or handle.closed:
            return
        handle.closed = True
        self._open.discard(id(handle))

    def set_value(self, handle: KeyHandle, name: Optional[str], reg_type: int, data: bytes) -> None:
        if handle.closed or id(handle) not in self._open:
            raise StoreError(msg=f"key handle is not open: {handle.path}")
        node: MemoryKey = handle.token
        node.values[_value_slot(name)] = RegValue(name, int(reg_type), bytes(data))
        self.mutations.append(("set", handle.path, name, int(reg_type), bytes(data)))

    # ------------------------------------------------------------------
    # inspection
    # ------------------------------------------------------------------

    @property
    def open_handle_count(self) -> int:
        return len(self._open)

    @property
    def value_mutations(self) -> List[Tuple]:
        return [m for m in self.mutations if m[0] == "set"]

    def get_key(self, path: str) -> Optional[MemoryKey]:
        root = path_get_rootkey(path)
        if root is None:
            return None
        node: Optional[MemoryKey] = self.roots[root]
        for comp in split_components(split_key_path(path)[1]):
            node = node.child(comp) if node else None
        return node

    def get_value(self, path: str, name: Optional[str] = None) -> Optional[RegValue]:
        key = self.get_key(path)
        if key is None:
            return None
        return key.values.get(_value_slot(name))

    def summary_rows(self) -> List[Tuple[str, str, str, str]]:
        """(key path, value name, type, data) for every stored value, depth-first."""
        rows: List[Tuple[str, str, str, str]] = []

        def walk(prefix: str, node: MemoryKey) -> None:
            for v in node.values.values():
                rows.append((prefix, v.name if v.name else "@", reg_type_name(v.reg_type), format_value_data(v.reg_type, v.data)))
            for child in node.subkeys.values():
                walk(f"{prefix}\\{child.name}", child)

        for root, node in self.roots.items():
            walk(root.name, node)
        return rows
