# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/store/base.py
"""
Store interface the parser drives.

The parser only ever needs four operations: resolve a root by name,
open/create a key chain under a root, set a value, close a key.
"""
from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, Optional

from .roots import RootKey, path_get_rootkey


@dataclass(eq=False)
class KeyHandle:
    """An open key, scoped to one import."""
    root: RootKey
    sub_path: Optional[str]
    token: Any = None  # backend specific
    closed: bool = False

    @property
    def path(self) -> str:
        if self.sub_path:
            return f"{self.root.name}\\{self.sub_path}"
        return self.root.name


class KeyStore(abc.ABC):
    """Hierarchical key/value store written by the importer."""

    def resolve_root(self, name: str) -> Optional[RootKey]:
        """Map the first component of a key path to a root, None when unknown."""
        return path_get_rootkey(name)

    @abc.abstractmethod
    def open_or_create_key(self, root: RootKey, sub_path: Optional[str]) -> KeyHandle:
        """Open sub_path under root, creating missing keys. Raises StoreError."""

    @abc.abstractmethod
    def close_key(self, handle: Optional[KeyHandle]) -> None:
        """Release a handle. No-op for None or an already closed handle."""

    @abc.abstractmethod
    def set_value(self, handle: KeyHandle, name: Optional[str], reg_type: int, data: bytes) -> None:
        """Create or overwrite a value; name None is the default value. Raises StoreError."""

    def close(self) -> None:
        """Flush and release backend resources."""
        return None

    def __enter__(self) -> "KeyStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
