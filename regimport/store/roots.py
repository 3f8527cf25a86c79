# SPDX-License-Identifier: LGPL-3.0-or-later
# regimport/store/roots.py
"""
Well-known registry roots and key path splitting.

A key path is ROOT\\sub\\path where ROOT is a long (HKEY_LOCAL_MACHINE) or
short (HKLM) root name, matched case-insensitively.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple


class RootKey(Enum):
    HKEY_LOCAL_MACHINE = "HKLM"
    HKEY_CURRENT_USER = "HKCU"
    HKEY_CLASSES_ROOT = "HKCR"
    HKEY_USERS = "HKU"
    HKEY_CURRENT_CONFIG = "HKCC"

    @property
    def short_name(self) -> str:
        return self.value


_ROOTS_BY_NAME: Dict[str, RootKey] = {}
for _root in RootKey:
    _ROOTS_BY_NAME[_root.name.lower()] = _root
    _ROOTS_BY_NAME[_root.value.lower()] = _root


def split_key_path(path: str) -> Tuple[str, Optional[str]]:
    """Split "ROOT\\sub\\path" into ("ROOT", "sub\\path"); the sub path is None without a backslash."""
    root, sep, rest = path.partition("\\")
    return root, (rest if sep else None)


def root_from_name(name: str) -> Optional[RootKey]:
    return _ROOTS_BY_NAME.get(name.lower())


def path_get_rootkey(path: str) -> Optional[RootKey]:
    """Resolve the root component of a key path."""
    root, _ = split_key_path(path)
    return root_from_name(root)


def split_components(sub_path: Optional[str]) -> List[str]:
    """Sub path components with empty ones dropped ("a\\\\b\\" -> ["a", "b"])."""
    if not sub_path:
        return []
    return [p for p in sub_path.split("\\") if p]
