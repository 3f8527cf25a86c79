# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/store/hive.py
"""
Registry store backed by local hive files (hivex).

Each hive file is mounted at a key prefix, for example:

    HKLM\\SOFTWARE -> /mnt/win/Windows/System32/config/SOFTWARE
    HKCU           -> /mnt/win/Users/alice/NTUSER.DAT

A key is written into the hive with the longest matching prefix; keys no
mount covers fail to open. Hives are opened for writing on first use and
committed by close().
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..core.exceptions import Fatal, StoreError, wrap_store
from ..core.optional_imports import HIVEX_AVAILABLE, hivex
from .base import KeyHandle, KeyStore
from .roots import RootKey, root_from_name, split_components, split_key_path

HiveOpener = Callable[[Path], Any]

# ---------------------------------------------------------------------------
# Hivex node normalization
# ---------------------------------------------------------------------------

NodeLike = Union[int, None]


def _node_id(n: NodeLike) -> int:
    """Convert node to int, treating None as 0."""
    if n is None:
        return 0
    try:
        return int(n)
    except (TypeError, ValueError):
        return 0


def _ensure_child(h: Any, parent: NodeLike, name: str) -> Tuple[int, bool]:
    """Get or create child node. Returns (node, created)."""
    pid = _node_id(parent)
    if pid == 0:
        raise StoreError(msg=f"invalid parent node while ensuring child {name}")

    ch = _node_id(h.node_get_child(pid, name))
    if ch != 0:
        return ch, False
    ch = _node_id(h.node_add_child(pid, name))
    if ch == 0:
        raise StoreError(msg=f"failed to create child key {name}")
    return ch, True


def _mk_reg_value(name: Optional[str], t: int, value: bytes) -> Dict[str, Any]:
    """hivex value dict; the default value has an empty name."""
    return {"key": name or "", "t": int(t), "value": bytes(value)}


# ---------------------------------------------------------------------------
# Hive files
# ---------------------------------------------------------------------------


def _is_probably_regf(path: Path) -> bool:
    """Windows registry hives start with ASCII 'regf'."""
    try:
        with path.open("rb") as f:
            return f.read(4) == b"regf"
    except OSError:
        return False


def _open_hive_local(path: Path) -> Any:
    """Open local hive file for writing, with validation."""
    if not HIVEX_AVAILABLE:
        raise Fatal(code=2, msg="hivex Python bindings are not installed; use --dry-run or install hivex")
    if not path.exists():
        raise StoreError(msg=f"hive local file missing: {path}")
    st = path.stat()
    if st.st_size < 4096:
        raise StoreError(msg=f"hive local file too small ({st.st_size} bytes): {path}")
    if not _is_probably_regf(path):
        raise StoreError(msg=f"hive local file does not look like regf hive: {path}")
    return hivex.Hivex(str(path), write=1)


def _commit(h: Any) -> None:
    """Commit hive changes (python-hivex wants an explicit None filename)."""
    try:
        h.commit(None)
    except TypeError:
        h.commit()


@dataclass
class HiveMount:
    prefix: str
    root: RootKey
    components: List[str]
    path: Path

    def covers(self, root: RootKey, comps: List[str]) -> bool:
        if root is not self.root or len(comps) < len(self.components):
            return False
        return [c.lower() for c in comps[: len(self.components)]] == [c.lower() for c in self.components]


def parse_mount(prefix: str, path: str) -> HiveMount:
    root_name, sub = split_key_path(prefix.strip().strip("\\"))
    root = root_from_name(root_name)
    if root is None:
        raise Fatal(code=2, msg=f"unknown registry root in hive mapping: {prefix!r}")
    return HiveMount(prefix=prefix, root=root, components=split_components(sub), path=Path(path).expanduser())


class HiveStore(KeyStore):
    def __init__(
        self,
        mounts: Dict[str, str],
        *,
        opener: Optional[HiveOpener] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger("regimport.store")
        self.mounts = [parse_mount(k, v) for k, v in mounts.items()]
        if not self.mounts:
            raise Fatal(code=2, msg="no hive files mapped; pass --hive PREFIX=PATH or use --dry-run")
        self._opener: HiveOpener = opener or _open_hive_local
        self._handles: Dict[str, Any] = {}
        self._dirty: Dict[str, bool] = {}

    def resolve_root(self, name: str) -> Optional[RootKey]:
        root = super().resolve_root(name)
        if root is None or not any(m.root is root for m in self.mounts):
            return None
        return root

    def _find_mount(self, root: RootKey, comps: List[str]) -> Optional[HiveMount]:
        best: Optional[HiveMount] = None
        for m in self.mounts:
            if m.covers(root, comps) and (best is None or len(m.components) > len(best.components)):
                best = m
        return best

    def _hive(self, mount: HiveMount) -> Any:
        h = self._handles.get(mount.prefix)
        if h is None:
            self.logger.info("Opening hive %s for %s", mount.path, mount.prefix)
            try:
                h = self._opener(mount.path)
            except (StoreError, Fatal):
                raise
            except Exception as e:
                raise wrap_store(f"cannot open hive {mount.path}", e, hive=str(mount.path))
            self._handles[mount.prefix] = h
            self._dirty[mount.prefix] = False
        return h

    def open_or_create_key(self, root: RootKey, sub_path: Optional[str]) -> KeyHandle:
        comps = split_components(sub_path)
        mount = self._find_mount(root, comps)
        if mount is None:
            raise StoreError(msg=f"no hive mapped for {root.name}\\{sub_path or ''}".rstrip("\\"))

        h = self._hive(mount)
        node = _node_id(h.root())
        try:
            for comp in comps[len(mount.components):]:
                node, created = _ensure_child(h, node, comp)
                if created:
                    # new keys must reach disk even when no value follows
                    self._dirty[mount.prefix] = True
        except StoreError:
            raise
        except Exception as e:
            raise wrap_store(f"failed to create key {sub_path}", e, hive=str(mount.path))

        return KeyHandle(root=root, sub_path=sub_path, token=(mount.prefix, node))

    def close_key(self, handle: Optional[KeyHandle]) -> None:
        if handle is None:
            return
        handle.closed = True

    def set_value(self, handle: KeyHandle, name: Optional[str], reg_type: int, data: bytes) -> None:
        if handle.closed:
            raise StoreError(msg=f"key handle is not open: {handle.path}")
        prefix, node = handle.token
        h = self._handles[prefix]
        try:
            h.node_set_value(node, _mk_reg_value(name, reg_type, data))
        except Exception as e:
            raise wrap_store(f"failed to set value {name or '@'} under {handle.path}", e)
        self._dirty[prefix] = True

    def close(self) -> None:
        """Commit modified hives and close them all; the first commit error is raised after cleanup."""
        errors: List[Tuple[str, BaseException]] = []
        for prefix, h in list(self._handles.items()):
            try:
                if self._dirty.get(prefix):
                    _commit(h)
                    self.logger.info("Committed hive for %s", prefix)
            except Exception as e:
                errors.append((prefix, e))
            finally:
                close = getattr(h, "close", None)
                if callable(close):
                    close()
        self._handles.clear()
        self._dirty.clear()
        if errors:
            prefix, e = errors[0]
            raise wrap_store(f"failed to commit hive for {prefix}", e, failed=len(errors))
