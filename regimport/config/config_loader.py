# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/config/config_loader.py
"""
Import configuration.

A config file is a YAML (or JSON) mapping, e.g.:

    codepage: cp1252
    buffer_size: 4096
    reject_unsupported_versions: false
    hives:
      HKLM\\SOFTWARE: /mnt/win/Windows/System32/config/SOFTWARE
      HKCU: /mnt/win/Users/alice/NTUSER.DAT
    verbose: 1
    log_file: /var/log/regimport.log

CLI flags override file values (see merge_cli_overrides()).
"""
from __future__ import annotations

import json
import locale
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..core.exceptions import Fatal

DEFAULT_BUFFER_SIZE = 4096


@dataclass
class ImportConfig:
    codepage: Optional[str] = None
    buffer_size: int = DEFAULT_BUFFER_SIZE
    reject_unsupported_versions: bool = False
    hives: Dict[str, str] = field(default_factory=dict)

    verbose: int = 0
    quiet: int = 0
    log_file: Optional[str] = None
    json_logs: bool = False

    def __post_init__(self) -> None:
        try:
            self.buffer_size = int(self.buffer_size)
        except (TypeError, ValueError) as e:
            raise Fatal(code=2, msg=f"buffer_size must be an integer, got {self.buffer_size!r}", cause=e)
        if self.buffer_size < 16:
            raise Fatal(code=2, msg=f"buffer_size too small: {self.buffer_size}")
        if not isinstance(self.hives, dict):
            raise Fatal(code=2, msg="hives must be a mapping of key prefix -> hive file")
        self.hives = {str(k): str(v) for k, v in self.hives.items()}

    def effective_codepage(self) -> str:
        """Code page for single-byte files; the host's preferred encoding unless configured."""
        return self.codepage or locale.getpreferredencoding(False) or "cp1252"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ImportConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise Fatal(code=2, msg=f"unknown config keys: {', '.join(unknown)}")
        return cls(**d)


def _read_structured_file(path: Path) -> Dict[str, Any]:
    """
    Read a JSON/YAML file into a dict.

    Supported:
      - *.json
      - *.yml / *.yaml
      - anything else: JSON first, then YAML
    """
    sfx = path.suffix.lower()
    raw = path.read_text(encoding="utf-8", errors="replace")
    if sfx == ".json":
        parsed = json.loads(raw)
    elif sfx in (".yml", ".yaml"):
        parsed = yaml.safe_load(raw)
    else:
        try:
            parsed = json.loads(raw)
        except ValueError:
            parsed = yaml.safe_load(raw)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError("top-level config must be a mapping/object (dict)")
    return parsed


def load_config(path: Optional[str]) -> ImportConfig:
    if not path:
        return ImportConfig()
    p = Path(path).expanduser()
    if not p.is_file():
        raise Fatal(code=2, msg=f"config file not found: {p}")
    try:
        data = _read_structured_file(p)
    except (ValueError, yaml.YAMLError) as e:
        raise Fatal(code=2, msg=f"invalid config file {p}: {e}", cause=e)
    return ImportConfig.from_dict(data)


def merge_cli_overrides(cfg: ImportConfig, **overrides: Any) -> ImportConfig:
    """
    Apply CLI values on top of file config. None means "not given";
    for hives the mappings are merged with the CLI winning per prefix.
    """
    for k, v in overrides.items():
        if v is None:
            continue
        if k == "hives":
            merged = dict(cfg.hives)
            merged.update(v)
            cfg.hives = merged
            continue
        if not hasattr(cfg, k):
            raise Fatal(code=2, msg=f"unknown config override: {k}")
        setattr(cfg, k, v)
    return cfg
