# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/cli/summary.py
"""Dry-run report: what the import would have written."""
from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..importer import ImportResult
from ..store.memory import MemoryStore


def render_dry_run(store: MemoryStore, result: ImportResult, *, console: Optional[Console] = None) -> None:
    con = console or Console(stderr=False)

    table = Table(title="Staged registry values", show_lines=False)
    table.add_column("Key", overflow="fold")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Data", overflow="fold")
    for key, name, reg_type, data in store.summary_rows():
        table.add_row(key, name, reg_type, data)
    con.print(table)

    s = result.stats
    body = (
        f"version: {result.version.value if result.version else '-'}\n"
        f"encoding: {result.encoding.value if result.encoding else '-'}\n"
        f"lines: {s.lines_read}  keys: {s.keys_opened}  values: {s.values_set}\n"
        f"key failures: {s.key_open_failures}  dropped values: {s.values_dropped}"
    )
    con.print(Panel(body, title="OK" if result.ok else "FAILED", expand=False))
