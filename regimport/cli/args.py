# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/cli/args.py
from __future__ import annotations

import argparse
from typing import Dict, List, Optional, Sequence

from ..core.exceptions import Fatal
from ..core.logger import c

EPILOG = """\
Config file (YAML):
  codepage: cp1252
  hives:
    HKLM\\SOFTWARE: /mnt/win/Windows/System32/config/SOFTWARE
    HKCU: /mnt/win/Users/alice/NTUSER.DAT

Examples:
  regimport --dry-run setup.reg
  regimport --hive 'HKLM\\SOFTWARE=/tmp/SOFTWARE' setup.reg
"""


class HelpFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
    """Combines raw description formatting with default value display in help."""


def _add_config_logging(p: argparse.ArgumentParser) -> None:
    from .. import __version__

    p.add_argument("-c", "--config", dest="config", default=None, help="YAML/JSON config file.")
    p.add_argument("--version", action="version", version=__version__)
    p.add_argument("-v", "--verbose", action="count", default=None, help="Verbosity: -v, -vv, -vvv (trace).")
    p.add_argument("-q", "--quiet", action="count", default=None, help="Less output: -q warnings, -qq errors.")
    p.add_argument("--log-file", dest="log_file", default=None, help="Write logs to file.")
    p.add_argument("--json-logs", dest="json_logs", action="store_true", default=None, help="Emit NDJSON logs.")


def _add_import_knobs(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--codepage",
        dest="codepage",
        default=None,
        help="Code page for files without a UTF-16 byte-order mark (default: host preferred encoding).",
    )
    p.add_argument(
        "--hive",
        dest="hive",
        action="append",
        default=[],
        metavar="PREFIX=PATH",
        help="Map a key prefix to a local hive file (repeatable), e.g. 'HKLM\\SOFTWARE=/tmp/SOFTWARE'.",
    )
    p.add_argument("--dry-run", dest="dry_run", action="store_true", help="Import into memory and print the result.")
    p.add_argument(
        "--strict-versions",
        dest="reject_unsupported_versions",
        action="store_true",
        default=None,
        help="Fail REGEDIT4 / version 5.00 imports after parsing them.",
    )
    p.add_argument("file", help="Registry file (.reg) to import.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="regimport",
        description=c("regimport: import .reg files into registry hives", "green", ["bold"]),
        formatter_class=HelpFormatter,
        epilog=EPILOG,
    )
    _add_config_logging(p)
    _add_import_knobs(p)
    return p


def parse_hive_specs(specs: List[str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for spec in specs:
        prefix, sep, path = spec.partition("=")
        if not sep or not prefix.strip() or not path.strip():
            raise Fatal(code=2, msg=f"--hive expects PREFIX=PATH, got: {spec!r}")
        out[prefix.strip()] = path.strip()
    return out


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
