# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import sys
import traceback
from typing import Optional, Sequence

from ..config.config_loader import ImportConfig, load_config, merge_cli_overrides
from ..core.exceptions import Fatal, RegImportError, format_exception_for_cli
from ..core.logger import Log
from ..importer import reg_import
from ..store.base import KeyStore
from ..store.hive import HiveStore
from ..store.memory import MemoryStore
from .args import parse_args, parse_hive_specs
from .summary import render_dry_run


def _print_stderr(msg: str) -> None:
    print(msg, file=sys.stderr)


def _load(argv: Optional[Sequence[str]]):
    args = parse_args(argv)
    cfg = load_config(args.config)
    cfg = merge_cli_overrides(
        cfg,
        codepage=args.codepage,
        verbose=args.verbose,
        quiet=args.quiet,
        log_file=args.log_file,
        json_logs=args.json_logs,
        reject_unsupported_versions=args.reject_unsupported_versions,
        hives=parse_hive_specs(args.hive) or None,
    )
    logger = Log.setup(cfg.verbose, cfg.log_file, quiet=cfg.quiet, json_logs=cfg.json_logs)
    return args, cfg, logger


def _run(args, cfg: ImportConfig, logger: logging.Logger) -> int:
    store: KeyStore
    if args.dry_run:
        Log.step(logger, "Dry run: staging values in memory", file=args.file)
        store = MemoryStore(logger=logger.getChild("store"))
    else:
        store = HiveStore(cfg.hives, logger=logger.getChild("store"))
    with store:
        result = reg_import(args.file, store, config=cfg, logger=logger)
    if args.dry_run:
        render_dry_run(store, result)  # type: ignore[arg-type]
    return result.exit_code


def main(argv: Optional[Sequence[str]] = None) -> int:
    logger: Optional[logging.Logger] = None

    # Phase 1: args + config (Fatal can happen here)
    try:
        args, cfg, logger = _load(argv)
    except Fatal as e:
        _print_stderr(f"💥 ERROR    {e}")
        return e.code
    except KeyboardInterrupt:
        _print_stderr("Interrupted by user (Ctrl+C).")
        return 130

    # Phase 2: import
    try:
        return _run(args, cfg, logger)
    except RegImportError as e:
        Log.fail(logger, format_exception_for_cli(e, verbose=cfg.verbose))
        return e.code
    except KeyboardInterrupt:
        logger.warning("Interrupted by user (Ctrl+C).")
        return 130
    except Exception as e:
        # Unexpected exceptions should not fail silently.
        logger.error("💥 UNHANDLED %s: %s", type(e).__name__, e)
        logger.debug("%s", traceback.format_exc())
        return 1


def entrypoint() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    entrypoint()
