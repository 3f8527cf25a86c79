# SPDX-License-Identifier: LGPL-3.0-or-later
from .config_loader import DEFAULT_BUFFER_SIZE, ImportConfig, load_config, merge_cli_overrides

__all__ = ["DEFAULT_BUFFER_SIZE", "ImportConfig", "load_config", "merge_cli_overrides"]
