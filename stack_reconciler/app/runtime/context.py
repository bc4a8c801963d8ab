"""Process-wide runtime context."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from loguru import logger

from stack_reconciler.app.runtime.config.config_data import ConfigData
from stack_reconciler.app.runtime.config.config_loader import load_config

CONFIG_PATH_ENV = "STACK_RECONCILER_CONFIG"


@lru_cache(maxsize=1)
def get_config() -> ConfigData:
    """Load config.yaml once per process.

    The file location comes from ``STACK_RECONCILER_CONFIG`` (default:
    ``config.yaml`` in the working directory). A missing file yields the
    built-in defaults.
    """
    path = Path(os.getenv(CONFIG_PATH_ENV, "config.yaml"))
    if not path.exists():
        logger.warning(f"Config file {path} not found, using defaults")
        return ConfigData()
    return load_config(path)
