"""Filesystem locations used by PortfoliOS."""

from __future__ import annotations

import os
from pathlib import Path

# Project/package roots
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT = PACKAGE_ROOT.parent

# Configuration
CONFIG_PATH = PROJECT_ROOT / "config.txt"

# User-specific state (allows running from read-only project directories)
_USER_STATE_ENV = os.environ.get("PORTFOLIOS_STATE_DIR")
USER_STATE_DIR = Path(_USER_STATE_ENV).expanduser() if _USER_STATE_ENV else (Path.home() / ".portfolios")
USER_CONFIG_OVERRIDES_DIR = USER_STATE_DIR / "config_overrides"
PREFERENCES_FILE = USER_STATE_DIR / "preferences.txt"
PROJECTS_CACHE_FILE = USER_STATE_DIR / "projects_cache.json"

# Logging
LOGS_DIR = USER_STATE_DIR / "logs"
MASTER_LOG_FILE = LOGS_DIR / "portfolios.log"


def ensure_directories() -> None:
    for directory in (USER_STATE_DIR, USER_CONFIG_OVERRIDES_DIR, LOGS_DIR):
        directory.mkdir(parents=True, exist_ok=True)


__all__ = [
    "PACKAGE_ROOT",
    "PROJECT_ROOT",
    "CONFIG_PATH",
    "USER_STATE_DIR",
    "USER_CONFIG_OVERRIDES_DIR",
    "PREFERENCES_FILE",
    "PROJECTS_CACHE_FILE",
    "LOGS_DIR",
    "MASTER_LOG_FILE",
    "ensure_directories",
]
