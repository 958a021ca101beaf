"""
Configuration module for pocketledger.

Contains constants, settings, and configuration values used throughout the ledger.
"""

import os
from pathlib import Path

# Version
VERSION = "0.1.0"

# Application paths (relative to the working directory of the host process)
DATA_DIR = Path("data")
LOG_DIR = Path("logs")

# Database configuration
DEFAULT_DB_PATH = DATA_DIR / "ledger.db"
DB_PATH_ENV_VAR = "POCKETLEDGER_DB_PATH"

# Monetary defaults
DEFAULT_CURRENCY = "EUR"
DEFAULT_SCALE = 2
DEFAULT_EXCHANGE_RATE = 1.0

# Presentation defaults shared by every entity
DEFAULT_COLOR = "#000000"
DEFAULT_ICON = "mdi:bank"
DEFAULT_TYPE = "other"

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "pocketledger.log"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Error messages
ERROR_MESSAGES = {
    "store_open": "Could not open the ledger database at {path}",
    "migration": "Migration '{name}' failed",
    "constraint": "The value violates a ledger constraint",
    "closed": "The ledger database connection is closed",
}


def get_db_path() -> Path:
    """Get the configured database path, honouring POCKETLEDGER_DB_PATH."""
    override = os.getenv(DB_PATH_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_DB_PATH


def ensure_directories():
    """Ensure required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)


def get_log_level():
    """Get the configured log level."""
    import logging

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(os.getenv("LOG_LEVEL", LOG_LEVEL).upper(), logging.INFO)
