"""
Startup for the ledger core.

Loads configuration, sets up logging and opens the process-wide ledger. A
ledger that cannot be opened or migrated stops the process.
"""

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from pocketledger.config import (
    LOG_DIR,
    LOG_FILE,
    LOG_FORMAT,
    ensure_directories,
    get_log_level,
)
from pocketledger.db import (
    LedgerRepository,
    MigrationFailure,
    StoreOpenFailure,
    get_repository,
)

logger = logging.getLogger(__name__)


def configure_logging():
    """Log to the ledger log file and to stdout."""
    ensure_directories()
    logging.basicConfig(
        level=get_log_level(),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(LOG_DIR / LOG_FILE),
            logging.StreamHandler(sys.stdout),
        ],
    )


def start() -> LedgerRepository:
    """
    Open the ledger for the host application.

    Returns:
        The process-wide LedgerRepository

    Raises:
        SystemExit: If the database cannot be opened or migrated
    """
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    configure_logging()

    try:
        repository = get_repository()
    except StoreOpenFailure as e:
        logger.critical(f"Cannot open the ledger: {e}", exc_info=True)
        raise SystemExit(1) from e
    except MigrationFailure as e:
        logger.critical(f"Cannot update the ledger schema: {e}", exc_info=True)
        raise SystemExit(1) from e

    logger.info("Ledger core started")
    return repository
