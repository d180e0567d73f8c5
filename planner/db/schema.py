"""Database schema management.

Schema changes live in ``migrations/`` as versioned SQL files and are
applied in order at startup.
"""

import logging

from planner.db.migrations import get_current_version, run_migrations

logger = logging.getLogger(__name__)


async def ensure_schema() -> None:
    """Apply pending migrations. Safe to call repeatedly."""
    current_version = await get_current_version()
    logger.info("Current schema version: %d", current_version)

    applied = await run_migrations()

    if applied > 0:
        new_version = await get_current_version()
        logger.info("Schema updated from version %d to %d", current_version, new_version)
    else:
        logger.debug("Schema is up to date at version %d", current_version)

