"""
Database connection and initialization.
"""

import aiosqlite
from pathlib import Path
from timeline_pro.config import settings
from timeline_pro.logging import get_logger

logger = get_logger('database')

SCHEMA_PATH = Path(__file__).parent / "init_db.sql"


async def connect(db_path: str) -> aiosqlite.Connection:
    """
    Open a connection with dict-like rows and foreign keys enforced.

    :param db_path: Path to the SQLite database file
    :type db_path: str
    :return: Open database connection; the caller closes it
    :rtype: aiosqlite.Connection
    """
    db = await aiosqlite.connect(db_path)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA foreign_keys = ON")
    return db


async def init_db(db_path: str | None = None):
    """
    Create the users and timelines tables if they do not exist.

    :param db_path: Database file; defaults to ``settings.DATABASE_PATH``
    :type db_path: str | None
    """
    path = Path(db_path or settings.DATABASE_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(path) as db:
        await db.executescript(SCHEMA_PATH.read_text())
        await db.commit()
    logger.info(f"Database initialized at {path}")
